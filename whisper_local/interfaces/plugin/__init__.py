"""Host plugin adapter"""

from whisper_local.interfaces.plugin.whisper_local_plugin import MANIFEST, WhisperLocalPlugin
from whisper_local.interfaces.plugin.status_tools import StatusTools, get_tool_declarations

__all__ = ['MANIFEST', 'WhisperLocalPlugin', 'StatusTools', 'get_tool_declarations']
