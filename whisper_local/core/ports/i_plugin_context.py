"""Host plugin context port"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from whisper_local.core.ports.i_stt_provider import ISTTProvider


class IPluginContext(ABC):
    """
    What the host application hands to a plugin on init.

    ``log`` is the host's structured log sink and must offer
    debug/info/warning/error methods.
    """

    log: Any

    @abstractmethod
    def register_config_schema(self, name: str, schema: dict) -> None:
        pass

    @abstractmethod
    def unregister_config_schema(self, name: str) -> None:
        pass

    @abstractmethod
    def get_config(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def register_stt_provider(self, provider: ISTTProvider) -> None:
        pass
