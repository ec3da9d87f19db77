"""Application Services"""

from whisper_local.application.services.server_lifecycle import ServerLifecycle
from whisper_local.application.services.transcription_session import TranscriptionSession
from whisper_local.application.services.whisper_local_provider import WhisperLocalProvider

__all__ = ['ServerLifecycle', 'TranscriptionSession', 'WhisperLocalProvider']
