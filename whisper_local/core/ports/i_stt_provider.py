"""Speech-to-text provider port"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass
class STTOptions:
    """Per-call options; None fields fall back to provider defaults"""
    language: Optional[str] = None
    word_timestamps: Optional[bool] = None


@dataclass
class STTTranscriptChunk:
    """Partial transcript as delivered to on_partial callbacks"""
    text: str
    is_final: bool = False
    confidence: Optional[float] = None


PartialCallback = Callable[[STTTranscriptChunk], None]


@dataclass
class ProviderMetadata:
    """Static description of an STT provider"""
    name: str
    version: str
    type: str
    description: str
    capabilities: List[str] = field(default_factory=list)
    local: bool = False
    docker: bool = False
    homepage: Optional[str] = None
    requires_docker: List[str] = field(default_factory=list)
    install: List[dict] = field(default_factory=list)


class ISTTSession(ABC):
    """Abstract transcription session for one utterance"""

    @abstractmethod
    def send_audio(self, audio: bytes) -> None:
        pass

    @abstractmethod
    def end_audio(self) -> None:
        pass

    @abstractmethod
    def on_partial(self, callback: PartialCallback) -> None:
        pass

    @abstractmethod
    async def wait_for_transcript(self, timeout: float = 30.0) -> str:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class ISTTProvider(ABC):
    """Abstract speech-to-text provider"""

    metadata: ProviderMetadata

    @abstractmethod
    def validate_config(self) -> None:
        pass

    @abstractmethod
    async def create_session(self, options: Optional[STTOptions] = None) -> ISTTSession:
        pass

    @abstractmethod
    async def transcribe_once(self, audio: bytes,
                              options: Optional[STTOptions] = None) -> str:
        """
        Transcribe a complete utterance in one call

        Args:
            audio: WAV audio bytes
            options: Overrides for provider defaults

        Returns:
            Transcribed text
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        pass
