"""
Whisper Local STT provider - faster-whisper server managed in Docker
"""

from typing import Any, Mapping, Optional, Union

import structlog

from whisper_local.application.services.server_lifecycle import (
    POLL_INTERVAL,
    START_TIMEOUT,
    ServerLifecycle,
)
from whisper_local.application.services.transcription_session import TranscriptionSession
from whisper_local.core.config.settings import WhisperLocalConfig
from whisper_local.core.ports.i_container_manager import IContainerManager
from whisper_local.core.ports.i_stt_provider import ISTTProvider, ProviderMetadata, STTOptions
from whisper_local.infrastructure.adapters.stt.remote_transcriber import RemoteTranscriber

logger = structlog.get_logger()

PROVIDER_METADATA = ProviderMetadata(
    name="whisper-local",
    version="1.0.0",
    type="stt",
    description="Local STT using faster-whisper in Docker",
    capabilities=["batch"],
    local=True,
    docker=True,
    homepage="https://github.com/SYSTRAN/faster-whisper",
    requires_docker=["fedirz/faster-whisper-server:latest"],
    install=[
        {
            'kind': "docker",
            'image': "fedirz/faster-whisper-server",
            'tag': "latest-cpu",
            'label': "Pull faster-whisper server image",
        }
    ],
)


class WhisperLocalProvider(ISTTProvider):
    """
    STT provider composing server lifecycle, HTTP client and sessions.

    Construction never fails on bad configuration, call validate_config().
    """

    metadata = PROVIDER_METADATA

    def __init__(self, config: Union[WhisperLocalConfig, Mapping[str, Any], None] = None,
                 container_manager: Optional[IContainerManager] = None,
                 transcriber: Optional[RemoteTranscriber] = None,
                 start_timeout: float = START_TIMEOUT,
                 poll_interval: float = POLL_INTERVAL):
        """
        Args:
            config: WhisperLocalConfig or a dict of overrides for the defaults
            container_manager: Container runtime (default: Docker)
            transcriber: HTTP client (default: one pointed at localhost:<port>)
            start_timeout: Server start ceiling in seconds
            poll_interval: Health poll interval while starting
        """
        if isinstance(config, WhisperLocalConfig):
            self._config = config
        else:
            self._config = WhisperLocalConfig.from_dict(config)

        if container_manager is None:
            from whisper_local.infrastructure.adapters.container.docker_container_manager import (
                DockerContainerManager,
            )
            container_manager = DockerContainerManager()

        self.transcriber = transcriber or RemoteTranscriber(self._config.server_url)
        self.lifecycle = ServerLifecycle(
            self._config,
            container_manager,
            self.transcriber,
            start_timeout=start_timeout,
            poll_interval=poll_interval
        )

        logger.info("whisper_local_provider_initialized",
                    model=self._config.model,
                    port=self._config.port,
                    language=self._config.language)

    @property
    def config(self) -> WhisperLocalConfig:
        return self._config

    @property
    def model(self) -> str:
        return self._config.model

    def validate_config(self) -> None:
        """
        Raises:
            InvalidModelError: Unknown model
            InvalidPortError: Port outside 1024-65535
        """
        self._config.validate()

    def _new_session(self, options: Optional[STTOptions]) -> TranscriptionSession:
        # Explicit options win over provider defaults
        options = options or STTOptions()
        language = options.language if options.language is not None else self._config.language
        word_timestamps = (options.word_timestamps
                           if options.word_timestamps is not None
                           else self._config.word_timestamps)
        return TranscriptionSession(self.transcriber, language, word_timestamps=word_timestamps)

    async def create_session(self, options: Optional[STTOptions] = None) -> TranscriptionSession:
        """
        Ensure the server is running and open a new session.

        Raises:
            ServerStartTimeoutError: Server did not become healthy in time
        """
        await self.lifecycle.ensure_running()
        return self._new_session(options)

    async def transcribe_once(self, audio: bytes,
                              options: Optional[STTOptions] = None) -> str:
        """
        Transcribe a complete utterance.

        Uses the transcriber's request bound (60 s by default) rather than
        the 30 s session wait.
        """
        await self.lifecycle.ensure_running()

        session = self._new_session(options)
        try:
            session.send_audio(audio)
            session.end_audio()
            return await session.wait_for_transcript(timeout=self.transcriber.request_timeout)
        finally:
            await session.close()

    async def health_check(self) -> bool:
        return await self.lifecycle.health_check()

    async def shutdown(self) -> None:
        """Stop the managed container, if any. Safe to call repeatedly."""
        await self.lifecycle.shutdown()
