# whisper_local/core/config/container.py

"""
Dependency Injection Container - composition root for the STT provider
"""

import structlog
from typing import Optional

from whisper_local.core.config.settings import WhisperLocalConfig, load_config
from whisper_local.core.exceptions import ContainerInitializationError
from whisper_local.core.ports.i_container_manager import IContainerManager
from whisper_local.infrastructure.adapters.container.docker_container_manager import DockerContainerManager
from whisper_local.infrastructure.adapters.stt.remote_transcriber import RemoteTranscriber
from whisper_local.application.services.whisper_local_provider import WhisperLocalProvider

logger = structlog.get_logger()


class Container:
    """
    Dependency Injection Container
    Builds and owns the single provider instance of this process.
    """

    def __init__(self, config: Optional[WhisperLocalConfig] = None,
                 config_path: Optional[str] = "config/whisper_local.yaml",
                 container_manager: Optional[IContainerManager] = None):
        """
        Args:
            config: Ready configuration (skips file/env loading)
            config_path: YAML config path used when config is None
            container_manager: Override for the Docker container manager
        """
        logger.info("container_initialization_started")

        try:
            # Step 1: Configuration
            self.config = config or load_config(config_path)
            self.config.validate()

            # Step 2: Infrastructure
            self.container_manager = container_manager or DockerContainerManager()
            self.transcriber = RemoteTranscriber(self.config.server_url)

            # Step 3: Provider
            self.provider = WhisperLocalProvider(
                self.config,
                container_manager=self.container_manager,
                transcriber=self.transcriber
            )

            logger.info("container_initialization_completed",
                        model=self.config.model,
                        port=self.config.port)

        except Exception as e:
            logger.error("container_initialization_failed", error=str(e))
            raise ContainerInitializationError(f"Failed to initialize container: {e}") from e

    async def close(self) -> None:
        """Release everything the container started"""
        await self.provider.shutdown()
        logger.info("container_closed")


def setup_container(config_path: Optional[str] = "config/whisper_local.yaml") -> Container:
    """
    Setup and initialize dependency injection container

    Returns:
        Fully initialized Container instance

    Raises:
        ContainerInitializationError: If configuration or wiring fails
    """
    return Container(config_path=config_path)
