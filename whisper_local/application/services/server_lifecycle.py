"""
Server lifecycle - keeps a healthy faster-whisper server available

States:
- IDLE: no start in flight, server may or may not be up
- STARTING: one shared start task pulls/creates/starts the container
  and polls health until it answers or the ceiling is hit
"""

import asyncio
from typing import Optional

import structlog

from whisper_local.core.config.settings import WhisperLocalConfig
from whisper_local.core.exceptions import ServerStartTimeoutError
from whisper_local.core.ports.i_container_manager import IContainerManager
from whisper_local.infrastructure.adapters.stt.remote_transcriber import RemoteTranscriber

logger = structlog.get_logger()

CONTAINER_PORT = "8000/tcp"

START_TIMEOUT = 60.0
POLL_INTERVAL = 1.0


class ServerLifecycle:
    """
    Guarantees the inference endpoint is healthy before transcription.

    Concurrent ensure_running() calls share a single start task, so a
    server that is down gets exactly one container start.
    """

    def __init__(self, config: WhisperLocalConfig,
                 container_manager: IContainerManager,
                 transcriber: RemoteTranscriber,
                 start_timeout: float = START_TIMEOUT,
                 poll_interval: float = POLL_INTERVAL):
        """
        Args:
            config: Provider configuration (image, model, port, language)
            container_manager: Runtime used to start/stop the server
            transcriber: Client whose health check decides readiness
            start_timeout: Max seconds to wait for health after start
            poll_interval: Seconds between health checks while starting
        """
        self.config = config
        self.container_manager = container_manager
        self.transcriber = transcriber
        self.start_timeout = start_timeout
        self.poll_interval = poll_interval

        self._container_id: Optional[str] = None
        self._starting: Optional[asyncio.Task] = None

    @property
    def container_id(self) -> Optional[str]:
        """Id of the container started by this instance, if any"""
        return self._container_id

    @property
    def is_starting(self) -> bool:
        return self._starting is not None

    async def health_check(self) -> bool:
        return await self.transcriber.check_health()

    async def ensure_running(self) -> None:
        """
        Return once the server is healthy, starting it if needed.

        Raises:
            ServerStartTimeoutError: Server did not become healthy in time
            ContainerError: Container could not be created or started
        """
        # Join a start in flight instead of racing a fresh health check
        if self._starting is not None:
            await asyncio.shield(self._starting)
            return

        if await self.health_check():
            return

        # Another caller may have begun a start while we were probing
        if self._starting is None:
            logger.info("whisper_server_not_healthy", port=self.config.port)
            self._starting = asyncio.ensure_future(self._start_server())
            self._starting.add_done_callback(self._clear_start_guard)

        await asyncio.shield(self._starting)

    def _clear_start_guard(self, task: asyncio.Task) -> None:
        if self._starting is task:
            self._starting = None
        # Mark the outcome as retrieved even if every waiter was cancelled
        if not task.cancelled():
            task.exception()

    async def _start_server(self) -> None:
        await self._start_container()

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.start_timeout

        while loop.time() < deadline:
            if await self.health_check():
                logger.info("whisper_server_ready", port=self.config.port)
                return
            await asyncio.sleep(self.poll_interval)

        logger.error("whisper_server_start_timeout",
                     port=self.config.port,
                     timeout=self.start_timeout)
        # The container never became healthy, do not leave it running
        await self._release_container()
        raise ServerStartTimeoutError("whisper_server_start", self.start_timeout)

    async def _start_container(self) -> None:
        logger.info("whisper_container_starting",
                    image=self.config.image,
                    model=self.config.model)

        try:
            await self.container_manager.pull_image(
                self.config.image,
                on_progress=self._on_pull_progress
            )
        except Exception as e:
            # Image may already be present locally
            logger.warning("whisper_image_pull_failed",
                           image=self.config.image,
                           error=str(e))

        container_id = await self.container_manager.create_container(
            self.config.image,
            env=[
                f"WHISPER_MODEL={self.config.model}",
                f"WHISPER_LANGUAGE={self.config.language}",
            ],
            port_binding={CONTAINER_PORT: self.config.port},
            auto_remove=True
        )

        try:
            await self.container_manager.start(container_id)
        except Exception:
            # auto_remove only applies to containers that ran
            try:
                await self.container_manager.remove(container_id)
            except Exception as e:
                logger.warning("whisper_container_cleanup_failed",
                               container_id=container_id,
                               error=str(e))
            raise

        self._container_id = container_id

        logger.info("whisper_container_started", container_id=container_id)

    def _on_pull_progress(self, status: str) -> None:
        logger.debug("whisper_image_pull_progress", status=status)

    async def _release_container(self) -> None:
        container_id = self._container_id
        if container_id is None:
            return

        try:
            await self.container_manager.stop(container_id)
            await self.container_manager.remove(container_id)
            logger.info("whisper_container_stopped", container_id=container_id)
        except Exception as e:
            logger.warning("whisper_container_cleanup_failed",
                           container_id=container_id,
                           error=str(e))
        finally:
            self._container_id = None

    async def shutdown(self) -> None:
        """Stop and remove the owned container. Never raises."""
        await self._release_container()
