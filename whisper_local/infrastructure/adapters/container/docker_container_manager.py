"""
Docker container manager - docker SDK behind the async IContainerManager port
"""

from typing import List, Optional

import docker
import structlog
from docker.errors import DockerException
from docker.utils import parse_repository_tag

from whisper_local.core.exceptions import ContainerError
from whisper_local.core.ports.i_container_manager import IContainerManager, ProgressCallback
from whisper_local.utils.async_helpers import run_in_thread

logger = structlog.get_logger()


class DockerContainerManager(IContainerManager):
    """
    Runs the inference server through the local Docker daemon.

    The docker SDK is blocking, so every call runs in the default executor.
    The client is created on first use so that constructing the manager
    never touches the daemon.
    """

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """
        Args:
            client: Preconfigured DockerClient (default: docker.from_env())
        """
        self._client = client

    def _get_client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                raise ContainerError(f"Docker daemon not available: {e}") from e
        return self._client

    def _pull_sync(self, image: str, on_progress: Optional[ProgressCallback]) -> None:
        repository, tag = parse_repository_tag(image)
        client = self._get_client()

        # Raw event dicts stay in here, callers only see status strings
        for event in client.api.pull(repository, tag=tag or "latest", stream=True, decode=True):
            if "error" in event:
                raise ContainerError(f"Image pull failed: {event['error']}")
            status = event.get("status")
            if status and on_progress:
                on_progress(status)

    async def pull_image(self, image: str,
                         on_progress: Optional[ProgressCallback] = None) -> None:
        """Pull image. on_progress is called from the worker thread."""
        logger.info("docker_pulling_image", image=image)
        try:
            await run_in_thread(self._pull_sync, image, on_progress)
        except DockerException as e:
            raise ContainerError(f"Image pull failed: {e}") from e
        logger.info("docker_image_pulled", image=image)

    async def create_container(self, image: str, env: List[str],
                               port_binding: dict, auto_remove: bool = True) -> str:
        def _create():
            return self._get_client().containers.create(
                image,
                environment=env,
                ports=port_binding,
                auto_remove=auto_remove,
                detach=True
            )

        try:
            container = await run_in_thread(_create)
        except DockerException as e:
            raise ContainerError(f"Failed to create container: {e}") from e

        logger.info("docker_container_created", container_id=container.id, image=image)
        return container.id

    async def _call(self, container_id: str, method: str) -> None:
        def _run():
            container = self._get_client().containers.get(container_id)
            getattr(container, method)()

        try:
            await run_in_thread(_run)
        except DockerException as e:
            raise ContainerError(f"Container {method} failed for {container_id}: {e}") from e

    async def start(self, container_id: str) -> None:
        await self._call(container_id, "start")

    async def stop(self, container_id: str) -> None:
        await self._call(container_id, "stop")

    async def remove(self, container_id: str) -> None:
        await self._call(container_id, "remove")
