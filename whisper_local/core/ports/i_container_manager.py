"""Container manager port"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

ProgressCallback = Callable[[str], None]


class IContainerManager(ABC):
    """Abstract container runtime used to run the inference server"""

    @abstractmethod
    async def pull_image(self, image: str,
                         on_progress: Optional[ProgressCallback] = None) -> None:
        """
        Pull image, completing when the pull finishes.

        Args:
            image: Image reference (repo[:tag])
            on_progress: Called with each progress status line
        """
        pass

    @abstractmethod
    async def create_container(self, image: str, env: List[str],
                               port_binding: dict, auto_remove: bool = True) -> str:
        """
        Create (but do not start) a container.

        Args:
            image: Image reference
            env: Environment as KEY=value strings
            port_binding: Container port -> host port, e.g. {"8000/tcp": 8765}
            auto_remove: Remove container when it exits

        Returns:
            Container id
        """
        pass

    @abstractmethod
    async def start(self, container_id: str) -> None:
        pass

    @abstractmethod
    async def stop(self, container_id: str) -> None:
        pass

    @abstractmethod
    async def remove(self, container_id: str) -> None:
        pass
