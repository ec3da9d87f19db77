"""Shared fakes: in-memory whisper server and container manager"""

import asyncio
from typing import List, Optional

import httpx
import pytest

from whisper_local.core.ports.i_container_manager import IContainerManager
from whisper_local.infrastructure.adapters.stt.remote_transcriber import RemoteTranscriber

SERVER_URL = "http://localhost:8765"


class FakeWhisperServer:
    """httpx.MockTransport handler imitating faster-whisper-server"""

    def __init__(self, healthy: bool = False, payload: Optional[dict] = None,
                 status_code: int = 200, delay: float = 0.0):
        self.healthy = healthy
        self.payload = {"text": "hello world"} if payload is None else payload
        self.status_code = status_code
        self.delay = delay
        self.health_checks = 0
        self.transcription_requests: List[httpx.Request] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/health":
            self.health_checks += 1
            return httpx.Response(200 if self.healthy else 503)

        if request.url.path == "/v1/audio/transcriptions":
            self.transcription_requests.append(request)
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.status_code >= 400:
                return httpx.Response(self.status_code, text="model not loaded")
            return httpx.Response(self.status_code, json=self.payload)

        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def transcriber(self, **kwargs) -> RemoteTranscriber:
        return RemoteTranscriber(SERVER_URL, transport=self.transport(), **kwargs)


class FakeContainerManager(IContainerManager):
    """Records calls; starting a container makes the fake server healthy"""

    def __init__(self, server: Optional[FakeWhisperServer] = None,
                 comes_up: bool = True, start_delay: float = 0.05,
                 pull_error: Optional[Exception] = None,
                 create_error: Optional[Exception] = None,
                 start_error: Optional[Exception] = None,
                 stop_error: Optional[Exception] = None):
        self.server = server
        self.comes_up = comes_up
        self.start_delay = start_delay
        self.pull_error = pull_error
        self.create_error = create_error
        self.start_error = start_error
        self.stop_error = stop_error
        self.calls: list = []
        self.progress: List[str] = []
        self._created = 0

    async def pull_image(self, image, on_progress=None):
        self.calls.append(("pull", image))
        if on_progress:
            on_progress("Pulling fs layer")
        if self.pull_error:
            raise self.pull_error

    async def create_container(self, image, env, port_binding, auto_remove=True):
        self.calls.append(("create", image, list(env), dict(port_binding), auto_remove))
        if self.create_error:
            raise self.create_error
        self._created += 1
        return f"container-{self._created}"

    async def start(self, container_id):
        self.calls.append(("start", container_id))
        if self.start_error:
            raise self.start_error
        await asyncio.sleep(self.start_delay)
        if self.server and self.comes_up:
            self.server.healthy = True

    async def stop(self, container_id):
        self.calls.append(("stop", container_id))
        if self.stop_error:
            raise self.stop_error

    async def remove(self, container_id):
        self.calls.append(("remove", container_id))

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def server():
    return FakeWhisperServer()


@pytest.fixture
def healthy_server():
    return FakeWhisperServer(healthy=True)


@pytest.fixture
def containers(server):
    return FakeContainerManager(server)
