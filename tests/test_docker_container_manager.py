"""Tests for the docker SDK adapter, with a mocked DockerClient"""
import threading
from unittest.mock import MagicMock

import pytest
from docker.errors import APIError, DockerException, NotFound

from whisper_local.core.exceptions import ContainerError
from whisper_local.infrastructure.adapters.container import docker_container_manager
from whisper_local.infrastructure.adapters.container.docker_container_manager import (
    DockerContainerManager,
)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def manager(client):
    return DockerContainerManager(client=client)


@pytest.mark.asyncio
async def test_pull_reports_status_lines(manager, client):
    client.api.pull.return_value = iter([
        {"status": "Pulling from fedirz/faster-whisper-server"},
        {"id": "abc", "progressDetail": {}},
        {"status": "Download complete"},
    ])
    seen = []

    await manager.pull_image("fedirz/faster-whisper-server:latest-cpu", on_progress=seen.append)

    client.api.pull.assert_called_once_with(
        "fedirz/faster-whisper-server", tag="latest-cpu", stream=True, decode=True
    )
    assert seen == ["Pulling from fedirz/faster-whisper-server", "Download complete"]


@pytest.mark.asyncio
async def test_pull_error_event_raises(manager, client):
    client.api.pull.return_value = iter([{"error": "manifest unknown"}])

    with pytest.raises(ContainerError):
        await manager.pull_image("nope/nope")


@pytest.mark.asyncio
async def test_create_passes_env_ports_and_auto_remove(manager, client):
    client.containers.create.return_value = MagicMock(id="cid-1")

    container_id = await manager.create_container(
        "img:tag", ["WHISPER_MODEL=small"], {"8000/tcp": 8765}, auto_remove=True
    )

    assert container_id == "cid-1"
    client.containers.create.assert_called_once_with(
        "img:tag",
        environment=["WHISPER_MODEL=small"],
        ports={"8000/tcp": 8765},
        auto_remove=True,
        detach=True
    )


@pytest.mark.asyncio
async def test_create_failure_wrapped(manager, client):
    client.containers.create.side_effect = APIError("port is already allocated")

    with pytest.raises(ContainerError):
        await manager.create_container("img", [], {"8000/tcp": 8765})


@pytest.mark.asyncio
async def test_start_stop_remove_use_container_handle(manager, client):
    container = MagicMock()
    client.containers.get.return_value = container

    await manager.start("cid-1")
    await manager.stop("cid-1")
    await manager.remove("cid-1")

    container.start.assert_called_once_with()
    container.stop.assert_called_once_with()
    container.remove.assert_called_once_with()


@pytest.mark.asyncio
async def test_missing_container_wrapped(manager, client):
    client.containers.get.side_effect = NotFound("no such container")

    with pytest.raises(ContainerError):
        await manager.remove("gone")


@pytest.mark.asyncio
async def test_client_created_in_worker_thread(monkeypatch):
    client = MagicMock()
    client.containers.create.return_value = MagicMock(id="cid-1")
    threads = []

    def from_env():
        threads.append(threading.get_ident())
        return client

    monkeypatch.setattr(docker_container_manager.docker, "from_env", from_env)
    manager = DockerContainerManager()

    await manager.create_container("img", [], {"8000/tcp": 8765})
    await manager.start("cid-1")

    assert threads and threads[0] != threading.get_ident()
    assert len(threads) == 1


@pytest.mark.asyncio
async def test_daemon_unavailable_wrapped(monkeypatch):
    def from_env():
        raise DockerException("Error while fetching server API version")

    monkeypatch.setattr(docker_container_manager.docker, "from_env", from_env)
    manager = DockerContainerManager()

    with pytest.raises(ContainerError, match="Docker daemon not available"):
        await manager.start("cid-1")
