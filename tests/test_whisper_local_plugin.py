"""Tests for the host plugin adapter and status tools"""
from unittest.mock import MagicMock

import pytest

from conftest import FakeContainerManager, FakeWhisperServer
from whisper_local.application.services.whisper_local_provider import WhisperLocalProvider
from whisper_local.core.config.settings import CONFIG_SCHEMA
from whisper_local.core.exceptions import InvalidModelError, ProviderNotInitializedError
from whisper_local.core.ports.i_plugin_context import IPluginContext
from whisper_local.interfaces.plugin import MANIFEST, WhisperLocalPlugin, get_tool_declarations


class FakePluginContext(IPluginContext):

    def __init__(self, config=None, events=None):
        self.config = config or {}
        self.events = events if events is not None else []
        self.schemas = {}
        self.providers = []
        self.log = MagicMock()

    def register_config_schema(self, name, schema):
        self.schemas[name] = schema

    def unregister_config_schema(self, name):
        self.events.append("unregister_config_schema")
        self.schemas.pop(name, None)

    def get_config(self):
        return self.config

    def register_stt_provider(self, provider):
        self.providers.append(provider)


def make_plugin(server, containers=None, events=None):
    containers = containers or FakeContainerManager(server)

    def factory(config):
        provider = WhisperLocalProvider(
            config,
            container_manager=containers,
            transcriber=server.transcriber(),
            poll_interval=0.01
        )
        if events is not None:
            original = provider.shutdown

            async def shutdown():
                events.append("provider_shutdown")
                await original()

            provider.shutdown = shutdown
        return provider

    return WhisperLocalPlugin(provider_factory=factory)


class TestPluginLifecycle:

    @pytest.mark.asyncio
    async def test_init_registers_schema_and_provider(self, healthy_server):
        ctx = FakePluginContext({"model": "medium"})
        plugin = make_plugin(healthy_server)

        await plugin.init(ctx)

        assert ctx.schemas == {"voice-whisper-local": CONFIG_SCHEMA}
        assert ctx.providers == [plugin.provider]
        assert plugin.provider.model == "medium"
        ctx.log.info.assert_called_once()

    @pytest.mark.asyncio
    async def test_init_with_invalid_config_raises(self, healthy_server):
        ctx = FakePluginContext({"model": "gigantic"})
        plugin = make_plugin(healthy_server)

        with pytest.raises(InvalidModelError):
            await plugin.init(ctx)

        assert ctx.providers == []
        await plugin.shutdown()
        assert ctx.schemas == {}

    @pytest.mark.asyncio
    async def test_shutdown_runs_cleanups_lifo(self, healthy_server):
        events = []
        ctx = FakePluginContext(events=events)
        plugin = make_plugin(healthy_server, events=events)
        await plugin.init(ctx)

        await plugin.shutdown()

        assert events == ["provider_shutdown", "unregister_config_schema"]
        assert plugin.provider is None

    @pytest.mark.asyncio
    async def test_shutdown_tolerates_cleanup_failure(self, healthy_server):
        ctx = FakePluginContext()
        plugin = make_plugin(healthy_server)
        await plugin.init(ctx)

        async def broken():
            raise RuntimeError("docker went away")

        plugin.provider.shutdown = broken
        await plugin.shutdown()

        assert ctx.schemas == {}

    @pytest.mark.asyncio
    async def test_shutdown_twice(self, healthy_server):
        plugin = make_plugin(healthy_server)
        await plugin.init(FakePluginContext())

        await plugin.shutdown()
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_two_plugins_do_not_share_provider(self, healthy_server):
        first, second = make_plugin(healthy_server), make_plugin(healthy_server)
        await first.init(FakePluginContext({"model": "tiny"}))
        await second.init(FakePluginContext({"model": "base"}))

        assert first.provider is not second.provider

        await first.shutdown()
        assert second.provider.model == "base"


class TestStatusTools:

    def test_declarations_are_read_only(self):
        declarations = get_tool_declarations()
        assert [d["name"] for d in declarations] == [
            "whisper-local.getStatus",
            "whisper-local.listModels",
        ]
        assert all(d["annotations"]["read_only_hint"] for d in declarations)
        assert plugin_manifest_tools() == declarations

    @pytest.mark.asyncio
    async def test_handlers_before_init_raise(self, healthy_server):
        handlers = make_plugin(healthy_server).get_webmcp_handlers()

        with pytest.raises(ProviderNotInitializedError):
            await handlers["whisper-local.getStatus"]({})
        with pytest.raises(ProviderNotInitializedError):
            await handlers["whisper-local.listModels"]({})

    @pytest.mark.asyncio
    async def test_handlers_resolve_provider_at_call_time(self, healthy_server):
        plugin = make_plugin(healthy_server)
        handlers = plugin.get_webmcp_handlers()

        await plugin.init(FakePluginContext({"model": "large-v3"}))
        result = await handlers["whisper-local.listModels"]({})

        assert result["current_model"] == "large-v3"
        assert len(result["models"]) == 5
        assert "large-v3" in [m["id"] for m in result["models"]]

    @pytest.mark.asyncio
    async def test_get_status_reports_health_without_config(self):
        server = FakeWhisperServer(healthy=True)
        plugin = make_plugin(server)
        await plugin.init(FakePluginContext({"image": "private/registry:tag"}))

        status = await plugin.get_webmcp_handlers()["whisper-local.getStatus"]({})

        assert status["provider"] == "whisper-local"
        assert status["type"] == "stt"
        assert status["version"] == "1.0.0"
        assert status["healthy"] is True
        assert "private/registry:tag" not in str(status)
        assert "port" not in status

    @pytest.mark.asyncio
    async def test_get_status_unhealthy(self, server):
        plugin = make_plugin(server)
        await plugin.init(FakePluginContext())

        status = await plugin.get_webmcp_handlers()["whisper-local.getStatus"]({})

        assert status["healthy"] is False


def plugin_manifest_tools():
    return WhisperLocalPlugin().get_manifest()["webmcp_tools"]


def test_manifest_shutdown_timeout():
    assert MANIFEST["lifecycle"]["shutdown_timeout"] == 15.0
    assert WhisperLocalPlugin().shutdown_timeout == 15.0
