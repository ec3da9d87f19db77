"""
Host plugin adapter for the Whisper Local STT provider

The plugin object owns its provider and a cleanup stack; nothing is
kept in module globals, so several plugin instances can coexist.
"""

from typing import Any, Callable, Dict, Mapping, Optional

import structlog

from whisper_local.application.services.whisper_local_provider import WhisperLocalProvider
from whisper_local.core.config.settings import CONFIG_SCHEMA
from whisper_local.core.exceptions import OperationTimeoutError, ProviderNotInitializedError
from whisper_local.core.ports.i_plugin_context import IPluginContext
from whisper_local.infrastructure.adapters.functionality import CleanupStack, with_timeout
from whisper_local.interfaces.plugin.status_tools import (
    GET_STATUS_TOOL,
    LIST_MODELS_TOOL,
    StatusTools,
    ToolHandler,
    get_tool_declarations,
)

logger = structlog.get_logger()

CONFIG_SCHEMA_NAME = "voice-whisper-local"

MANIFEST = {
    'name': "wopr-plugin-voice-whisper-local",
    'version': "1.0.0",
    'description': "Local STT using faster-whisper in Docker",
    'capabilities': ["stt"],
    'category': "voice",
    'tags': ["stt", "whisper", "local", "docker", "voice", "speech-to-text"],
    'requires': {
        'docker': ["fedirz/faster-whisper-server:latest"],
    },
    'provides': {
        'capabilities': [
            {
                'type': "stt",
                'id': "whisper-local",
                'display_name': "Whisper Local (faster-whisper)",
                'config_schema': CONFIG_SCHEMA,
            }
        ],
    },
    'lifecycle': {
        'shutdown_behavior': "graceful",
        'shutdown_timeout': 15.0,
    },
    'config_schema': CONFIG_SCHEMA,
    'install': [
        {
            'kind': "docker",
            'image': "fedirz/faster-whisper-server",
            'tag': "latest-cpu",
            'label': "Pull faster-whisper server image",
        }
    ],
}

ProviderFactory = Callable[[Mapping[str, Any]], WhisperLocalProvider]


class WhisperLocalPlugin:
    """Registers the provider with the host and tears it down again"""

    name = "voice-whisper-local"
    version = "1.0.0"
    description = "Local STT using faster-whisper in Docker"
    manifest = MANIFEST

    def __init__(self, provider_factory: ProviderFactory = WhisperLocalProvider,
                 shutdown_timeout: Optional[float] = None):
        """
        Args:
            provider_factory: Builds the provider from the host config dict
            shutdown_timeout: Bound for shutdown() (default: manifest value)
        """
        self._provider_factory = provider_factory
        self.shutdown_timeout = (shutdown_timeout if shutdown_timeout is not None
                                 else MANIFEST['lifecycle']['shutdown_timeout'])
        self._ctx: Optional[IPluginContext] = None
        self._provider: Optional[WhisperLocalProvider] = None
        self._cleanups = CleanupStack(self.name)

    @property
    def provider(self) -> Optional[WhisperLocalProvider]:
        return self._provider

    async def init(self, ctx: IPluginContext) -> None:
        """
        Register config schema and STT provider with the host.

        Raises:
            ConfigurationError: Host config has an invalid model or port
        """
        self._ctx = ctx

        ctx.register_config_schema(CONFIG_SCHEMA_NAME, CONFIG_SCHEMA)
        self._cleanups.push(
            lambda: ctx.unregister_config_schema(CONFIG_SCHEMA_NAME),
            "unregister_config_schema"
        )

        provider = self._provider_factory(ctx.get_config() or {})
        provider.validate_config()

        ctx.register_stt_provider(provider)
        self._provider = provider
        self._cleanups.push(lambda: provider.shutdown(), "provider_shutdown")

        ctx.log.info("Whisper Local STT provider registered")
        logger.info("whisper_local_plugin_initialized", model=provider.model)

    async def shutdown(self) -> None:
        """Run cleanups in reverse order; failures are logged, not raised."""
        try:
            failures = await with_timeout(
                self._cleanups.unwind(),
                self.shutdown_timeout,
                name="plugin_shutdown"
            )
            if failures:
                logger.warning("whisper_local_plugin_cleanup_errors", failures=failures)
        except OperationTimeoutError:
            logger.error("whisper_local_plugin_shutdown_timeout",
                         timeout=self.shutdown_timeout)
        finally:
            self._provider = None
            self._ctx = None

    def get_manifest(self) -> dict:
        return {'webmcp_tools': get_tool_declarations()}

    def _status_tools(self) -> StatusTools:
        if self._provider is None:
            raise ProviderNotInitializedError("whisper-local provider not initialized")
        return StatusTools(self._provider, self._provider.model)

    def get_webmcp_handlers(self) -> Dict[str, ToolHandler]:
        """
        Handlers that look up the provider when called, not when
        registered, so they can be handed out before init().
        """
        async def get_status(tool_input: Dict[str, Any]) -> Any:
            return await self._status_tools().get_status(tool_input)

        async def list_models(tool_input: Dict[str, Any]) -> Any:
            return await self._status_tools().list_models(tool_input)

        return {
            GET_STATUS_TOOL: get_status,
            LIST_MODELS_TOOL: list_models,
        }
