"""Read-only status tools: provider status and available models"""

from typing import Any, Awaitable, Callable, Dict, List

from whisper_local.core.ports.i_stt_provider import ISTTProvider

GET_STATUS_TOOL = "whisper-local.getStatus"
LIST_MODELS_TOOL = "whisper-local.listModels"

WHISPER_MODELS = [
    {'id': "tiny", 'name': "Tiny", 'description': "Fastest, lowest accuracy (~1GB VRAM)"},
    {'id': "base", 'name': "Base", 'description': "Fast, good accuracy (~1GB VRAM)"},
    {'id': "small", 'name': "Small", 'description': "Balanced speed/accuracy (~2GB VRAM)"},
    {'id': "medium", 'name': "Medium", 'description': "High accuracy (~5GB VRAM)"},
    {'id': "large-v3", 'name': "Large v3", 'description': "Best accuracy (~10GB VRAM)"},
]

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


def get_tool_declarations() -> List[dict]:
    """Tool descriptors for the host's tool registry"""
    return [
        {
            'name': GET_STATUS_TOOL,
            'description': "Get status of the Whisper local STT provider",
            'input_schema': {'type': "object", 'properties': {}},
            'annotations': {'read_only_hint': True},
        },
        {
            'name': LIST_MODELS_TOOL,
            'description': "List available Whisper STT models",
            'input_schema': {'type': "object", 'properties': {}},
            'annotations': {'read_only_hint': True},
        },
    ]


class StatusTools:
    """Handlers bound to one provider instance"""

    def __init__(self, provider: ISTTProvider, current_model: str):
        self.provider = provider
        self.current_model = current_model

    async def get_status(self, _input: Dict[str, Any] = None) -> dict:
        # Only metadata and health, never config values
        metadata = self.provider.metadata
        return {
            'provider': metadata.name,
            'type': metadata.type,
            'version': metadata.version,
            'description': metadata.description,
            'local': metadata.local,
            'capabilities': list(metadata.capabilities),
            'healthy': await self.provider.health_check(),
        }

    async def list_models(self, _input: Dict[str, Any] = None) -> dict:
        return {
            'provider': self.provider.metadata.name,
            'models': [dict(model) for model in WHISPER_MODELS],
            'current_model': self.current_model,
        }

    def handlers(self) -> Dict[str, ToolHandler]:
        return {
            GET_STATUS_TOOL: self.get_status,
            LIST_MODELS_TOOL: self.list_models,
        }
