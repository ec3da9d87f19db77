"""Configuration management"""

import os
import yaml
import structlog
from pathlib import Path
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping, Optional
from dotenv import load_dotenv

from whisper_local.core.exceptions import InvalidModelError, InvalidPortError

logger = structlog.get_logger()

VALID_MODELS = ["tiny", "base", "small", "medium", "large-v3"]

MIN_PORT = 1024
MAX_PORT = 65535

# Host config keys that differ from the dataclass field names
_KEY_ALIASES = {
    'wordTimestamps': 'word_timestamps',
}

_ENV_PREFIX = "WHISPER_LOCAL_"


@dataclass(frozen=True)
class WhisperLocalConfig:
    """Provider configuration, fixed once the provider is constructed"""
    image: str = "fedirz/faster-whisper-server:latest-cpu"
    model: str = "small"
    port: int = 8765
    language: str = "en"
    word_timestamps: bool = False

    @classmethod
    def from_dict(cls, overrides: Optional[Mapping[str, Any]] = None) -> "WhisperLocalConfig":
        """
        Merge caller-supplied overrides over the defaults.

        Unknown keys are ignored; ``None`` values keep the default.
        No validation happens here, see ``validate()``.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}

        for key, value in (overrides or {}).items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                logger.debug("config_key_ignored", key=key)
                continue
            if value is None:
                continue
            if name == "port" and isinstance(value, str):
                # Host config forms submit numbers as text
                try:
                    value = int(value.strip())
                except ValueError:
                    pass
            values[name] = value

        return cls(**values)

    @property
    def server_url(self) -> str:
        """Base URL of the inference server"""
        return f"http://localhost:{self.port}"

    def validate(self) -> None:
        """
        Check model and port.

        Raises:
            InvalidModelError: model is not one of VALID_MODELS
            InvalidPortError: port is not an integer in [1024, 65535]
        """
        if self.model not in VALID_MODELS:
            raise InvalidModelError(self.model, VALID_MODELS)

        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise InvalidPortError(self.port)
        if self.port < MIN_PORT or self.port > MAX_PORT:
            raise InvalidPortError(self.port)

    def to_dict(self) -> dict:
        """Export as dict"""
        return asdict(self)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_overrides() -> Dict[str, Any]:
    """Read WHISPER_LOCAL_* environment variables"""
    overrides: Dict[str, Any] = {}

    for name in ("image", "model", "language"):
        value = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
        if value:
            overrides[name] = value

    port = os.getenv(f"{_ENV_PREFIX}PORT")
    if port:
        try:
            overrides['port'] = int(port)
        except ValueError:
            # Left as-is so validate() reports it
            overrides['port'] = port

    word_timestamps = os.getenv(f"{_ENV_PREFIX}WORD_TIMESTAMPS")
    if word_timestamps:
        overrides['word_timestamps'] = _parse_bool(word_timestamps)

    return overrides


def load_config(config_path: Optional[str] = "config/whisper_local.yaml",
                use_env: bool = True) -> WhisperLocalConfig:
    """
    Load configuration from an optional YAML file plus environment overrides.

    The YAML file may hold the settings at the top level or under a
    ``whisper_local`` key. Environment variables win over the file.

    Args:
        config_path: Path to the YAML file (missing file is fine)
        use_env: Apply WHISPER_LOCAL_* variables (loads .env first)

    Returns:
        Merged configuration (not validated)
    """
    data: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
            if isinstance(raw, dict):
                data.update(raw.get('whisper_local', raw))
            logger.info("config_file_loaded", path=str(path))
        else:
            logger.debug("config_file_not_found", path=str(path))

    if use_env:
        load_dotenv()
        data.update(_env_overrides())

    return WhisperLocalConfig.from_dict(data)


CONFIG_SCHEMA = {
    'title': "Whisper Local (faster-whisper)",
    'description': "Local speech-to-text using faster-whisper in Docker",
    'fields': [
        {
            'name': "model",
            'type': "select",
            'label': "Model Size",
            'description': "Larger models are more accurate but slower and use more memory",
            'default': "small",
            'options': [
                {'value': "tiny", 'label': "Tiny (fastest, least accurate)"},
                {'value': "base", 'label': "Base"},
                {'value': "small", 'label': "Small (recommended)"},
                {'value': "medium", 'label': "Medium"},
                {'value': "large-v3", 'label': "Large v3 (most accurate, requires ~3GB+ VRAM)"},
            ],
        },
        {
            'name': "port",
            'type': "number",
            'label': "Server Port",
            'description': "Port to expose the whisper server on",
            'default': 8765,
            'placeholder': "8765",
        },
        {
            'name': "language",
            'type': "text",
            'label': "Language",
            'description': "Language code (e.g. 'en', 'auto' for auto-detect)",
            'default': "en",
            'placeholder': "en",
        },
        {
            'name': "image",
            'type': "text",
            'label': "Docker Image",
            'description': "Docker image to use for the whisper server",
            'default': "fedirz/faster-whisper-server:latest-cpu",
            'placeholder': "fedirz/faster-whisper-server:latest-cpu",
        },
    ],
}
