# whisper_local/infrastructure/adapters/functionality/__init__.py

"""Shared adapter functionality"""

from .timeout_wrapper import with_timeout
from .cleanup_stack import CleanupStack

__all__ = [
    'with_timeout',
    'CleanupStack'
]
