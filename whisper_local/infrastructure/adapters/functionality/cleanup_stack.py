# whisper_local/infrastructure/adapters/functionality/cleanup_stack.py

"""Cleanup Stack - reverse-order release of acquired resources"""

import inspect
from typing import Any, Callable, List, Tuple
import structlog

logger = structlog.get_logger()


class CleanupStack:
    """
    Stack of release actions.

    Actions run last-in first-out. A failing action is logged and
    the remaining actions still run.
    """

    def __init__(self, name: str = "cleanup"):
        self.name = name
        self._actions: List[Tuple[str, Callable[[], Any]]] = []

    def push(self, action: Callable[[], Any], label: str = "") -> None:
        """
        Register a release action.

        Args:
            action: Sync callable or coroutine function taking no arguments
            label: Name used in logs
        """
        self._actions.append((label or getattr(action, "__name__", "action"), action))

    async def unwind(self) -> int:
        """
        Run all actions in reverse order and empty the stack.

        Returns:
            Number of actions that failed
        """
        failures = 0

        while self._actions:
            label, action = self._actions.pop()
            try:
                result = action()
                if inspect.isawaitable(result):
                    await result
                logger.debug("cleanup_action_done", stack=self.name, action=label)
            except Exception as e:
                failures += 1
                logger.warning(
                    "cleanup_action_failed",
                    stack=self.name,
                    action=label,
                    error=str(e),
                    error_type=type(e).__name__
                )

        return failures

    def __len__(self) -> int:
        return len(self._actions)
