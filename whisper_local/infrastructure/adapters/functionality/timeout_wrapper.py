# whisper_local/infrastructure/adapters/functionality/timeout_wrapper.py

"""Async Timeout Wrapper"""

import asyncio
from typing import Awaitable, Type, TypeVar
import structlog

from whisper_local.core.exceptions import OperationTimeoutError

logger = structlog.get_logger()

T = TypeVar('T')


async def with_timeout(
        coro: Awaitable[T],
        timeout: float,
        name: str = "operation",
        error_class: Type[OperationTimeoutError] = OperationTimeoutError
) -> T:
    """
    Execute coroutine with timeout.

    The coroutine is cancelled when the timeout expires.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds
        name: Operation name for logging
        error_class: OperationTimeoutError subclass to raise

    Returns:
        Result from coroutine

    Raises:
        OperationTimeoutError: If timeout exceeded (as error_class)
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("operation_timeout", name=name, timeout=timeout)
        raise error_class(name, timeout) from None
