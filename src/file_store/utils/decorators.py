"""Decorator utilities for cross-cutting concerns."""
import functools
import logging
import time
from typing import Any, Callable, TypeVar, cast

# Setup logging
logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_outcome(func: F) -> F:
    """Decorator logging how long an async handler took and how it ended.

    The wrapped coroutine must return an `Outcome`; a failed outcome is logged
    with its failure kind, a raised exception with its message before it
    propagates.

    Args:
        func: The async handler to decorate

    Returns:
        Decorated async handler
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            outcome = await func(*args, **kwargs)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error("%s raised after %.3fs: %s", func.__name__, duration, e)
            raise
        duration = time.perf_counter() - start_time
        if outcome.ok:
            logger.debug("%s succeeded in %.3fs", func.__name__, duration)
        else:
            logger.info(
                "%s failed in %.3fs with %s",
                func.__name__, duration, outcome.failure.kind.value,
            )
        return outcome
    return cast(F, wrapper)
