# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Timing decorator for lifecycle operations."""

import inspect
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from beartype import beartype

from .logging_utils import get_logger

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger(__name__)


def _report(operation_name: str, started: float, max_duration_ms: int) -> None:
    duration_ms = (time.perf_counter() - started) * 1000
    if duration_ms > max_duration_ms:
        logger.warning(
            "Slow operation %s: %.2fms (threshold %dms)",
            operation_name,
            duration_ms,
            max_duration_ms,
        )
    else:
        logger.debug("Operation %s took %.2fms", operation_name, duration_ms)


@beartype
def performance_monitor(
    operation_name: str,
    max_duration_ms: int = 2000,
) -> Callable[[F], F]:
    """Log the duration of the wrapped call, warning above ``max_duration_ms``.

    Works for both coroutine functions and plain functions. Timing is
    reported whether the call returns or raises.

    Args:
        operation_name: Name of the operation for monitoring
        max_duration_ms: Alert threshold in milliseconds
    """

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                finally:
                    _report(operation_name, started, max_duration_ms)

            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _report(operation_name, started, max_duration_ms)

        return sync_wrapper  # type: ignore[return-value]

    return decorator
