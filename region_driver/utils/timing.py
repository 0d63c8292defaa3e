# region_driver/utils/timing.py
from __future__ import annotations

import asyncio
import functools
import inspect
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar, ParamSpec

from region_driver.utils.logger import get_logger

P = ParamSpec("P")
T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 1000
DEFAULT_ERROR_MSG = "Timeout"


class PollTimeout(TimeoutError):
    """Raised by wait_for() when the budget runs out while the condition is still falsy."""


def now_ms() -> int:
    """Default poll clock: whole milliseconds from time.monotonic_ns()."""
    return time.monotonic_ns() // 1_000_000


# ---------------- wait_for (polling) ----------------

async def wait_for(
    condition_fn: Callable[[], Any],
    timeout_ms: Optional[int] = DEFAULT_TIMEOUT_MS,
    error_msg: Optional[str] = DEFAULT_ERROR_MSG,
    *,
    clock: Callable[[], float] = now_ms,
) -> None:
    """
    Call `condition_fn()` until it produces a truthy value or the budget runs out.

    `condition_fn` takes no arguments and may return an awaitable or a plain
    value. Each falsy result shrinks the budget to
    ``timeout_ms - (clock() - start)`` where ``start`` is taken once, before the
    first attempt; when that reaches zero the poll fails with
    ``PollTimeout(error_msg)``. An exception raised by `condition_fn` ends the
    poll immediately and propagates as-is.

    There is no delay between attempts. The coroutine yields to the event loop
    once per attempt so that other tasks keep running.

    Args:
        condition_fn: zero-argument predicate (sync or async)
        timeout_ms: total budget for the whole sequence; None means the default
        error_msg: message of the PollTimeout; empty means "Timeout"
        clock: millisecond clock used for the budget

    Raises:
        PollTimeout when the budget is exhausted.
    """
    log = get_logger(__name__)
    timeout = DEFAULT_TIMEOUT_MS if timeout_ms is None else max(0, timeout_ms)
    message = error_msg or DEFAULT_ERROR_MSG
    start = clock()
    attempts = 0

    while True:
        attempts += 1
        result = condition_fn()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return

        # start is never refreshed, so the deadline stays start + timeout
        remaining = timeout - (clock() - start)
        if remaining <= 0:
            log.debug(f"Giving up after {attempts} attempt(s): {message}")
            raise PollTimeout(message)

        await asyncio.sleep(0)


# ---------------- measure decorator ----------------

def measure(label: str = "", level: str = "DEBUG") -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator to log the execution time of a coroutine function.
    Example:
        @measure("wait_for_region")
        async def wait_for_region(...): ...
    """
    level = level.upper()
    log = get_logger(__name__)
    log_fn = getattr(log, level.lower(), log.info)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            started = now_ms()
            try:
                return await func(*args, **kwargs)
            finally:
                ms = now_ms() - started
                human = f"{ms} ms" if ms < 1000 else f"{ms/1000:.3f} s"
                log_fn(f"{label or func.__name__} took {human}")
        return wrapper
    return decorator
