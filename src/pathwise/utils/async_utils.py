"""Helpers for running blocking SDK calls from async code."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

import structlog

from pathwise.core.errors import RequestTimeoutError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def run_blocking(
    func: Callable[..., T],
    *args: Any,
    timeout: float,
    timeout_message: str = "Request timed out",
    **kwargs: Any,
) -> T:
    """Run a blocking call in a worker thread, bounded by a timeout.

    The worker thread is not cancelled on timeout; its result is discarded.

    Raises:
        RequestTimeoutError: If the call does not finish within ``timeout`` seconds
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        logger.warning(
            "blocking_call.timeout",
            func=getattr(func, "__name__", repr(func)),
            timeout=timeout,
        )
        raise RequestTimeoutError(timeout_message) from e
