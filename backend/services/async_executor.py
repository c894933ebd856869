"""
Async executor for blocking Algorand SDK operations.

algosdk's algod client is synchronous, so its calls run in a thread pool
to avoid blocking the asyncio event loop. run_with_timeout() adds the
per-call deadline every node call must have so a hung request cannot
stall a polling loop.
"""
import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

# Shared executor for blocking operations
_executor: ThreadPoolExecutor | None = None
_MAX_WORKERS = 8


def get_executor() -> ThreadPoolExecutor:
    """Lazy-initialize thread pool executor."""
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(max_workers=_MAX_WORKERS, thread_name_prefix="algo_")
        logger.info(f"Thread pool executor initialized (max_workers={_MAX_WORKERS})")
    return _executor


T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking (synchronous) function in the thread pool.

    Use for: algod status, suggested params, send, pending info, account info.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        get_executor(),
        functools.partial(func, *args, **kwargs),
    )


async def run_with_timeout(timeout: float, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    run_blocking() with a deadline.

    Raises asyncio.TimeoutError when the call does not finish in time. The
    worker thread is abandoned, not interrupted.
    """
    return await asyncio.wait_for(run_blocking(func, *args, **kwargs), timeout=timeout)


def shutdown_executor() -> None:
    """Shutdown the thread pool on app lifecycle end."""
    global _executor
    if _executor:
        _executor.shutdown(wait=False)
        _executor = None
        logger.info("Thread pool executor shutdown")
