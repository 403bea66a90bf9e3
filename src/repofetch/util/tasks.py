# src/repofetch/util/tasks.py: Offloading blocking work from an event loop.
# Clones and tree removals block for as long as the network or disk takes, so
# async callers hand them to a thread pool and await the result. Anything a
# worker raises outside the application's error taxonomy is converted into a
# WorkerCrashedError at the await point.

import asyncio
import contextvars
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from .errors import RepofetchError, WorkerCrashedError
from .log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class WorkerPool:
    """A thread pool dedicated to blocking repository operations."""

    def __init__(self, max_workers: int = 4):
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="repofetch"
            )
        return self._executor

    async def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        return await offload(func, *args, executor=self.executor, **kwargs)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


async def offload(
    func: Callable[..., T],
    *args: Any,
    executor: Optional[ThreadPoolExecutor] = None,
    **kwargs: Any,
) -> T:
    """
    Run `func` on a worker thread and await its result.

    The caller's context variables (such as the active operation name used in
    log records) are visible inside the worker.

    Raises:
        RepofetchError: Whatever typed error `func` raised, unchanged.
        WorkerCrashedError: For any other exception escaping `func`.
    """
    loop = asyncio.get_running_loop()
    context = contextvars.copy_context()
    call = functools.partial(context.run, func, *args, **kwargs)
    try:
        return await loop.run_in_executor(executor, call)
    except RepofetchError:
        raise
    except Exception as e:
        logger.error(f"Background task crashed: {e!r}", exc_info=True)
        raise WorkerCrashedError(f"Background task panicked: {e}", step="worker")
