"""
Run pipeline work so that it outlives the HTTP request that started it.
"""

import asyncio
import logging
from typing import Any, Awaitable, Set

logger = logging.getLogger(__name__)

# Strong references; the event loop only keeps weak ones
_background_tasks: Set[asyncio.Task] = set()


def _log_task_result(task: asyncio.Task) -> None:
    """Callback for detached tasks. Retrieves the outcome so failures are logged, never lost."""
    _background_tasks.discard(task)
    if task.cancelled():
        logger.warning(f"Background task {task.get_name()} was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task {task.get_name()} failed: {exc}")


async def run_detached(coro: Awaitable[Any], name: str = None) -> Any:
    """
    Await `coro` as an independent task. If the caller is cancelled (for
    example the client disconnects) the task keeps running to completion
    and persists its outcome.
    """
    task = asyncio.ensure_future(coro)
    if name:
        task.set_name(name)
    _background_tasks.add(task)
    task.add_done_callback(_log_task_result)
    return await asyncio.shield(task)
