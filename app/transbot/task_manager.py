# -*- coding: utf-8 -*-
"""
Fire-and-forget background tasks for log mirroring and event handling
"""
import asyncio
from typing import Awaitable, Set

from loguru import logger

# Strong references keep pending tasks from being garbage collected
_active_tasks: Set[asyncio.Task] = set()


def _on_task_done(task: asyncio.Task) -> None:
    _active_tasks.discard(task)
    if task.cancelled():
        return
    if exc := task.exception():
        logger.opt(exception=exc).error(f"Background task {task.get_name()} failed: {exc}")


def spawn(coro: Awaitable, name: str = "background") -> asyncio.Task | None:
    """
    Run `coro` in the background of the current loop

    Returns None when called outside a running loop; the coroutine is closed
    so it does not trigger a "never awaited" warning.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.debug(f"No running loop, dropping {name} task")
        coro.close()
        return None

    task = loop.create_task(coro, name=name)
    _active_tasks.add(task)
    task.add_done_callback(_on_task_done)
    return task


async def wait_for_all_tasks(timeout: float = 10.0) -> bool:
    """
    Wait for all active tasks to complete, with timeout.
    Useful for graceful shutdown.

    Returns:
        True if all tasks completed, False if timeout occurred
    """
    if not _active_tasks:
        return True

    logger.info(f"Waiting for {len(_active_tasks)} active tasks to complete...")
    try:
        await asyncio.wait_for(
            asyncio.gather(*_active_tasks, return_exceptions=True), timeout=timeout
        )
        return True
    except asyncio.TimeoutError:
        logger.warning(
            f"Timeout waiting for tasks to complete, {len(_active_tasks)} tasks still running"
        )
        return False
