"""Shared plumbing for screen models.

A screen model owns an immutable UI state object and the background tasks
that keep it current.  Views read :attr:`ScreenModel.state`, await
:meth:`ScreenModel.wait_for` for a condition, and call :meth:`ScreenModel.close`
when the screen goes away, which cancels every task it launched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import replace
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT")


class ScreenModel(Generic[StateT]):
    def __init__(self, initial_state: StateT) -> None:
        self._state = initial_state
        self._changed = asyncio.Event()
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def state(self) -> StateT:
        return self._state

    def _set_state(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()

    async def wait_for(
        self, predicate: Callable[[StateT], bool], timeout: float = 5.0
    ) -> StateT:
        """Wait until ``predicate(state)`` holds and return that state."""

        async def _wait() -> StateT:
            while not predicate(self._state):
                await self._changed.wait()
            return self._state

        return await asyncio.wait_for(_wait(), timeout)

    def launch(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "%s task failed", type(self).__name__, exc_info=task.exception()
            )

    async def close(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
