"""
Step navigation for multi-step dialogs.

The step index changes synchronously; the side effect for the step being
entered runs as a task on the event loop, one tick later, so anything watching
the step has already seen the new value when the side effect starts.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Coroutine, Mapping

StepCallback = Callable[[], Awaitable[None] | None]
StepChangeListener = Callable[[int, int], None]


async def next_tick() -> None:
    """Yield once to the loop so pending step observers run first."""
    await asyncio.sleep(0)


async def _call(callback: StepCallback | None) -> None:
    if callback is None:
        return
    result = callback()
    if inspect.isawaitable(result):
        await result


class StepMachine:
    """
    Steps ``0..total_steps-1`` starting at 0.

    Args:
        total_steps: Number of steps
        handlers: Entry side effect per destination step (forward moves only)
        ensure_visible: Re-shows already computed content of the current step;
            runs after every move
    """

    def __init__(
        self,
        total_steps: int,
        *,
        handlers: Mapping[int, StepCallback] | None = None,
        ensure_visible: StepCallback | None = None,
    ) -> None:
        if total_steps < 1:
            raise ValueError("total_steps must be at least 1")
        self.total_steps = total_steps
        self.handlers = dict(handlers or {})
        self.ensure_visible = ensure_visible
        self.current_step = 0
        self._listeners: list[StepChangeListener] = []
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def is_last(self) -> bool:
        return self.current_step >= self.total_steps - 1

    def on_change(self, listener: StepChangeListener) -> StepChangeListener:
        self._listeners.append(listener)
        return listener

    def advance(self) -> bool:
        """Move forward one step. False (and nothing scheduled) at the last step."""
        if self.is_last:
            return False
        previous = self.current_step
        self.current_step += 1
        self._changed(previous)
        self.spawn(self._enter(self.current_step))
        return True

    def regress(self) -> bool:
        """Move back one step, re-showing cached content only. False at step 0."""
        if self.current_step <= 0:
            return False
        previous = self.current_step
        self.current_step -= 1
        self._changed(previous)
        self.spawn(self._revisit())
        return True

    def reset(self) -> None:
        previous = self.current_step
        self.current_step = 0
        if previous != 0:
            self._changed(previous)

    def spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def settle(self) -> None:
        """Wait until every scheduled continuation, including ones they spawn, has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _changed(self, previous: int) -> None:
        for listener in list(self._listeners):
            listener(previous, self.current_step)

    async def _enter(self, step: int) -> None:
        await next_tick()
        # selected by the destination step only
        await _call(self.handlers.get(step))
        await _call(self.ensure_visible)

    async def _revisit(self) -> None:
        await next_tick()
        await _call(self.ensure_visible)
