"""Debounced invocation on the asyncio event loop.

A Debouncer collapses a burst of calls into a single invocation of its async
callback, ``delay`` seconds after the *last* call and with that call's
arguments. A DebounceMap owns one independent Debouncer per field name for
the lifetime of a form; there is no module-level registry.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict

from loguru import logger

AsyncCallback = Callable[..., Awaitable[Any]]


class Debouncer:
    """Delay ``callback`` until calls have been quiet for ``delay`` seconds."""

    def __init__(self, callback: AsyncCallback, delay: float, name: str = ""):
        self._callback = callback
        self.delay = max(0.0, float(delay))
        self.name = name
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    def __call__(self, *args, **kwargs) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire, args, kwargs)

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired yet."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._callback(*args, **kwargs))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Debounced callback for {self.name or '?'} failed")

    def cancel(self) -> bool:
        """Drop the armed timer, if any. Running callbacks are left alone."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    async def wait(self) -> None:
        """Wait until no timer is armed and no callback is running."""
        loop = asyncio.get_running_loop()
        while self._handle is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*tuple(self._tasks), return_exceptions=True)
            elif self._handle is not None:
                await asyncio.sleep(max(0.0, self._handle.when() - loop.time()))

    def close(self) -> None:
        """Cancel the timer and any running callback."""
        self.cancel()
        for task in tuple(self._tasks):
            task.cancel()


class DebounceMap:
    """Per-field debouncers created lazily and disposed with the form."""

    def __init__(self, callback_factory: Callable[[str], AsyncCallback], delay: float):
        self._factory = callback_factory
        self.delay = delay
        self._debouncers: Dict[str, Debouncer] = {}
        self._closed = False

    def get(self, field: str) -> Debouncer:
        if self._closed:
            raise RuntimeError("DebounceMap is closed")
        debouncer = self._debouncers.get(field)
        if debouncer is None:
            debouncer = Debouncer(self._factory(field), self.delay, name=field)
            self._debouncers[field] = debouncer
        return debouncer

    def __contains__(self, field: str) -> bool:
        return field in self._debouncers

    def cancel(self, field: str) -> bool:
        debouncer = self._debouncers.get(field)
        return debouncer.cancel() if debouncer is not None else False

    def cancel_all(self) -> int:
        return sum(1 for d in self._debouncers.values() if d.cancel())

    async def wait_all(self) -> None:
        # A callback may arm another field's debouncer, so loop until quiet.
        while any(d.pending or d.running for d in self._debouncers.values()):
            for debouncer in tuple(self._debouncers.values()):
                await debouncer.wait()

    def close(self) -> None:
        for debouncer in self._debouncers.values():
            debouncer.close()
        self._debouncers.clear()
        self._closed = True
