"""Tasks that drive coroutines by hand, and one-shot wake-up handles."""

from __future__ import annotations

from collections.abc import Coroutine, Generator
from typing import Any

_EMPTY: Any = object()


class AwaitHandle:
    """A wake-up point that a single task can wait on.

    A value posted with :meth:`notify` while nobody waits is kept and handed
    to the next awaiter without suspending it.
    """

    def __init__(self) -> None:
        self.waiter: Task | None = None
        self._value: Any = _EMPTY

    @property
    def has_value(self) -> bool:
        """Whether a posted value is waiting to be picked up."""
        return self._value is not _EMPTY

    def notify(self, value: Any = _EMPTY) -> None:
        """Post an optional value and resume the waiting task, if any."""
        if value is not _EMPTY:
            self._value = value
        task = self.waiter
        if task is None:
            return
        self.waiter = None
        task.resume()

    def _suspend(self, task: Task) -> None:
        self.waiter = task

    def __await__(self) -> Generator[Any, Any, Any]:
        if self._value is _EMPTY:
            yield self
        value, self._value = self._value, _EMPTY
        return None if value is _EMPTY else value


class _CurrentTask:
    def __await__(self) -> Generator[Any, Any, Task]:
        return (yield self)


def current_task() -> _CurrentTask:
    """Return an awaitable that yields the task running the awaiting coroutine."""
    return _CurrentTask()


class Task:
    """Drives a coroutine step by step.

    The coroutine may only await objects that yield something with a
    ``_suspend(task)`` method; that method records the task so it can be
    resumed later.
    """

    def __init__(self, coro: Coroutine[Any, Any, Any]) -> None:
        self._coro = coro
        self._running = False
        self.done = False
        self.result: Any = None
        self.exception: BaseException | None = None

    def resume(self) -> None:
        """Run the coroutine until it suspends again or finishes."""
        if self.done:
            raise RuntimeError("task has already finished")
        if self._running:
            raise RuntimeError("task is already running")
        self._running = True
        try:
            self._step()
        finally:
            self._running = False

    def _step(self) -> None:
        sent: Any = None
        while True:
            try:
                request = self._coro.send(sent)
            except StopIteration as stop:
                self.done = True
                self.result = stop.value
                return
            except BaseException as exc:
                self.done = True
                self.exception = exc
                raise
            if isinstance(request, _CurrentTask):
                sent = self
                continue
            suspend = getattr(request, "_suspend", None)
            if suspend is None:
                self.close()
                raise TypeError(f"task cannot wait on {request!r}")
            suspend(self)
            return

    def close(self) -> None:
        """Discard the coroutine, running its pending cleanup."""
        self._coro.close()
        self.done = True