"""Edge-triggered epoll dispatcher that resumes tasks waiting on descriptors."""

from __future__ import annotations

import os
import select
from collections.abc import Callable, Coroutine, Generator
from typing import Any, TypeVar

from .coro import Task, current_task
from .handle import Handle, HandleState

FLAG_IN = select.EPOLLIN
FLAG_OUT = select.EPOLLOUT
FLAG_ERR = select.EPOLLERR

H = TypeVar("H", bound=Handle)


class Custom(Handle):
    """A handle whose readiness events go to a callback instead of tasks."""

    def __init__(self, fd: int, owner: Dispatcher, callback: Callable[[int], None] | None = None) -> None:
        super().__init__(fd, owner)
        self._state.callback = callback

    async def read(self, count: int) -> bytes:
        raise TypeError("custom handles do not support read")

    async def write(self, data: bytes) -> int:
        raise TypeError("custom handles do not support write")


class _Rest:
    def __init__(self, owner: Dispatcher) -> None:
        self._owner = owner

    def _suspend(self, task: Task) -> None:
        self._owner._resters.append(task)

    def __await__(self) -> Generator[Any, Any, None]:
        yield self


class Dispatcher:
    """Owns an epoll instance and the tasks waiting on its descriptors."""

    MAX_EVENTS = 128
    REST_INTERVAL = 1024

    def __init__(self) -> None:
        self._epoll = select.epoll()
        self._states: dict[int, HandleState] = {}
        self._to_cleanup: list[Task] = []
        self._resters: list[Task] = []
        self.suspend_counter = 0

    @property
    def closed(self) -> bool:
        return self._epoll.closed

    def __contains__(self, fd: int) -> bool:
        return fd in self._states

    def add(self, fd: int, state: HandleState) -> None:
        """Watch ``fd`` for input and output, edge-triggered."""
        self._epoll.register(fd, FLAG_IN | FLAG_OUT | select.EPOLLET)
        self._states[fd] = state

    def remove(self, fd: int) -> None:
        """Stop watching ``fd``; unknown descriptors are ignored."""
        if self._states.pop(fd, None) is not None and not self._epoll.closed:
            self._epoll.unregister(fd)

    def spawn(self, func: Callable[..., Coroutine[Any, Any, Any]], *args: Any) -> Task:
        """Start ``func(*args)`` as a task, running it until it first suspends."""
        task = Task(self._run_spawned(func(*args)))
        task.resume()
        return task

    async def _run_spawned(self, coro: Coroutine[Any, Any, Any]) -> Any:
        result = await coro
        self._to_cleanup.append(await current_task())
        return result

    def _prepare_fd(self, fd: int) -> None:
        os.set_blocking(fd, False)

    def wrap(self, cls: type[H], fd: int) -> H:
        """Make ``fd`` non-blocking and wrap it in a handle of type ``cls``."""
        self._prepare_fd(fd)
        return cls(fd, self)

    def wrap_callback(self, fd: int, callback: Callable[[int], None]) -> Custom:
        """Make ``fd`` non-blocking and deliver its event masks to ``callback``."""
        self._prepare_fd(fd)
        return Custom(fd, self, callback)

    def rest(self) -> _Rest:
        """Awaitable that parks the task until the start of the next poll."""
        return _Rest(self)

    def poll(self, timeout: float | None = None) -> int:
        """Run one loop iteration and return the number of events handled.

        Resting tasks are resumed first, then events are waited for (forever
        when ``timeout`` is None) and dispatched, and finished tasks released.
        """
        resters, self._resters = self._resters, []
        for task in resters:
            if not task.done:
                task.resume()

        events = self._epoll.poll(-1 if timeout is None else timeout, self.MAX_EVENTS)
        for fd, mask in events:
            state = self._states.get(fd)
            if state is None:
                continue
            if state.callback is not None:
                state.callback(mask)
                continue
            if mask & FLAG_IN:
                state.in_done.notify()
            if mask & FLAG_OUT:
                state.out_done.notify()

        finished, self._to_cleanup = self._to_cleanup, []
        for task in finished:
            if not task.done:
                task.resume()
            task.close()
        return len(events)

    def close(self) -> None:
        """Close the epoll instance."""
        self._epoll.close()

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()