"""File-descriptor handles whose I/O suspends until the descriptor is ready."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

from .coro import AwaitHandle

_COUNTER_MASK = 0xFFFFFFFF


def format_error(prefix: str, error: int) -> str:
    """Describe an errno value the way the I/O helpers report it."""
    return f"{prefix}: {os.strerror(error)}."


def call_io(func: Callable[..., Any], *args: Any) -> Any:
    """Run a system call once; errors propagate as OSError.

    Calls that return nothing count as returning 0.
    """
    result = func(*args)
    return 0 if result is None else result


async def wait_io(owner: Any, waiter: AwaitHandle, func: Callable[..., Any], *args: Any) -> Any:
    """Retry a non-blocking call, waiting on ``waiter`` while it would block.

    Every ``owner.REST_INTERVAL`` attempts the task yields to the owner's
    event loop first, so long chains of ready I/O cannot starve it.
    """
    while True:
        count = owner.suspend_counter
        owner.suspend_counter = (count + 1) & _COUNTER_MASK
        if count % owner.REST_INTERVAL == owner.REST_INTERVAL - 1:
            await owner.rest()
        try:
            return func(*args)
        except BlockingIOError:
            await waiter


class HandleState:
    """Per-descriptor state that the dispatcher wakes up."""

    def __init__(self, fd: int, owner: Any) -> None:
        self.fd = fd
        self.owner = owner
        self.callback: Callable[[int], None] | None = None
        self.in_done = AwaitHandle()
        self.out_done = AwaitHandle()
        self.errored = AwaitHandle()
        owner.add(fd, self)

    def release(self) -> None:
        """Unregister the descriptor from its owner and close it."""
        if self.fd == -1:
            return
        fd, self.fd = self.fd, -1
        try:
            self.owner.remove(fd)
        finally:
            os.close(fd)


class Handle:
    """A non-blocking descriptor registered with a dispatcher."""

    def __init__(self, fd: int, owner: Any) -> None:
        self._state = HandleState(fd, owner)

    @property
    def fd(self) -> int:
        """The native descriptor, or -1 once closed."""
        return self._state.fd

    def fileno(self) -> int:
        return self._state.fd

    def is_valid(self) -> bool:
        return self._state.fd != -1

    async def read(self, count: int) -> bytes:
        """Read up to ``count`` bytes, waiting until some are available."""
        state = self._state
        return await wait_io(state.owner, state.in_done, os.read, state.fd, count)

    async def write(self, data: bytes) -> int:
        """Write ``data``, waiting until the descriptor accepts it; return bytes written."""
        state = self._state
        return await wait_io(state.owner, state.out_done, os.write, state.fd, data)

    def close(self) -> None:
        """Unregister and close the descriptor."""
        self._state.release()

    def __enter__(self) -> Handle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()