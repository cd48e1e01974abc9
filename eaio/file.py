"""Handles over seekable file descriptors."""

from __future__ import annotations

import os
from typing import Any

from .coro import AwaitHandle
from .handle import Handle, HandleState


class _UnwatchedState(HandleState):
    """State for a descriptor that epoll refuses to watch.

    Regular files are always ready, so their I/O never has to wait.
    """

    def __init__(self, fd: int, owner: Any) -> None:
        self.fd = fd
        self.owner = owner
        self.callback = None
        self.in_done = AwaitHandle()
        self.out_done = AwaitHandle()
        self.errored = AwaitHandle()


class File(Handle):
    """A handle with a file position, a size and truncation."""

    def __init__(self, fd: int, owner: Any) -> None:
        try:
            super().__init__(fd, owner)
        except PermissionError:
            self._state = _UnwatchedState(fd, owner)

    def tell(self) -> int:
        """Return the current file offset."""
        return os.lseek(self.fd, 0, os.SEEK_CUR)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the file offset and return the new one."""
        return os.lseek(self.fd, offset, whence)

    def size(self) -> int:
        """Return the file size, leaving the offset where it was."""
        current = self.tell()
        size = os.lseek(self.fd, 0, os.SEEK_END)
        self.seek(current)
        return size

    def truncate(self, length: int) -> None:
        """Cut or extend the file to ``length`` bytes."""
        os.ftruncate(self.fd, length)