"""Non-blocking socket handles."""

from __future__ import annotations

import socket
from typing import Any

from .handle import Handle, wait_io


class Socket(Handle):
    """A socket descriptor whose transfers and accepts wait for readiness."""

    def __init__(self, fd: int, owner: Any) -> None:
        sock = socket.socket(fileno=fd)
        sock.setblocking(False)
        try:
            super().__init__(fd, owner)
        except BaseException:
            sock.detach()
            raise
        self._sock = sock

    async def read(self, count: int) -> bytes:
        raise TypeError("sockets use recv instead of read")

    async def write(self, data: bytes) -> int:
        raise TypeError("sockets use send instead of write")

    async def send(self, data: bytes) -> int:
        """Send ``data``, waiting until the socket accepts it; return bytes sent."""
        state = self._state
        return await wait_io(state.owner, state.out_done, self._sock.send, data)

    async def recv(self, count: int) -> bytes:
        """Receive up to ``count`` bytes; an empty result means end of stream."""
        state = self._state
        return await wait_io(state.owner, state.in_done, self._sock.recv, count)

    def listen(self, backlog: int) -> None:
        self._sock.listen(backlog)

    async def accept(self) -> Socket:
        """Wait for a connection and return it as a socket on the same dispatcher."""
        state = self._state
        conn, _address = await wait_io(state.owner, state.in_done, self._sock.accept)
        return state.owner.wrap(Socket, conn.detach())

    def shutdown(self, how: int) -> None:
        self._sock.shutdown(how)

    def bind(self, address: Any) -> None:
        self._sock.bind(address)

    def setsockopt(self, level: int, optname: int, value: Any) -> None:
        """Set a socket option; booleans are passed as 1 or 0."""
        if isinstance(value, bool):
            value = int(value)
        self._sock.setsockopt(level, optname, value)

    def close(self) -> None:
        self._sock.detach()
        super().close()