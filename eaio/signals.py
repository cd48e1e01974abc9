"""Handles that read signal records from a signal descriptor."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import Any

from .handle import Handle, wait_io

SIGINFO_SIZE = 128
_FIELDS = struct.Struct("=IiiIIiIIIIiiQQQQH")


@dataclass(frozen=True)
class SignalInfo:
    """One signal record as delivered by a signal descriptor."""

    signo: int
    errno: int
    code: int
    pid: int
    uid: int
    fd: int
    tid: int
    band: int
    overrun: int
    trapno: int
    status: int
    int_value: int
    ptr: int
    utime: int
    stime: int
    addr: int
    addr_lsb: int

    @classmethod
    def from_bytes(cls, data: bytes) -> SignalInfo:
        """Decode a record; it must be exactly ``SIGINFO_SIZE`` bytes."""
        if len(data) != SIGINFO_SIZE:
            raise ValueError(f"signal record must be {SIGINFO_SIZE} bytes, got {len(data)}")
        return cls(*_FIELDS.unpack_from(data))


class Signal(Handle):
    """A signal descriptor; records are read one at a time with :meth:`get`."""

    async def read(self, count: int) -> Any:
        raise TypeError("signal handles use get instead of read")

    async def write(self, data: bytes) -> Any:
        raise TypeError("signal handles cannot be written")

    async def get(self) -> SignalInfo:
        """Wait for the next signal record and decode it."""
        state = self._state
        data = await wait_io(state.owner, state.in_done, os.read, state.fd, SIGINFO_SIZE)
        return SignalInfo.from_bytes(data)