import errno
import os

import pytest

from eaio.coro import AwaitHandle, Task
from eaio.handle import Handle, HandleState, call_io, format_error, wait_io


class FakeOwner:
    REST_INTERVAL = 4

    def __init__(self):
        self.suspend_counter = 0
        self.added = {}
        self.removed = []
        self.rest_handle = AwaitHandle()

    def add(self, fd, state):
        self.added[fd] = state

    def remove(self, fd):
        self.removed.append(fd)

    def rest(self):
        return self.rest_handle


def nonblocking_pipe():
    r, w = os.pipe()
    os.set_blocking(r, False)
    os.set_blocking(w, False)
    return r, w


def test_format_error_uses_strerror():
    expected = "read: " + os.strerror(errno.EBADF) + "."
    assert format_error("read", errno.EBADF) == expected


def test_call_io_returns_result_and_zero_for_none():
    r, w = nonblocking_pipe()
    try:
        assert call_io(os.write, w, b"abc") == len(b"abc")
        assert call_io(lambda: None) == 0
    finally:
        os.close(r)
        os.close(w)


def test_call_io_raises_os_error():
    r, w = os.pipe()
    os.close(r)
    os.close(w)
    with pytest.raises(OSError) as info:
        call_io(os.read, r, 1)
    assert info.value.errno == errno.EBADF


def test_handle_state_registers_and_releases():
    owner = FakeOwner()
    r, w = nonblocking_pipe()
    state = HandleState(r, owner)
    assert owner.added[r] is state
    assert state.callback is None

    state.release()
    assert owner.removed == [r]
    assert state.fd == -1
    with pytest.raises(OSError):
        os.fstat(r)

    state.release()
    assert owner.removed == [r]
    os.close(w)


def test_read_available_data_completes_immediately():
    owner = FakeOwner()
    r, w = nonblocking_pipe()
    os.write(w, b"hello")
    with Handle(r, owner) as handle:
        task = Task(handle.read(16))
        task.resume()
        assert task.done
        assert task.result == b"hello"
    os.close(w)


def test_read_suspends_until_readiness_is_notified():
    owner = FakeOwner()
    r, w = nonblocking_pipe()
    handle = Handle(r, owner)
    task = Task(handle.read(16))
    task.resume()
    assert not task.done
    assert handle._state.in_done.waiter is task

    os.write(w, b"late")
    handle._state.in_done.notify()
    assert task.done
    assert task.result == b"late"
    handle.close()
    os.close(w)


def test_write_returns_count_and_data_arrives():
    owner = FakeOwner()
    r, w = nonblocking_pipe()
    handle = Handle(w, owner)
    task = Task(handle.write(b"payload"))
    task.resume()
    assert task.result == len(b"payload")
    assert os.read(r, 16) == b"payload"
    handle.close()
    os.close(r)


def test_write_to_closed_pipe_raises():
    owner = FakeOwner()
    r, w = nonblocking_pipe()
    os.close(r)
    handle = Handle(w, owner)
    task = Task(handle.write(b"x"))
    with pytest.raises(BrokenPipeError):
        task.resume()
    handle.close()


def test_wait_io_rests_every_interval():
    owner = FakeOwner()
    owner.suspend_counter = owner.REST_INTERVAL - 1
    r, w = nonblocking_pipe()
    os.write(w, b"data")
    handle = Handle(r, owner)
    task = Task(handle.read(16))
    task.resume()
    assert not task.done
    assert owner.rest_handle.waiter is task
    assert owner.suspend_counter == owner.REST_INTERVAL

    owner.rest_handle.notify()
    assert task.result == b"data"
    handle.close()
    os.close(w)


def test_wait_io_retries_after_would_block():
    owner = FakeOwner()
    waiter = AwaitHandle()
    calls = []

    def flaky(tag):
        calls.append(tag)
        if len(calls) == 1:
            raise BlockingIOError(errno.EAGAIN, "again")
        return tag

    task = Task(wait_io(owner, waiter, flaky, "ok"))
    task.resume()
    assert not task.done
    waiter.notify()
    assert task.result == "ok"
    assert calls == ["ok", "ok"]


def test_wait_io_propagates_other_errors():
    owner = FakeOwner()

    def denied():
        raise PermissionError(errno.EACCES, "denied")

    task = Task(wait_io(owner, AwaitHandle(), denied))
    with pytest.raises(PermissionError):
        task.resume()
    assert task.done


def test_close_invalidates_handle():
    owner = FakeOwner()
    r, w = nonblocking_pipe()
    handle = Handle(r, owner)
    assert handle.is_valid()
    assert handle.fileno() == r
    handle.close()
    assert not handle.is_valid()
    assert handle.fd == -1
    assert owner.removed == [r]
    os.close(w)