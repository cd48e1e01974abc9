# eaio

A small, single-threaded event loop for Linux built on edge-triggered `epoll`.
Descriptors are wrapped in handle objects whose I/O methods are coroutines.
When an operation would block, the coroutine suspends until the dispatcher
sees the descriptor become ready, and then the operation is retried.

The coroutines are driven by the package's own `Task` objects, not by
`asyncio`: they may only await the package's handles and the awaitables it
provides.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

### `eaio.dispatcher`

- `Dispatcher` owns the epoll instance. It can be used as a context manager,
  which calls `close()` on exit.
  - `spawn(func, *args)` calls `func(*args)` and runs the resulting coroutine
    as a `Task` until it first suspends; the task is returned. Once it has
    finished, the next `poll` releases it.
  - `wrap(cls, fd)` puts `fd` in non-blocking mode and returns `cls(fd, dispatcher)`,
    for example `loop.wrap(Handle, fd)` or `loop.wrap(Socket, sock.detach())`.
  - `wrap_callback(fd, callback)` does the same but returns a `Custom` handle:
    every event on it calls `callback(mask)` with the raw epoll mask instead of
    waking coroutines. `Custom.read` and `Custom.write` raise `TypeError`.
  - `poll(timeout=None)` runs one loop iteration: it resumes tasks parked with
    `rest()`, waits for events (forever when `timeout` is `None`, at most
    `MAX_EVENTS` = 128 at a time), wakes the tasks waiting for input or output
    on each ready descriptor, releases finished spawned tasks, and returns the
    number of events it received.
  - `rest()` returns an awaitable that parks the current task until the start
    of the next `poll`.
  - `add(fd, state)` / `remove(fd)` register and unregister a descriptor's
    `HandleState`; handles do this themselves. `fd in dispatcher` tells
    whether a descriptor is registered, and `closed` whether `close()` has run.
- `FLAG_IN`, `FLAG_OUT` and `FLAG_ERR` are the epoll input, output and error
  bits, for use in `wrap_callback` callbacks.

### `eaio.handle`

- `Handle(fd, owner)` registers `fd` with the dispatcher `owner`.
  - `await read(count)` returns up to `count` bytes (`b""` at end of file).
  - `await write(data)` returns the number of bytes written.
  - `fd` / `fileno()` give the descriptor (`-1` once closed), `is_valid()`
    whether it is still open.
  - `close()` unregisters and closes the descriptor; it is safe to call twice.
    Handles are context managers that close on exit.
- `HandleState` holds a descriptor's owner, optional callback and the
  `in_done`, `out_done` and `errored` wake-up points.
- `wait_io(owner, waiter, func, *args)` calls `func(*args)`, awaiting `waiter`
  and retrying whenever it raises `BlockingIOError`. Every
  `owner.REST_INTERVAL` (1024) attempts it awaits `owner.rest()` first, so a
  long run of I/O that never blocks still lets other tasks in.
- `call_io(func, *args)` runs a call once and returns its result, or `0` when
  it returns `None`.
- `format_error(prefix, error)` gives `"<prefix>: <strerror text>."` for an
  errno value.

### `eaio.file`

`File` is a `Handle` with `tell()`, `seek(offset, whence=os.SEEK_SET)`,
`size()` (which leaves the offset where it was) and `truncate(length)`.
Regular files cannot be watched by epoll; a `File` over one is not
registered, and its reads and writes complete without waiting.

### `eaio.sockets`

`Socket` wraps a socket descriptor and adds `await send(data)`,
`await recv(count)`, `listen(backlog)`, `await accept()`, `shutdown(how)`,
`bind(address)` and `setsockopt(level, optname, value)` (booleans are passed
as `1` or `0`). `accept()` returns the new connection as a `Socket` wrapped by
the same dispatcher. `read` and `write` raise `TypeError`; use `recv` and
`send`.

### `eaio.signals`

`Signal` wraps a signal descriptor; `await get()` reads one 128-byte record
and returns it as a `SignalInfo` dataclass (`signo`, `pid`, `uid`, `status`
and the other fields of the record). `SignalInfo.from_bytes(data)` decodes a
record and raises `ValueError` if it is not exactly `SIGINFO_SIZE` bytes.
`read` and `write` raise `TypeError`.

### `eaio.coro`

- `Task(coro)` drives a coroutine: `resume()` runs it until it suspends or
  finishes, after which `done`, `result` and `exception` describe the outcome;
  `close()` discards it.
- `AwaitHandle` is a wake-up point for one waiting task. `notify(value)`
  resumes the waiter; a value posted while nobody waits is handed to the next
  awaiter without suspending it.
- `current_task()` is an awaitable that yields the running `Task`.

## Example

```python
import os

from eaio.dispatcher import Dispatcher
from eaio.handle import Handle

with Dispatcher() as loop:
    read_fd, write_fd = os.pipe()
    reader = loop.wrap(Handle, read_fd)
    writer = loop.wrap(Handle, write_fd)

    received = []

    async def consume():
        received.append(await reader.read(5))

    async def produce():
        await writer.write(b"hello")

    loop.spawn(consume)
    loop.spawn(produce)
    while not received:
        loop.poll(1.0)

    print(received[0])  # b'hello'
    reader.close()
    writer.close()
```

## Errors

Failing system calls raise `OSError` (or one of its subclasses) inside the
coroutine that made them; "would block" is the one error handled by
suspending. An exception that escapes a task propagates out of the `spawn`
or `poll` call that resumed it.

## What it does not do

- There is no run-forever call, no timers and no cancellation: the caller
  loops over `poll` itself.
- It does not create descriptors. Pipes, sockets and files come from `os` and
  `socket`; a signal descriptor (signalfd) must be obtained elsewhere and
  passed to `Dispatcher.wrap(Signal, fd)`.
- It works only on Linux, where `select.epoll` is available.