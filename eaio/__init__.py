"""Edge-triggered epoll event loop with coroutine-based file, socket and signal handles."""

__version__ = "0.1.0"
__all__ = ["coro", "handle", "dispatcher", "file", "sockets", "signals"]