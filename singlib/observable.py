"""Bounded publish/subscribe primitives built on threads."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, Generic, Iterator, Optional, Tuple, TypeVar

T = TypeVar("T")

__all__ = ["ClosedError", "Subscription", "Subscriber", "Observer"]


class ClosedError(Exception):
    """Raised when a subscriber or observer has been closed."""


class Subscription(Generic[T]):
    """The receiving side of a :class:`Subscriber`."""

    def __init__(self, subscriber: "Subscriber[T]") -> None:
        self._subscriber = subscriber

    @property
    def done(self) -> threading.Event:
        return self._subscriber._done

    def get(self, timeout: Optional[float] = None) -> T:
        """Wait for the next item.

        Raises ``ClosedError`` once the subscriber is closed and drained, and
        ``TimeoutError`` when ``timeout`` elapses first.
        """
        return self._subscriber._get(timeout)

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ClosedError:
                return


class Subscriber(Generic[T]):
    """Holds up to ``size`` pending items; further items are dropped."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("size must not be negative")
        self._size = size
        self._items: Deque[T] = deque()
        self._cond = threading.Condition()
        self._done = threading.Event()
        self._waiting = 0
        self._subscription: Subscription[T] = Subscription(self)

    def emit(self, item: T) -> None:
        """Queue ``item`` if there is room; silently drop it otherwise."""
        with self._cond:
            if self._done.is_set():
                return
            if len(self._items) < self._size + self._waiting:
                self._items.append(item)
                self._cond.notify()

    def close(self) -> None:
        with self._cond:
            if self._done.is_set():
                raise ClosedError("subscriber already closed")
            self._done.set()
            self._cond.notify_all()

    def subscription(self) -> Tuple[Subscription[T], threading.Event]:
        """The subscription and the event set when the subscriber closes."""
        return self._subscription, self._done

    def _get(self, timeout: Optional[float]) -> T:
        with self._cond:
            self._waiting += 1
            try:
                ready = self._cond.wait_for(
                    lambda: bool(self._items) or self._done.is_set(), timeout
                )
            finally:
                self._waiting -= 1
            if not ready:
                raise TimeoutError("no item received")
            if self._items:
                return self._items.popleft()
            raise ClosedError("subscriber closed")


class Observer(Generic[T]):
    """Fans items from one subscriber out to many listeners."""

    def __init__(self, subscriber: Subscriber[T], listener_buffer_size: int) -> None:
        self._subscriber = subscriber
        self._listener_size = listener_buffer_size
        self._listeners: Dict[Subscription[T], Subscriber[T]] = {}
        self._lock = threading.Lock()
        self._done = False
        self._thread = threading.Thread(target=self._process, daemon=True)
        self._thread.start()

    def _process(self) -> None:
        subscription, _ = self._subscriber.subscription()
        for entry in subscription:
            with self._lock:
                for listener in self._listeners.values():
                    listener.emit(entry)
        with self._lock:
            for listener in self._listeners.values():
                try:
                    listener.close()
                except ClosedError:
                    pass

    def subscribe(self) -> Tuple[Subscription[T], threading.Event]:
        """Register a new listener; ``ClosedError`` if the observer is closed."""
        with self._lock:
            if self._done:
                raise ClosedError("observer closed")
            listener: Subscriber[T] = Subscriber(self._listener_size)
            subscription, done = listener.subscription()
            self._listeners[subscription] = listener
            return subscription, done

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            listener = self._listeners.pop(subscription, None)
            if listener is None:
                return
            try:
                listener.close()
            except ClosedError:
                pass

    def emit(self, item: T) -> None:
        self._subscriber.emit(item)

    def close(self) -> None:
        with self._lock:
            if self._done:
                raise ClosedError("observer already closed")
            self._subscriber.close()
            self._done = True