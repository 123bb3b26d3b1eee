"""
Unbuffered handoff channel between one producer thread and one consumer.

A Channel holds at most one item. `send` blocks until the consumer has taken
the item (rendezvous), which is what gives every pipeline stage its
backpressure: a producer never runs more than one item ahead of its consumer.

The producer ends the stream with `close`, optionally attaching the error that
stopped it; the consumer sees that error raised from `receive` once, after
every item sent before it. The consumer gives up early with `cancel`, which
wakes a producer blocked in `send` so it can release its resources.
"""

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class Channel(Generic[T]):
    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._item: T | None = None
        self._full = False
        self._closed = False
        self._cancelled = False
        self._error: BaseException | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def send(self, item: T) -> bool:
        """
        Hand `item` to the consumer, blocking until it has been received.

        Args:
            item: The value to hand off.

        Returns:
            True if the consumer received the item, False if the channel was
            cancelled. A producer must stop producing once this returns False.

        Raises:
            RuntimeError: If the channel was already closed by the producer.
        """
        with self._cond:
            if self._closed:
                raise RuntimeError("send on a closed channel")
            if self._cancelled:
                return False

            self._item = item
            self._full = True
            self._cond.notify_all()

            self._cond.wait_for(lambda: not self._full or self._cancelled)
            return not self._cancelled

    def receive(self) -> tuple[T | None, bool]:
        """
        Take the next item, blocking until one is sent or the stream ends.

        Returns:
            `(item, True)` for a received item, `(None, False)` once the channel
            is closed or cancelled.

        Raises:
            BaseException: The error the producer closed the channel with. It is
                raised by a single call; later calls return `(None, False)`.
        """
        with self._cond:
            self._cond.wait_for(
                lambda: self._full or self._closed or self._cancelled
            )
            if self._cancelled:
                return None, False
            if self._full:
                item = self._item
                self._item = None
                self._full = False
                self._cond.notify_all()
                return item, True

            if self._error is not None:
                error, self._error = self._error, None
                raise error
            return None, False

    def close(self, error: BaseException | None = None) -> None:
        """End the stream. Called by the producer, at most once."""
        with self._cond:
            self._closed = True
            self._error = error
            self._cond.notify_all()

    def cancel(self) -> None:
        """Give up on the stream. Called by the consumer; idempotent."""
        with self._cond:
            self._cancelled = True
            self._item = None
            self._full = False
            self._error = None
            self._cond.notify_all()
