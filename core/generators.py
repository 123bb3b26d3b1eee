"""
Lazy, pull-based generators backed by producer threads.

A generator decouples a background producer from a foreground consumer. The
producer runs in its own daemon thread and hands items over one at a time
through a Channel, so it is suspended whenever the consumer is not pulling.
Generators are single-pass: once exhausted (or closed) they yield nothing.

Combinators build a new generator around an existing one. Every combinator
starts its own producer thread, and closing a combinator closes the generator
it wraps, so closing the last stage of a pipeline releases every stage.

Usage:
    with transform(scanner, str) as events:
        for rendered in events.iterate():
            print(rendered)
"""

import threading
from types import TracebackType
from typing import Any, Callable, Generic, Iterable, Iterator, Protocol, TypeVar

from core.channel import Channel

T = TypeVar("T")
U = TypeVar("U")
T_co = TypeVar("T_co", covariant=True)


class Generator(Protocol[T_co]):
    """
    Protocol for single-pass lazy sequences.

    `next` and `iterate` expose the same underlying stream; only one consumer
    may drain a generator, using one of them.
    """

    def next(self) -> tuple[T_co | None, bool]:
        """
        Pull the next item, blocking until it is available.

        Returns:
            `(item, True)` while items remain, then `(None, False)` on this and
            every later call.

        Raises:
            Exception: Whatever error stopped the producer, raised once in place
                of the first item it could not produce.
        """
        ...

    def iterate(self) -> Iterator[T_co]:
        """Iterate over the remaining items. Leaving the loop early closes the generator."""
        ...

    def close(self) -> None:
        """Stop the producer and every upstream producer, releasing their resources."""
        ...


class ChannelGenerator(Generic[T]):
    """
    Generator whose items are produced by a callback running in its own thread.

    The callback receives the Channel to publish into and must stop as soon as
    `channel.send` returns False (the consumer gave up). Returning ends the
    stream; raising ends it with that error, which the consumer sees raised
    from `next`.

    Args:
        produce: Producer callback, started immediately in a daemon thread.
        name: Thread name, useful when debugging a pipeline.
        upstream: Generator the producer reads from, closed together with this one.
    """

    def __init__(
        self,
        produce: Callable[[Channel[T]], None],
        *,
        name: str = "generator",
        upstream: Generator[Any] | None = None,
    ) -> None:
        self._channel: Channel[T] = Channel()
        self._upstream = upstream
        self._exhausted = False
        self._thread = threading.Thread(
            target=self._run, args=(produce,), name=name, daemon=True
        )
        self._thread.start()

    def _run(self, produce: Callable[[Channel[T]], None]) -> None:
        try:
            produce(self._channel)
        except BaseException as e:
            # Every failure, SystemExit included, ends the stream. Upstream is
            # released before the consumer can observe the error.
            if self._upstream is not None:
                self._upstream.close()
            self._channel.close(error=e)
        else:
            self._channel.close()

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def next(self) -> tuple[T | None, bool]:
        if self._exhausted:
            return None, False
        try:
            item, ok = self._channel.receive()
        except BaseException:
            self._exhausted = True
            raise
        if not ok:
            self._exhausted = True
        return item, ok

    def iterate(self) -> Iterator[T]:
        try:
            while True:
                item, ok = self.next()
                if not ok:
                    return
                yield item  # type: ignore[misc]
        finally:
            if not self._exhausted:
                self.close()

    def __iter__(self) -> Iterator[T]:
        return self.iterate()

    def close(self) -> None:
        self._exhausted = True
        self._channel.cancel()
        if self._upstream is not None:
            self._upstream.close()
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def __enter__(self) -> "ChannelGenerator[T]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class PeekableGenerator(Generic[T]):
    """
    Generator wrapper that can look at the next item without consuming it.

    Holds at most one cached pull of the wrapped generator. `next` and
    `iterate` hand out the cached item first.
    """

    def __init__(self, inner: Generator[T]) -> None:
        self._inner = inner
        self._peeked: tuple[T | None, bool] | None = None
        self._exhausted = False

    def peek(self) -> tuple[T | None, bool]:
        """Return what the next call to `next` will return, without advancing."""
        if self._peeked is None:
            self._peeked = self._inner.next()
        return self._peeked

    def next(self) -> tuple[T | None, bool]:
        if self._peeked is not None:
            result, self._peeked = self._peeked, None
        else:
            result = self._inner.next()
        if not result[1]:
            self._exhausted = True
        return result

    def iterate(self) -> Iterator[T]:
        try:
            while True:
                item, ok = self.next()
                if not ok:
                    return
                yield item  # type: ignore[misc]
        finally:
            if not self._exhausted:
                self.close()

    def __iter__(self) -> Iterator[T]:
        return self.iterate()

    def close(self) -> None:
        self._exhausted = True
        self._peeked = None
        self._inner.close()

    def __enter__(self) -> "PeekableGenerator[T]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def from_iterable(items: Iterable[T]) -> ChannelGenerator[T]:
    """Build a generator producing the items of a plain iterable from a background thread."""

    def produce(channel: Channel[T]) -> None:
        for item in items:
            if not channel.send(item):
                return

    return ChannelGenerator(produce, name="iterable")


def transform(gen: Generator[T], fn: Callable[[T], U]) -> ChannelGenerator[U]:
    """
    Build a generator whose i-th item is `fn` applied to the i-th item of `gen`.

    Items of `gen` are pulled only as the result is pulled, one for one.
    """

    def produce(channel: Channel[U]) -> None:
        for item in gen.iterate():
            if not channel.send(fn(item)):
                return

    return ChannelGenerator(produce, name="transform", upstream=gen)


def filter_items(
    gen: Generator[T], predicate: Callable[[T], bool]
) -> ChannelGenerator[T]:
    """Build a generator with the items of `gen` that satisfy `predicate`, in order."""

    def produce(channel: Channel[T]) -> None:
        for item in gen.iterate():
            if predicate(item) and not channel.send(item):
                return

    return ChannelGenerator(produce, name="filter", upstream=gen)


def tap(gen: Generator[T], fn: Callable[[T], object]) -> ChannelGenerator[T]:
    """Pass the items of `gen` through unchanged, calling `fn` on each for its side effect."""

    def passthrough(item: T) -> T:
        fn(item)
        return item

    return transform(gen, passthrough)


def into_peekable(gen: Generator[T]) -> PeekableGenerator[T]:
    return PeekableGenerator(gen)


def drain(gen: Generator[Any]) -> int:
    """
    Consume `gen` completely for its side effects.

    Returns:
        The number of items discarded.
    """
    count = 0
    for _ in gen.iterate():
        count += 1
    return count
