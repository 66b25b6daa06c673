"""One-item lookahead over plain and async iterables."""

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from run_partition.cursor.types import MISSING, Missing, Pair


class LookaheadPairs[T]:
    """
    Iterator of (current, lookahead) pairs over an iterable.

    Exactly one item is buffered: the lookahead of one pair is the current
    of the next. The lookahead of the last pair is MISSING. The upstream is
    never pulled again once it has been exhausted.
    """

    def __init__(self, iterable: Iterable[T]):
        self._iterator = iter(iterable)
        self._buffered: T | Missing = MISSING
        self._started = False

    def __iter__(self) -> Iterator[Pair[T]]:
        return self

    def __next__(self) -> Pair[T]:
        if not self._started:
            self._buffered = next(self._iterator, MISSING)
            self._started = True

        current = self._buffered
        if current is MISSING:
            raise StopIteration

        self._buffered = next(self._iterator, MISSING)
        return current, self._buffered


class AsyncLookaheadPairs[T]:
    """
    Async counterpart of LookaheadPairs; each pull may suspend.

    A cancelled pull leaves the buffered item in place, so the next pull
    retries from the same position.
    """

    def __init__(self, aiterable: AsyncIterable[T]):
        self._iterator = aiter(aiterable)
        self._buffered: T | Missing = MISSING
        self._started = False

    def __aiter__(self) -> AsyncIterator[Pair[T]]:
        return self

    async def __anext__(self) -> Pair[T]:
        if not self._started:
            self._buffered = await anext(self._iterator, MISSING)
            self._started = True

        current = self._buffered
        if current is MISSING:
            raise StopAsyncIteration

        self._buffered = await anext(self._iterator, MISSING)
        return current, self._buffered
