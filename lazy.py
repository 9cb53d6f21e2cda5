import logging
import operator
from typing import Any, Callable, Generic, Optional, TypeVar

from iterators import (
    BaseIterator,
    FilterIterator,
    GenerateIterator,
    MapIterator,
    RangeIterator,
    TakeIterator,
    TakeWhileIterator,
    is_exhausted,
)

T = TypeVar("T")

logger = logging.getLogger("lazyseq.lazy")


class LazySequence(Generic[T]):
    """
    A chainable, lazy sequence. Each combinator wraps the current iterator in a
    new one and hands it to a fresh LazySequence; nothing is pulled until
    ``each`` (or ``next``) is called.

    Chaining transfers ownership: the receiver is consumed and cannot be used
    again. Call ``copy()`` first to keep an independent handle.
    """
    def __init__(self, iterator: BaseIterator[T]):
        self._iterator: Optional[BaseIterator[T]] = iterator

    # --------- chainable operators (lazy) ----------
    def map(self, fn: Callable[[T], Any]) -> "LazySequence":
        return LazySequence(MapIterator(self.release(), fn))

    def filter(self, pred: Callable[[T], bool]) -> "LazySequence[T]":
        return LazySequence(FilterIterator(self.release(), pred))

    def take(self, n: int) -> "LazySequence[T]":
        n = operator.index(n)
        if n < 0:
            raise ValueError(f"take count must be >= 0, got {n}")
        return LazySequence(TakeIterator(self.release(), n))

    def take_while(self, pred: Callable[[T], bool]) -> "LazySequence[T]":
        return LazySequence(TakeWhileIterator(self.release(), pred))

    def copy(self) -> "LazySequence[T]":
        """Independent sequence over a clone of the current iteration state"""
        return LazySequence(self._owned().clone())

    # --------- forcing evaluation ----------
    def next(self):
        """Pull one value from the wrapped chain, or EXHAUSTED"""
        return self._owned().next()

    def each(self, fn: Callable[[T], Any]) -> None:
        """Call ``fn`` on every remaining value, in order, until exhaustion"""
        iterator = self.release()
        delivered = 0
        value = iterator.next()
        while not is_exhausted(value):
            fn(value)
            delivered += 1
            value = iterator.next()
        logger.debug("each delivered %d value(s) from %s", delivered, type(iterator).__name__)

    # --------- helpers ----------
    @property
    def iterator(self) -> BaseIterator[T]:
        return self._owned()

    @property
    def consumed(self) -> bool:
        return self._iterator is None

    def _owned(self) -> BaseIterator[T]:
        if self._iterator is None:
            raise RuntimeError("LazySequence has already been consumed")
        return self._iterator

    def release(self) -> BaseIterator[T]:
        """Take ownership of the wrapped iterator, leaving this sequence consumed"""
        iterator = self._owned()
        self._iterator = None
        return iterator

    def __repr__(self):
        if self._iterator is None:
            return "LazySequence(<consumed>)"
        return f"LazySequence({type(self._iterator).__name__})"


# --------- entry points ----------
def from_generator(fn: Callable[[], T]) -> LazySequence[T]:
    """Infinite sequence of ``fn()`` results; bound it with take or take_while"""
    return LazySequence(GenerateIterator(fn))


def range(begin, end_or_is_last, step: Optional[Callable] = None) -> LazySequence:
    """
    Sequence of positions from ``begin``.

    range(begin, end)               -> begin, begin + 1, ... up to (excluding) end
    range(begin, end, step)         -> same stop rule, ``step(position)`` gives the next position
    range(begin, is_last, step)     -> stops at the first position where ``is_last(position)`` holds

    The value emitted is always the position before stepping. The stop rule for
    an ``end`` value is equality, so a step that jumps over ``end`` never stops
    on its own.
    """
    if callable(end_or_is_last):
        if step is None:
            raise TypeError("range with a stop predicate requires a step function")
        is_last = end_or_is_last
    else:
        end = end_or_is_last
        is_last = lambda position: position == end

    if step is None:
        step = _increment

    logger.debug("range built from %r", begin)
    return LazySequence(RangeIterator(begin, is_last, step))


def _increment(position):
    return position + 1
