"""
Pull-based iterators behind LazySequence.

Every iterator exposes ``next()``, which returns the next value or the
EXHAUSTED marker. Producers (generate, range) originate values; decorators
(map, filter, take, take_while) own exactly one inner iterator and pull from it
only when asked.
"""

import logging
import operator
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

from models import EXHAUSTED, TakeWhileState

T = TypeVar("T")
U = TypeVar("U")

logger = logging.getLogger("lazyseq.iterators")


class BaseIterator(ABC, Generic[T]):
    """
    A single-pass lazy source of values.

    Instances are not safe for concurrent use and cannot be reset. Use
    ``clone()`` to get an independent copy of the iteration state.
    """

    @abstractmethod
    def next(self):
        """Advance by one element and return it, or EXHAUSTED"""

    @abstractmethod
    def clone(self) -> "BaseIterator[T]":
        """Copy the iteration state; captured callables are shared"""

    def __copy__(self):
        return self.clone()


# --------- producers ----------

class GenerateIterator(BaseIterator[T]):
    """Calls ``func`` on every pull. Never exhausts on its own."""

    def __init__(self, func: Callable[[], T]):
        self._func = func

    def next(self):
        return self._func()

    def clone(self):
        return GenerateIterator(self._func)


class RangeIterator(BaseIterator[T]):
    """
    Walks positions from ``first`` until ``is_last(position)`` holds.

    Each pull emits the current position and then moves to
    ``step(position)``. The position is never rolled back, so once
    ``is_last`` holds the iterator stays exhausted.
    """

    def __init__(self, first: T, is_last: Callable[[T], bool], step: Callable[[T], T]):
        self._current = first
        self._is_last = is_last
        self._step = step

    def next(self):
        if self._is_last(self._current):
            return EXHAUSTED
        value = self._current
        self._current = self._step(value)
        return value

    def clone(self):
        return RangeIterator(self._current, self._is_last, self._step)


# --------- decorators ----------

class MapIterator(BaseIterator[U]):
    """Applies ``func`` to each inner value at the moment it is pulled."""

    def __init__(self, inner: BaseIterator[T], func: Callable[[T], U]):
        self._inner = inner
        self._func = func

    def next(self):
        value = self._inner.next()
        if value is EXHAUSTED:
            return EXHAUSTED
        return self._func(value)

    def clone(self):
        return MapIterator(self._inner.clone(), self._func)


class FilterIterator(BaseIterator[T]):
    """
    Skips inner values failing ``predicate``.

    Rejected values are consumed from the inner iterator and are gone.
    """

    def __init__(self, inner: BaseIterator[T], predicate: Callable[[T], bool]):
        self._inner = inner
        self._predicate = predicate

    def next(self):
        value = self._inner.next()
        while value is not EXHAUSTED:
            if self._predicate(value):
                return value
            value = self._inner.next()
        return EXHAUSTED

    def clone(self):
        return FilterIterator(self._inner.clone(), self._predicate)


class TakeIterator(BaseIterator[T]):
    """Forwards at most ``count`` pulls to the inner iterator."""

    def __init__(self, inner: BaseIterator[T], count: int):
        count = operator.index(count)
        if count < 0:
            raise ValueError(f"take count must be >= 0, got {count}")
        self._inner = inner
        self._remaining = count

    @property
    def remaining(self) -> int:
        return self._remaining

    def next(self):
        if self._remaining <= 0:
            return EXHAUSTED
        self._remaining -= 1
        if self._remaining == 0:
            logger.debug("take budget spent")
        return self._inner.next()

    def clone(self):
        other = TakeIterator(self._inner.clone(), 0)
        other._remaining = self._remaining
        return other


class TakeWhileIterator(BaseIterator[T]):
    """
    Yields inner values while ``predicate`` holds.

    The first missing or failing value moves the iterator to ENDED; that value
    is discarded and the inner iterator is never pulled again.
    """

    def __init__(self, inner: BaseIterator[T], predicate: Callable[[T], bool]):
        self._inner = inner
        self._predicate = predicate
        self._state = TakeWhileState.ACTIVE

    @property
    def state(self) -> TakeWhileState:
        return self._state

    def next(self):
        if self._state is TakeWhileState.ENDED:
            return EXHAUSTED

        value = self._inner.next()
        if value is not EXHAUSTED and self._predicate(value):
            return value

        self._state = TakeWhileState.ENDED
        logger.debug("take_while ended on %r", value)
        return EXHAUSTED

    def clone(self):
        other = TakeWhileIterator(self._inner.clone(), self._predicate)
        other._state = self._state
        return other


def is_exhausted(value: Any) -> bool:
    """True when ``value`` is the end-of-sequence marker"""
    return value is EXHAUSTED
