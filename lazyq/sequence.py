from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from .types import *
from .errors import IndexOutOfRange, NotIndexableError

# --- core functionality ---
from .extensions.core import _CoreOperations

# --- accessors ---
from .extensions.terminal import TerminalAccessor

logger = logging.getLogger(__name__)


def _invoke(func: Callable, index: int, *args: Any) -> Any:
    """call a user supplied function, tagging any error with the index being processed."""
    try:
        return func(*args)
    except Exception as e:
        e.add_note(f"raised while processing element at index {index}")
        raise


def _stops(outcome: Any) -> bool:
    """a consumer stops the drain by returning a falsy value; returning nothing continues it"""
    return outcome is not None and not outcome


def _with_index(selector: Callable, with_index: bool) -> Callable[[Any, int], Any]:
    if with_index:
        return selector
    return lambda element, index: selector(element)


# --- base sequence ---

class Sequence(ABC, _CoreOperations[T]):
    """
    an immutable, lazily evaluated description of a computation over a source.
    nothing is read until a drain (each, get, value, to.*, async_) runs.
    every node owns its upstream in `parent` and inherits the instrumentation of its root.
    """
    capability = Capability.ITERABLE_ONLY

    def __init__(self, parent: Optional['Sequence'] = None,
                 instrumentation: Optional[Instrumentation] = None):
        self.parent = parent
        if instrumentation is None and parent is not None:
            instrumentation = parent.instrumentation
        self.instrumentation = instrumentation
        # --- initialize accessors ---
        self.to = TerminalAccessor(self)

    @abstractmethod
    def _iterate(self) -> Iterator[T]:
        """yield elements in order, pulling from upstream only as far as the caller consumes"""
        pass

    @property
    def is_indexable(self) -> bool:
        return self.capability is Capability.INDEXABLE

    def each(self, consumer: Consumer[T]) -> bool:
        """
        drain the sequence, calling consumer(element, index) for every element.
        a consumer returning False (or any falsy value other than None, such as
        numpy's False_) halts the drain before anything further is read.
        returns True if every element was visited, False on early stop.
        """
        if self.instrumentation is not None:
            self.instrumentation.drains_started += 1

        iterator = self._iterate()
        try:
            for index, element in enumerate(iterator):
                if _stops(_invoke(consumer, index, element, index)):
                    logger.debug(f"{type(self).__name__}: drain stopped by consumer at index {index}")
                    return False
            return True
        finally:
            iterator.close()

    def get(self, index: int) -> T:
        """positional access, only available on indexable sequences"""
        raise NotIndexableError(type(self).__name__)

    def value(self) -> List[T]:
        """materialize the sequence into a list"""
        return self.to.list()

    def async_(self, config: Optional['AsyncConfig'] = None) -> 'AsyncSequence[T]':
        """an asynchronous view of this sequence, drained on the running event loop"""
        from .asynchronous import AsyncSequence
        return AsyncSequence(self, config)

    def __iter__(self) -> Iterator[T]:
        return self._iterate()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(capability={self.capability.value})"


class IndexedSequence(Sequence[T]):
    """
    a sequence with a known length and direct positional access.
    get(i) composes each node's lookup, so it reads only the source positions it needs.
    """
    capability = Capability.INDEXABLE

    @abstractmethod
    def length(self) -> int:
        pass

    @abstractmethod
    def _get(self, index: int) -> T:
        """unchecked lookup. callers guarantee 0 <= index < length()"""
        pass

    def get(self, index: int) -> T:
        length = self.length()
        if not 0 <= index < length:
            raise IndexOutOfRange(index, length)
        return self._get(index)

    def _iterate(self) -> Iterator[T]:
        for index in range(self.length()):
            yield self._get(index)

    def __len__(self) -> int:
        return self.length()

    def __getitem__(self, index: int) -> T:
        return self.get(index)


# --- sources ---

class ArrayWrapper(IndexedSequence[T]):
    """wraps a fixed-length indexable collection without copying or reading it"""

    def __init__(self, source: Any, instrumentation: Optional[Instrumentation] = None):
        super().__init__(None, instrumentation)
        self._source = source
        self._length = len(source)

    def length(self) -> int:
        return self._length

    def _get(self, index: int) -> T:
        return self._source[index]


class IterableWrapper(Sequence[T]):
    """
    wraps any iterable as an iterable-only root. a one-shot iterator (e.g. a generator)
    can only be drained once; later drains see whatever it has left.
    """

    def __init__(self, source: Iterable[T], instrumentation: Optional[Instrumentation] = None):
        super().__init__(None, instrumentation)
        self._source = source

    def _iterate(self) -> Iterator[T]:
        yield from self._source


class GeneratedSequence(IndexedSequence[T]):
    """element i is produced by calling factory(i), only when position i is requested"""

    def __init__(self, factory: Callable[[int], T], count: int,
                 instrumentation: Optional[Instrumentation] = None):
        super().__init__(None, instrumentation)
        self._factory = factory
        self._count = max(0, count)

    def length(self) -> int:
        return self._count

    def _get(self, index: int) -> T:
        return _invoke(self._factory, index, index)


# --- map ---

class MappedSequence(Sequence[U]):
    def __init__(self, parent: Sequence[T], selector: Callable, with_index: bool = False):
        super().__init__(parent)
        self._apply = _with_index(selector, with_index)

    def _iterate(self) -> Iterator[U]:
        for index, element in enumerate(self.parent._iterate()):
            yield _invoke(self._apply, index, element, index)


class IndexedMappedSequence(IndexedSequence[U]):
    def __init__(self, parent: IndexedSequence[T], selector: Callable, with_index: bool = False):
        super().__init__(parent)
        self._apply = _with_index(selector, with_index)

    def length(self) -> int:
        return self.parent.length()

    def _get(self, index: int) -> U:
        return _invoke(self._apply, index, self.parent._get(index), index)


# --- filter ---

class FilteredSequence(Sequence[T]):
    """
    keeps the elements matching the predicate (or rejects them when negate is set).
    the output length is unknown without a full scan, so this is never indexable.
    """

    def __init__(self, parent: Sequence[T], predicate: Predicate[T], negate: bool = False):
        super().__init__(parent)
        self._predicate = predicate
        self._negate = negate

    def _iterate(self) -> Iterator[T]:
        for index, element in enumerate(self.parent._iterate()):
            if bool(_invoke(self._predicate, index, element)) is not self._negate:
                yield element


# --- take / skip ---

class TakeSequence(Sequence[T]):
    def __init__(self, parent: Sequence[T], count: int):
        super().__init__(parent)
        self._count = count

    def _iterate(self) -> Iterator[T]:
        if self._count <= 0:
            return
        taken = 0
        for element in self.parent._iterate():
            yield element
            taken += 1
            # stop before asking upstream for one more
            if taken >= self._count:
                return


class IndexedTakeSequence(IndexedSequence[T]):
    def __init__(self, parent: IndexedSequence[T], count: int):
        super().__init__(parent)
        self._count = count

    def length(self) -> int:
        return max(0, min(self._count, self.parent.length()))

    def _get(self, index: int) -> T:
        return self.parent._get(index)


class SkipSequence(Sequence[T]):
    def __init__(self, parent: Sequence[T], count: int):
        super().__init__(parent)
        self._count = count

    def _iterate(self) -> Iterator[T]:
        for index, element in enumerate(self.parent._iterate()):
            if index >= self._count:
                yield element


class IndexedSkipSequence(IndexedSequence[T]):
    """skipped positions are never read"""

    def __init__(self, parent: IndexedSequence[T], count: int):
        super().__init__(parent)
        self._count = max(0, count)

    def length(self) -> int:
        return max(0, self.parent.length() - self._count)

    def _get(self, index: int) -> T:
        return self.parent._get(index + self._count)


class TakeWhileSequence(Sequence[T]):
    def __init__(self, parent: Sequence[T], predicate: Predicate[T]):
        super().__init__(parent)
        self._predicate = predicate

    def _iterate(self) -> Iterator[T]:
        for index, element in enumerate(self.parent._iterate()):
            if not _invoke(self._predicate, index, element):
                return
            yield element


class SkipWhileSequence(Sequence[T]):
    def __init__(self, parent: Sequence[T], predicate: Predicate[T]):
        super().__init__(parent)
        self._predicate = predicate

    def _iterate(self) -> Iterator[T]:
        skipping = True
        for index, element in enumerate(self.parent._iterate()):
            if skipping and _invoke(self._predicate, index, element):
                continue
            skipping = False
            yield element


# --- concat / tap ---

class ConcatenatedSequence(Sequence[T]):
    def __init__(self, parent: Sequence[T], other: Sequence[T]):
        super().__init__(parent)
        self._other = other

    def _iterate(self) -> Iterator[T]:
        yield from self.parent._iterate()
        yield from self._other._iterate()


class IndexedConcatenatedSequence(IndexedSequence[T]):
    def __init__(self, parent: IndexedSequence[T], other: IndexedSequence[T]):
        super().__init__(parent)
        self._other = other

    def length(self) -> int:
        return self.parent.length() + self._other.length()

    def _get(self, index: int) -> T:
        head_length = self.parent.length()
        if index < head_length:
            return self.parent._get(index)
        return self._other._get(index - head_length)


class TapSequence(Sequence[T]):
    """calls action(element, index) for each element as it passes through"""

    def __init__(self, parent: Sequence[T], action: Callable[[T, int], Any]):
        super().__init__(parent)
        self._action = action

    def _iterate(self) -> Iterator[T]:
        for index, element in enumerate(self.parent._iterate()):
            _invoke(self._action, index, element, index)
            yield element
