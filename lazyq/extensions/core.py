from __future__ import annotations
import typing
from ..types import *

if typing.TYPE_CHECKING:
    from ..sequence import Sequence


class _CoreOperations(Generic[T]):
    """
    chain-building operators. each returns a new node and never calls the supplied function;
    the node's capability follows from its operator and its upstream's capability.
    """

    def map(self: 'Sequence[T]', selector: Selector[T, U]) -> 'Sequence[U]':
        """project each element to a new form"""
        from ..sequence import MappedSequence, IndexedMappedSequence
        if self.capability is Capability.INDEXABLE:
            return IndexedMappedSequence(self, selector)
        return MappedSequence(self, selector)

    def map_with_index(self: 'Sequence[T]', selector: IndexedSelector[T, U]) -> 'Sequence[U]':
        """project each element using selector(element, index), index being this node's own position"""
        from ..sequence import MappedSequence, IndexedMappedSequence
        if self.capability is Capability.INDEXABLE:
            return IndexedMappedSequence(self, selector, with_index=True)
        return MappedSequence(self, selector, with_index=True)

    def identity(self: 'Sequence[T]') -> 'Sequence[T]':
        """pass-through layer that keeps capability and length"""
        from ..factories import identity
        return self.map(identity)

    def filter(self: 'Sequence[T]', predicate: Predicate[T]) -> 'Sequence[T]':
        """keep elements matching the predicate. survivors are re-indexed from 0"""
        from ..sequence import FilteredSequence
        # always iterable-only: the output length is unknown without a full scan
        return FilteredSequence(self, predicate)

    def reject(self: 'Sequence[T]', predicate: Predicate[T]) -> 'Sequence[T]':
        """drop elements matching the predicate"""
        from ..sequence import FilteredSequence
        return FilteredSequence(self, predicate, negate=True)

    def take(self: 'Sequence[T]', count: int) -> 'Sequence[T]':
        """take the first 'count' elements, reading no further upstream"""
        from ..sequence import TakeSequence, IndexedTakeSequence
        if self.capability is Capability.INDEXABLE:
            return IndexedTakeSequence(self, count)
        return TakeSequence(self, count)

    def skip(self: 'Sequence[T]', count: int) -> 'Sequence[T]':
        """skip the first 'count' elements"""
        from ..sequence import SkipSequence, IndexedSkipSequence
        if self.capability is Capability.INDEXABLE:
            return IndexedSkipSequence(self, count)
        return SkipSequence(self, count)

    def take_while(self: 'Sequence[T]', predicate: Predicate[T]) -> 'Sequence[T]':
        """take elements while predicate is true"""
        from ..sequence import TakeWhileSequence
        return TakeWhileSequence(self, predicate)

    def skip_while(self: 'Sequence[T]', predicate: Predicate[T]) -> 'Sequence[T]':
        """skip elements while predicate is true"""
        from ..sequence import SkipWhileSequence
        return SkipWhileSequence(self, predicate)

    def concat(self: 'Sequence[T]', other: Union['Sequence[T]', Iterable[T]]) -> 'Sequence[T]':
        """elements of this sequence followed by those of other"""
        from ..sequence import Sequence, ConcatenatedSequence, IndexedConcatenatedSequence
        from ..factories import wrap
        if not isinstance(other, Sequence):
            other = wrap(other, instrumentation=self.instrumentation)
        if self.capability is Capability.INDEXABLE and other.capability is Capability.INDEXABLE:
            return IndexedConcatenatedSequence(self, other)
        return ConcatenatedSequence(self, other)

    def tap(self: 'Sequence[T]', action: Callable[[T, int], Any]) -> 'Sequence[T]':
        """run action(element, index) on each element as it is pulled through"""
        from ..sequence import TapSequence
        return TapSequence(self, action)
