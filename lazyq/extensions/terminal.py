from __future__ import annotations
import typing
import numpy as np
import pandas as pd
from ..types import *

if typing.TYPE_CHECKING:
    from ..sequence import Sequence

_MISSING = object()


class TerminalAccessor(Generic[T]):
    """
    drains that produce a value. all of them go through each(), so a
    short-circuiting terminal (first, any, all) stops reading the source early.
    """

    def __init__(self, sequence_instance: 'Sequence[T]'):
        self._sequence = sequence_instance

    def list(self) -> List[T]:
        """convert to list"""
        result = []
        self._sequence.each(lambda element, index: result.append(element))
        if self._sequence.instrumentation is not None:
            self._sequence.instrumentation.arrays_created += 1
        return result

    def array(self) -> np.ndarray:
        """convert to numpy array"""
        return np.array(self.list())

    def pandas(self) -> pd.Series:
        """convert to pandas series"""
        return pd.Series(self.list())

    def df(self) -> pd.DataFrame:
        """convert to pandas dataframe"""
        return pd.DataFrame(self.list())

    def count(self, predicate: Optional[Predicate[T]] = None) -> int:
        """count elements. an indexable sequence without a predicate answers from its length"""
        if predicate is None and self._sequence.capability is Capability.INDEXABLE:
            return self._sequence.length()
        counter = [0]

        def tally(element, index):
            if predicate is None or predicate(element):
                counter[0] += 1

        self._sequence.each(tally)
        return counter[0]

    def first(self, predicate: Optional[Predicate[T]] = None) -> T:
        """get first element"""
        found = self._find(predicate)
        if found is _MISSING:
            if predicate is None: raise ValueError("sequence contains no elements")
            raise ValueError("no element satisfies the condition")
        return found

    def first_or_default(self, predicate: Optional[Predicate[T]] = None,
                         default: Optional[T] = None) -> Optional[T]:
        """get first element or default"""
        found = self._find(predicate)
        return default if found is _MISSING else found

    def any(self, predicate: Optional[Predicate[T]] = None) -> bool:
        """check if any element satisfies condition"""
        return self._find(predicate) is not _MISSING

    def all(self, predicate: Predicate[T]) -> bool:
        """check if all elements satisfy condition"""
        return self._sequence.each(lambda element, index: bool(predicate(element)))

    def aggregate(self, accumulator: Accumulator[T, T], seed: Any = _MISSING) -> T:
        """applies accumulator function over sequence"""
        state = [seed]

        def fold(element, index):
            state[0] = element if state[0] is _MISSING else accumulator(state[0], element)

        self._sequence.each(fold)
        if state[0] is _MISSING: raise ValueError("cannot aggregate empty sequence without seed")
        return state[0]

    def _find(self, predicate: Optional[Predicate[T]]) -> Any:
        found = [_MISSING]

        def match(element, index):
            if predicate is None or predicate(element):
                found[0] = element
                return False

        self._sequence.each(match)
        return found[0]
