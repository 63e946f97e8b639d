"""
access monitoring for source collections.

`monitor(collection)` returns a read-alike wrapper plus the record it writes
to, so a test can prove how many distinct source positions a drain touched.
"""
from collections.abc import Sequence as _AbcSequence
from .types import *


class AccessRecord:
    """the set of positions read through a MonitoredCollection"""

    def __init__(self):
        self._touched: Set[int] = set()
        self.total_reads = 0

    def record(self, index: int) -> None:
        self._touched.add(index)
        self.total_reads += 1

    def access_count(self) -> int:
        """number of distinct positions read, however often each was read"""
        return len(self._touched)

    def accessed_at(self, index: int) -> bool:
        return index in self._touched

    @property
    def touched(self) -> List[int]:
        return sorted(self._touched)

    def reset(self) -> None:
        self._touched.clear()
        self.total_reads = 0

    def __repr__(self) -> str:
        return f"AccessRecord(distinct={self.access_count()}, total={self.total_reads})"


class MonitoredCollection(_AbcSequence):
    """
    behaves like the wrapped collection for reads, recording each position before
    delegating. len() is not a positional read and is not recorded.
    """

    def __init__(self, target: Any, record: Optional[AccessRecord] = None):
        self._target = target
        self.record = record if record is not None else AccessRecord()

    def __getitem__(self, index):
        length = len(self._target)
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(length))]
        # normalize so reads of -1 and length - 1 count as the same position
        position = index + length if index < 0 else index
        if 0 <= position < length:
            self.record.record(position)
        return self._target[index]

    def __len__(self) -> int:
        return len(self._target)

    def __repr__(self) -> str:
        return f"MonitoredCollection({self._target!r})"


def monitor(collection: Any) -> Tuple[MonitoredCollection, AccessRecord]:
    """wrap collection for access monitoring, returning (wrapped, record)"""
    wrapped = MonitoredCollection(collection)
    return wrapped, wrapped.record
