from dataclasses import dataclass
from enum import Enum
from typing import (
    TypeVar, Generic, Callable, Iterator, Iterable, Any, Optional, Union,
    List, Tuple, Set
)

T = TypeVar('T')
U = TypeVar('U')

Predicate = Callable[[T], bool]
Selector = Callable[[T], U]
IndexedSelector = Callable[[T, int], U]
Accumulator = Callable[[U, T], U]
# a consumer returning a falsy value other than None stops the drain; None or a truthy value continues it
Consumer = Callable[[T, int], Any]


class Capability(Enum):
    """structural capability tag carried by every sequence node"""
    INDEXABLE = 'indexable'
    ITERABLE_ONLY = 'iterable_only'


class AsyncState(Enum):
    """lifecycle of an asynchronous drain"""
    PENDING = 'pending'
    COMPLETE = 'complete'
    CANCELLED = 'cancelled'
    FAILED = 'failed'

    @property
    def is_settled(self) -> bool: return self is not AsyncState.PENDING


@dataclass
class Instrumentation:
    """
    counters handed to a source at wrap time and inherited by every node
    derived from it. lets tests observe how much work a chain did without
    any module-level state.
    """
    arrays_created: int = 0
    drains_started: int = 0

    def reset(self) -> None:
        self.arrays_created = 0
        self.drains_started = 0
