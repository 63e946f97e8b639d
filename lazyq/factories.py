import typing
from collections.abc import Mapping
from .types import *

if typing.TYPE_CHECKING:
    from .sequence import Sequence


def wrap(collection: Any, instrumentation: Optional[Instrumentation] = None) -> 'Sequence[Any]':
    """
    wrap a collection as the root of a sequence chain. fixed-length indexable
    collections become an indexable ArrayWrapper; other iterables become iterable-only.
    no element is read.
    """
    from .sequence import Sequence, ArrayWrapper, IterableWrapper
    if isinstance(collection, Sequence):
        return collection
    if isinstance(collection, Mapping):
        raise TypeError(f"cannot wrap a mapping ({type(collection).__name__}) as a sequence")
    if hasattr(collection, '__getitem__') and hasattr(collection, '__len__'):
        return ArrayWrapper(collection, instrumentation)
    if hasattr(collection, '__iter__'):
        return IterableWrapper(collection, instrumentation)
    raise TypeError(f"cannot wrap {type(collection).__name__}: not indexable or iterable")


def from_iterable(data: Iterable[T], instrumentation: Optional[Instrumentation] = None) -> 'Sequence[T]':
    """create an iterable-only sequence, even over an indexable collection"""
    from .sequence import IterableWrapper
    return IterableWrapper(data, instrumentation)


def from_range(start: int, count: int) -> 'Sequence[int]':
    """create sequence from range"""
    return wrap(range(start, start + max(0, count)))


def repeat(item: T, count: int) -> 'Sequence[T]':
    """create sequence with repeated item"""
    return generate(lambda index: item, count)


def empty() -> 'Sequence[Any]':
    """create empty sequence"""
    return wrap(())


def generate(factory: Callable[[int], T], count: int,
             instrumentation: Optional[Instrumentation] = None) -> 'Sequence[T]':
    """indexable sequence whose element i is factory(i), computed only when read"""
    from .sequence import GeneratedSequence
    return GeneratedSequence(factory, count, instrumentation)


# --- function helpers ---

def identity(x: T) -> T:
    return x


def noop(*args: Any) -> None:
    pass


def always_true(*args: Any) -> bool:
    return True


def always_false(*args: Any) -> bool:
    return False


# --- aliases ---
lazy = wrap
L = wrap
