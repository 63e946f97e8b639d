"""
'    .__
'    |  |   _____  ________ ___.__. _____
'    |  |   \__  \ \___   /<   |  |/ ____\
'    |  |__  / __ \_/    /  \___  < <_|  |
'    |____/ (____  /_____ \ / ____|\__   |
'                \/      \/ \/        |__|
"""

# expose the sequence classes
from .sequence import (
    Sequence,
    IndexedSequence,
    ArrayWrapper,
    IterableWrapper,
    GeneratedSequence
)

# expose the factory functions
from .factories import (
    wrap,
    from_iterable,
    from_range,
    repeat,
    empty,
    generate,
    lazy,
    L,
    identity,
    noop,
    always_true,
    always_false
)

# expose async support
from .asynchronous import AsyncSequence, AsyncHandle, AsyncConfig

# expose access monitoring
from .monitor import monitor, MonitoredCollection, AccessRecord

# expose supporting types and errors
from .types import Capability, AsyncState, Instrumentation
from .errors import LazyqError, IndexOutOfRange, NotIndexableError, AsyncAlreadySettled

# define what `import *` does
__all__ = [
    "Sequence",
    "IndexedSequence",
    "ArrayWrapper",
    "IterableWrapper",
    "GeneratedSequence",
    "wrap",
    "from_iterable",
    "from_range",
    "repeat",
    "empty",
    "generate",
    "lazy",
    "L",
    "identity",
    "noop",
    "always_true",
    "always_false",
    "AsyncSequence",
    "AsyncHandle",
    "AsyncConfig",
    "monitor",
    "MonitoredCollection",
    "AccessRecord",
    "Capability",
    "AsyncState",
    "Instrumentation",
    "LazyqError",
    "IndexOutOfRange",
    "NotIndexableError",
    "AsyncAlreadySettled"
]
