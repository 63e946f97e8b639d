class LazyqError(Exception):
    """base class for errors raised by the sequence engine itself."""
    pass


class IndexOutOfRange(LazyqError, IndexError):
    """positional access outside [0, length)."""

    def __init__(self, index: int, length: int):
        super().__init__(f"index {index} out of range for sequence of length {length}")
        self.index = index
        self.length = length


class NotIndexableError(LazyqError, TypeError):
    """positional access requested on an iterable-only sequence."""

    def __init__(self, sequence_type: str):
        super().__init__(f"{sequence_type} does not support indexed access; iterate it instead")
        self.sequence_type = sequence_type


class AsyncAlreadySettled(LazyqError, RuntimeError):
    """an operation was requested on an async handle that already settled."""

    def __init__(self, state):
        super().__init__(f"async handle already settled ({state.value})")
        self.state = state
