from __future__ import annotations

import asyncio
import logging
import typing
from dataclasses import dataclass, replace
from .types import *
from .errors import AsyncAlreadySettled
from .sequence import _invoke, _stops

if typing.TYPE_CHECKING:
    from .sequence import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AsyncConfig:
    """scheduling configuration for asynchronous drains"""
    batch_size: int = 1  # elements handed to the consumer per scheduler turn
    interval: float = 0.0  # seconds slept between batches

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.interval < 0:
            raise ValueError(f"interval must not be negative, got {self.interval}")


DEFAULT_ASYNC_CONFIG = AsyncConfig()


class AsyncSequence(Generic[T]):
    """
    asynchronous view over a sequence. chain operators apply to the wrapped
    sequence and stay asynchronous; each() and to_array() start a drain on the
    running event loop and return its handle.
    """

    def __init__(self, sequence: 'Sequence[T]', config: Optional[AsyncConfig] = None):
        self.sequence = sequence
        self.config = config if config is not None else DEFAULT_ASYNC_CONFIG

    def take(self, count: int) -> 'AsyncSequence[T]':
        return AsyncSequence(self.sequence.take(count), self.config)

    def map(self, selector: Selector[T, U]) -> 'AsyncSequence[U]':
        return AsyncSequence(self.sequence.map(selector), self.config)

    def filter(self, predicate: Predicate[T]) -> 'AsyncSequence[T]':
        return AsyncSequence(self.sequence.filter(predicate), self.config)

    def configure(self, **overrides: Any) -> 'AsyncSequence[T]':
        """same view with some scheduling settings replaced"""
        return AsyncSequence(self.sequence, replace(self.config, **overrides))

    def each(self, consumer: Consumer[T]) -> 'AsyncHandle[T]':
        """start draining into consumer(element, index). must be called with a running loop"""
        return AsyncHandle(self.sequence, consumer, self.config)

    def to_array(self) -> 'AsyncHandle[T]':
        """start draining everything; the handle completes with all elements"""
        return self.each(lambda element, index: None)

    to_list = to_array

    def __repr__(self) -> str:
        return f"AsyncSequence({self.sequence!r}, {self.config})"


class AsyncHandle(Generic[T]):
    """
    an in-flight or settled asynchronous drain.

    the handle is pending until the sequence is exhausted (complete), the consumer
    returns a falsy value other than None or cancel() is called (cancelled), or a
    user function raises (failed). `results` holds every element delivered so far.
    completion callbacks fire exactly once with the results, and a callback that
    raises is logged without stopping the rest; awaiting the handle returns the
    results too.
    """

    def __init__(self, sequence: 'Sequence[T]', consumer: Consumer[T], config: AsyncConfig):
        loop = asyncio.get_running_loop()
        self.state = AsyncState.PENDING
        self.results: List[T] = []
        self.error: Optional[BaseException] = None
        self._consumer = consumer
        self._config = config
        self._cancel_requested = False
        self._complete_callbacks: List[Callable[[List[T]], Any]] = []
        self._error_callbacks: List[Callable[[BaseException], Any]] = []
        self._future = loop.create_future()

        if sequence.instrumentation is not None:
            sequence.instrumentation.drains_started += 1
        self._task = loop.create_task(self._drain(sequence._iterate()))

    # --- public api ---

    @property
    def done(self) -> bool:
        return self.state.is_settled

    def cancel(self) -> None:
        """stop the drain at the next pull boundary. nothing further is read from the source"""
        if self.state.is_settled:
            raise AsyncAlreadySettled(self.state)
        self._cancel_requested = True

    def on_complete(self, callback: Callable[[List[T]], Any]) -> 'AsyncHandle[T]':
        """register a completion callback. fires once; immediately if already complete or cancelled"""
        if self.state is AsyncState.PENDING:
            self._complete_callbacks.append(callback)
        elif self.state is not AsyncState.FAILED:
            self._notify(callback, self.results)
        return self

    def on_error(self, callback: Callable[[BaseException], Any]) -> 'AsyncHandle[T]':
        """register a failure callback. fires once; immediately if already failed"""
        if self.state is AsyncState.PENDING:
            self._error_callbacks.append(callback)
        elif self.state is AsyncState.FAILED:
            self._notify(callback, self.error)
        return self

    def __await__(self):
        return self._future.__await__()

    def __repr__(self) -> str:
        return f"AsyncHandle(state={self.state.value}, delivered={len(self.results)})"

    # --- drain ---

    async def _drain(self, iterator: Iterator[T]) -> None:
        try:
            outcome = await self._pull(iterator)
        except asyncio.CancelledError:
            self._settle(AsyncState.CANCELLED)
            raise
        except Exception as e:
            self._fail(e)
            return
        finally:
            iterator.close()
        self._settle(outcome)

    async def _pull(self, iterator: Iterator[T]) -> AsyncState:
        batch_size, interval = self._config.batch_size, self._config.interval
        index = 0
        while not self._cancel_requested:
            try:
                element = next(iterator)
            except StopIteration:
                return AsyncState.COMPLETE

            self.results.append(element)
            if _stops(_invoke(self._consumer, index, element, index)):
                return AsyncState.CANCELLED

            index += 1
            if index % batch_size == 0:
                # hand control back to the loop before the next pull
                await asyncio.sleep(interval)
        return AsyncState.CANCELLED

    def _settle(self, state: AsyncState) -> None:
        self.state = state
        logger.debug(f"async drain {state.value} after {len(self.results)} elements")
        if not self._future.done():
            self._future.set_result(self.results)
        callbacks, self._complete_callbacks = self._complete_callbacks, []
        for callback in callbacks:
            self._notify(callback, self.results)

    def _fail(self, error: Exception) -> None:
        self.state = AsyncState.FAILED
        self.error = error
        logger.debug(f"async drain failed after {len(self.results)} elements: {error!r}")
        self._future.set_exception(error)
        # the error stays available on self.error; awaiting the handle still re-raises it
        self._future.exception()
        callbacks, self._error_callbacks = self._error_callbacks, []
        for callback in callbacks:
            self._notify(callback, error)

    def _notify(self, callback: Callable[[Any], Any], payload: Any) -> None:
        # one failing callback must not keep the others from firing
        try:
            callback(payload)
        except Exception as e:
            logger.error(f"async handle callback {callback!r} raised: {e}", exc_info=True)
