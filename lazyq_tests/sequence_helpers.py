"""
shared helpers for the lazyq test modules.

`comprehensive_sequence_test` checks many requirements of an operator at once:

- the actual behavior (input and expected output)
- consistent behavior across the three sequence representations
  (wrapped array, derived indexable, iterable-only)
- verified laziness (nothing is read until a drain runs)
- early termination and minimal source access under take(2)
- async iteration
"""
import asyncio
import re
import suite
from dgen import from_schema
from lazyq import wrap, monitor, identity, noop, always_true, always_false, Sequence, IndexedSequence
from typing import Any, Callable, Dict, List, Optional

# --- fixture payload ---

person_schema = {
    'name': 'first_name',
    'age': ('pyint', {'min_value': 18, 'max_value': 70}),
    'gender': {'_qen_provider': 'choice', 'from': ['M', 'F']}
}


def people(count: int = 6, seed: int = 7) -> List[Dict[str, Any]]:
    return from_schema(person_schema, seed=seed).take(count).value()


# --- small functions to keep tests concise ---

def add(x, y): return x + y
def increment(x): return x + 1
def is_even(x): return x % 2 == 0


# --- predicates ---

def comprises(actual: Any, expected: Any) -> bool:
    """value equality, materializing either side if it is a sequence"""
    if isinstance(actual, Sequence):
        actual = actual.value()
    if isinstance(expected, Sequence):
        expected = expected.value()
    return list(actual) == list(expected)


def is_instance_of(value: Any, expected_type: type) -> bool:
    return isinstance(value, expected_type)


def passes_to_each(sequence: Sequence, argument_index: int, expected_values: List[Any]) -> bool:
    """checks that each() hands the expected values at argument_index (0: element, 1: index)"""
    received = []
    sequence.each(lambda *args: received.append(args[argument_index]))
    return received == list(expected_values)


# --- sequence representations ---

SEQUENCE_TYPES = [
    {'key': 'array_wrapper', 'label': 'an ArrayWrapper', 'transform': lambda s: s},
    {'key': 'indexed', 'label': 'an IndexedSequence', 'transform': lambda s: s.map(identity)},
    {'key': 'ordinary', 'label': 'an ordinary sequence', 'transform': lambda s: s.filter(always_true),
     'array_like': False},
]


def check_all_sequence_types(array: List[Any], expectation: Callable[[Sequence], None]) -> None:
    """run expectation against a wrapped array, an indexed sequence and a non-indexed sequence"""
    expectation(wrap(array))
    expectation(wrap(array).map(identity))
    expectation(wrap(array).filter(always_true))


def _lookup(key: str, *sources: Dict[str, Any]) -> Any:
    """first value found for key, searching sources in order"""
    for source in sources:
        if key in source:
            return source[key]
    return None


def _slug(text: str) -> str:
    return re.sub(r'\W+', '_', text).strip('_').lower()


# --- comprehensive operator tests ---

def comprehensive_sequence_test(names: List[str], cases: List[Dict[str, Any]],
                                namespace: Optional[Dict[str, Any]] = None,
                                **options: Any) -> List[Callable]:
    """
    registers the full battery of checks for every (name, case, representation).
    a case holds 'input', 'apply' (sequence, name) -> sequence, 'result' and optionally
    'label', 'array_like' and 'access_count_for_take2' (an int, or a dict keyed by
    representation key). options may set 'array_like'
    and 'supports_async'. generated functions are also bound into namespace so
    pytest collects them.
    """
    generated = []
    for name in names:
        for case in cases:
            for sequence_type in SEQUENCE_TYPES:
                generated.extend(_case_tests(name, case, sequence_type, options))

    if namespace is not None:
        for func in generated:
            namespace[func.__name__] = func
    return generated


def _case_tests(name: str, case: Dict[str, Any], sequence_type: Dict[str, Any],
                options: Dict[str, Any]) -> List[Callable]:
    label = f"#{name}"
    if case.get('label'):
        label += f" ({case['label']})"
    prefix = f"{label} for {sequence_type['label']}"
    func_prefix = f"test_{_slug(label)}_{sequence_type['key']}"
    expected = case['result']
    # reads needed for take(2) depend on the composed chain, so a case may give one per representation
    expected_take2_reads = case.get('access_count_for_take2', 2)
    if isinstance(expected_take2_reads, dict):
        expected_take2_reads = expected_take2_reads.get(sequence_type['key'], 2)

    def setup():
        wrapped, record = monitor(case['input'])
        sequence = sequence_type['transform'](wrap(wrapped))
        return case['apply'](sequence, name), record

    checks = []

    def check(suffix: str, description: str):
        def decorator(func):
            func.__name__ = f"{func_prefix}_{suffix}"
            func.__qualname__ = func.__name__
            checks.append(suite.test(f"{prefix}: {description}")(func))
            return func
        return decorator

    @check('works', "works as expected")
    def _():
        result, _record = setup()
        suite.assert_that(comprises(result, expected), f"expected {expected}, got {result.value()}")

    @check('is_lazy', "is actually lazy")
    def _():
        _result, record = setup()
        suite.assert_that(record.access_count() == 0, f"read {record.touched} before any drain")

    @check('early_termination', "supports early termination")
    def _():
        result, _record = setup()
        taken = result.take(2).value()
        suite.assert_that(taken == expected[:2], f"expected {expected[:2]}, got {taken}")

    @check('minimal_access', "accesses the minimum number of elements from the source")
    def _():
        result, record = setup()
        result.take(2).each(noop)
        suite.assert_that(record.access_count() == expected_take2_reads,
                          f"expected {expected_take2_reads} reads, got {record.touched}")

    if _lookup('array_like', case, options):
        @check('passes_index', "passes along the index with each element during iteration")
        def _():
            result, _record = setup()
            indexes = result.map_with_index(lambda e, i: i).value()
            suite.assert_that(indexes == list(range(len(indexes))), f"indexes were {indexes}")

    @check('each_true', "each returns True if the entire sequence is iterated")
    def _():
        result, _record = setup()
        suite.assert_that(result.each(noop) is True, "each should return True")

    @check('each_false', "each returns False if iteration is terminated early")
    def _():
        result, _record = setup()
        outcome = result.each(always_false)
        # an empty result never calls the consumer, so there is nothing to stop
        suite.assert_that(outcome is (not expected), f"each returned {outcome}")

    if _lookup('array_like', sequence_type, options):
        @check('indexed_supported', "indexed access is supported")
        def _():
            result, _record = setup()
            suite.assert_that(is_instance_of(result, IndexedSequence), f"{result!r} is not indexable")

        @check('indexed_single_read', "indexed access does not invoke full iteration")
        def _():
            result, record = setup()
            result.get(1)
            suite.assert_that(record.access_count() == 1, f"get(1) read {record.touched}")

    if _lookup('supports_async', sequence_type, options):
        @check('async_supported', "async iteration is supported")
        def _():
            async def scenario():
                result, _record = setup()
                completed = []
                handle = result.async_().to_array().on_complete(completed.append)
                values = await handle
                suite.assert_that(values == expected, f"expected {expected}, got {values}")
                suite.assert_that(completed == [expected], f"completion fired {len(completed)} times")
            asyncio.run(scenario())

        @check('async_early_termination', "async iteration supports early termination")
        def _():
            async def scenario():
                result, record = setup()
                values = await result.async_().take(2).to_array()
                suite.assert_that(values == expected[:2], f"expected {expected[:2]}, got {values}")
                suite.assert_that(record.access_count() == expected_take2_reads,
                                  f"expected {expected_take2_reads} reads, got {record.touched}")
            asyncio.run(scenario())

    return checks


# --- async step helper ---

def perform_async_steps(get_sequence: Callable[[], Sequence], expected: Any,
                        additional_expectations: Optional[Callable[[], None]] = None) -> None:
    """
    drains get_sequence() asynchronously, checking nothing is delivered before
    the loop gets control, then that everything arrives in order.
    expected may be a callable, for values not known until the drain runs.
    """
    async def scenario():
        results = []
        handle = get_sequence().async_().each(lambda e, i: results.append(e))
        suite.assert_that(len(results) == 0, "should not yet be populated")
        await handle
        wanted = expected() if callable(expected) else expected
        suite.assert_that(results == wanted, f"expected {wanted}, got {results}")
        if additional_expectations is not None:
            additional_expectations()

    asyncio.run(scenario())
