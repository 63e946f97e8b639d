import numpy as np
import suite
from lazyq_tests.sequence_helpers import (
    people, person_schema, check_all_sequence_types, passes_to_each, comprises, is_even, increment
)
from lazyq import (
    wrap, lazy, L, from_iterable, from_range, repeat, empty, generate, monitor,
    identity, noop, always_false, Sequence, IndexedSequence, ArrayWrapper, IterableWrapper,
    Capability, Instrumentation, IndexOutOfRange, NotIndexableError, LazyqError
)

test = suite.test
assert_that = suite.assert_that
assert_raises = suite.assert_raises


class CallCounter:
    """wraps a function and counts its calls"""

    def __init__(self, func):
        self.func = func
        self.calls = 0

    def __call__(self, *args):
        self.calls += 1
        return self.func(*args)


# --- factory function tests ---

@test("wrap creates an indexable array wrapper without reading")
def test_wrap_indexable():
    source, record = monitor([1, 2, 3])
    sequence = wrap(source)
    assert_that(isinstance(sequence, ArrayWrapper), "wrap of a list should be an ArrayWrapper")
    assert_that(sequence.capability is Capability.INDEXABLE, "wrapped list should be indexable")
    assert_that(len(sequence) == 3, f"length should be 3, got {len(sequence)}")
    assert_that(record.access_count() == 0, "wrapping should not read any element")


@test("wrap handles iterables, sequences and invalid input")
def test_wrap_dispatch():
    generated = wrap(x * 2 for x in range(3))
    assert_that(isinstance(generated, IterableWrapper), "a generator should be wrapped iterable-only")
    assert_that(generated.value() == [0, 2, 4], "generator contents should come through")

    sequence = wrap([1, 2])
    assert_that(wrap(sequence) is sequence, "wrapping a sequence returns it unchanged")
    assert_raises(TypeError, wrap, {'a': 1})
    assert_raises(TypeError, wrap, 42)


@test("factory functions create sequences correctly")
def test_factories():
    assert_that(from_range(10, 5).value() == [10, 11, 12, 13, 14], "from_range data should match")
    assert_that(from_range(10, 5).is_indexable, "from_range should be indexable")
    assert_that(repeat("a", 3).value() == ["a", "a", "a"], "repeat should repeat the item")
    assert_that(empty().value() == [], "empty should have no elements")
    assert_that(empty().each(always_false) is True, "draining empty never stops early")
    assert_that(from_iterable([1, 2]).capability is Capability.ITERABLE_ONLY,
                "from_iterable is always iterable-only")
    assert_that(lazy([1]).value() == [1] and L([2]).value() == [2], "aliases should work like wrap")


@test("generate computes only the positions that are read")
def test_generate_lazy():
    factory = CallCounter(lambda i: i * i)
    squares = generate(factory, 100)
    assert_that(factory.calls == 0, "generate should not call the factory up front")
    assert_that(squares.get(7) == 49, "get(7) should be 49")
    assert_that(factory.calls == 1, f"only one position should be computed, got {factory.calls}")
    assert_that(squares.take(3).value() == [0, 1, 4], "take(3) should produce the first three squares")


# --- capability tests ---

@test("capability is derived structurally from operator and upstream")
def test_capability_tags():
    base = wrap([1, 2, 3])
    filtered = base.filter(always_false)

    assert_that(base.map(increment).is_indexable, "map keeps an indexable upstream indexable")
    assert_that(not filtered.map(increment).is_indexable, "map keeps an iterable-only upstream iterable-only")
    assert_that(not base.filter(is_even).is_indexable, "filter always downgrades")
    assert_that(base.take(2).is_indexable, "take preserves indexable")
    assert_that(not filtered.take(2).is_indexable, "take preserves iterable-only")
    assert_that(base.identity().is_indexable, "identity preserves indexable")
    assert_that(base.skip(1).is_indexable, "skip preserves indexable")
    assert_that(not base.take_while(is_even).is_indexable, "take_while is iterable-only")
    assert_that(base.concat([4]).is_indexable, "concat of two indexables is indexable")
    assert_that(not base.concat(filtered).is_indexable, "concat with an iterable-only side is iterable-only")


@test("indexed sequences report their length")
def test_indexed_length():
    base = wrap([1, 2, 3, 4, 5])
    assert_that(len(base.map(increment)) == 5, "map keeps the length")
    assert_that(len(base.take(3)) == 3, "take(3) has length 3")
    assert_that(len(base.take(10)) == 5, "take beyond the end is clamped")
    assert_that(len(base.take(-1)) == 0, "negative take is empty")
    assert_that(len(base.skip(2)) == 3, "skip(2) drops two")
    assert_that(len(base.skip(9)) == 0, "skip beyond the end is empty")
    assert_that(len(base.concat([6, 7])) == 7, "concat adds lengths")


# --- laziness tests ---

@test("building a chain reads nothing and calls nothing")
def test_chain_is_lazy():
    source, record = monitor([1, 2, 3, 4, 5])
    selector = CallCounter(increment)
    predicate = CallCounter(is_even)

    chain = wrap(source).map(selector).filter(predicate).take(2).skip(1)
    assert_that(isinstance(chain, Sequence), "chain should be a sequence")
    assert_that(record.access_count() == 0, f"building the chain read {record.touched}")
    assert_that(selector.calls == 0 and predicate.calls == 0, "no user function should run yet")

    assert_that(chain.value() == [4], f"got {chain.value()}")


@test("take after filter reads only until enough matches are found")
def test_minimal_access_under_take():
    source, record = monitor(['a', 'b', 'c', 'd', 'e'])
    vowels_or_d = wrap(source).filter(lambda c: c in 'ad').take(2)
    vowels_or_d.each(noop)

    assert_that(record.access_count() == 4, f"expected 4 reads, got {record.touched}")
    assert_that(not record.accessed_at(4), "the last element should never be read")


@test("take of zero reads nothing")
def test_take_zero():
    source, record = monitor([1, 2, 3])
    assert_that(wrap(source).filter(always_false).take(0).value() == [], "take(0) should be empty")
    assert_that(wrap(source).take(0).value() == [], "indexed take(0) should be empty")
    assert_that(record.access_count() == 0, f"take(0) read {record.touched}")


@test("indexed skip never reads skipped positions")
def test_indexed_skip_reads():
    source, record = monitor([1, 2, 3, 4, 5])
    assert_that(wrap(source).skip(3).value() == [4, 5], "skip(3) should leave the last two")
    assert_that(record.touched == [3, 4], f"skip read {record.touched}")


# --- iteration engine tests ---

@test("each returns True when every element is visited")
def test_each_complete():
    check_all_sequence_types([1, 2, 3], lambda s: assert_that(s.each(noop) is True, f"{s!r} should complete"))


@test("each returns False and stops reading on early stop")
def test_each_early_stop():
    source, record = monitor([1, 2, 3, 4, 5])
    seen = []

    def stop_at_three(element, index):
        seen.append(element)
        return element != 3

    result = wrap(source).map(increment).each(lambda e, i: stop_at_three(e - 1, i))
    assert_that(result is False, "each should report the early stop")
    assert_that(seen == [1, 2, 3], f"consumer saw {seen}")
    assert_that(record.touched == [0, 1, 2], f"nothing past the stop should be read, read {record.touched}")


@test("a consumer returning None keeps draining")
def test_each_none_continues():
    visited = []
    result = wrap([1, 2, 3]).each(lambda e, i: visited.append(e))
    assert_that(result is True, "a consumer returning None should not stop the drain")
    assert_that(visited == [1, 2, 3], f"visited {visited}")


@test("numpy booleans from the consumer stop a drain over a numpy source")
def test_each_numpy_stop():
    source, record = monitor(np.array([1, 2, 3, 4, 5]))
    result = wrap(source).each(lambda e, i: e < 2)
    assert_that(result is False, "np.False_ should stop the drain")
    assert_that(record.touched == [0, 1], f"nothing past the stop should be read, read {record.touched}")

    source, record = monitor(np.array([1, 2, 3]))
    assert_that(wrap(source).map(increment).each(lambda e, i: e > 0) is True, "np.True_ should keep draining")
    assert_that(record.access_count() == 3, f"read {record.touched}")


@test("consumer receives node-local indexes")
def test_each_indexes():
    check_all_sequence_types(['x', 'y', 'z'], lambda s: assert_that(
        passes_to_each(s, 1, [0, 1, 2]), f"{s!r} should pass indexes 0..2"))
    check_all_sequence_types(['x', 'y', 'z'], lambda s: assert_that(
        passes_to_each(s, 0, ['x', 'y', 'z']), f"{s!r} should pass elements in order"))


@test("filter re-bases indexes from zero")
def test_index_rebasing():
    indexes = wrap([10, 20, 30]).filter(lambda x: x > 10).map_with_index(lambda e, i: i).value()
    assert_that(indexes == [0, 1], f"expected [0, 1], got {indexes}")

    skipped = wrap([10, 20, 30]).skip(1).map_with_index(lambda e, i: (e, i)).value()
    assert_that(skipped == [(20, 0), (30, 1)], f"skip should re-base too, got {skipped}")


@test("round trip through map(identity) equals the source")
def test_round_trip():
    source = [3, 1, 4, 1, 5, 9, 2, 6]
    collected = []
    wrap(source).map(identity).each(lambda e, i: collected.append(e))
    assert_that(collected == source, f"got {collected}")


@test("sequences support python iteration")
def test_python_iteration():
    evens = wrap(range(10)).filter(is_even)
    assert_that(list(evens) == [0, 2, 4, 6, 8], "list() should drain the sequence")
    assert_that([x for x in evens.take(2)] == [0, 2], "for loops should drain lazily")


@test("a node can be drained repeatedly and independently")
def test_shared_node():
    doubled = wrap([1, 2, 3]).map(lambda x: x * 2)
    first = doubled.take(2)
    second = doubled.filter(lambda x: x > 2)
    assert_that(first.value() == [2, 4], "first drain")
    assert_that(second.value() == [4, 6], "second drain")
    assert_that(doubled.value() == [2, 4, 6], "the shared upstream is unchanged")


# --- indexed access tests ---

@test("get through a map chain reads exactly one source position")
def test_get_single_read():
    source, record = monitor([1, 2, 3])
    assert_that(wrap(source).map(lambda x: x * 2).get(1) == 4, "get(1) should be 4")
    assert_that(record.access_count() == 1, f"expected 1 read, got {record.touched}")

    record.reset()
    chained = wrap(source).map(increment).skip(1).map(increment).take(1)
    assert_that(chained[0] == 4, f"got {chained[0]}")
    assert_that(record.touched == [1], f"expected only position 1, got {record.touched}")


@test("get outside the bounds raises IndexOutOfRange")
def test_get_out_of_range():
    sequence = wrap([1, 2, 3]).take(2)
    error = assert_raises(IndexOutOfRange, sequence.get, 2)
    assert_that(error.index == 2 and error.length == 2, f"error fields were {error.index}, {error.length}")
    assert_raises(IndexOutOfRange, sequence.get, -1)
    assert_raises(IndexError, wrap([]).get, 0)
    assert_that(isinstance(error, LazyqError), "engine errors share a base class")


@test("get on an iterable-only sequence raises NotIndexableError")
def test_get_not_indexable():
    filtered = wrap([1, 2, 3]).filter(is_even)
    assert_raises(NotIndexableError, filtered.get, 0)
    assert_that(not isinstance(filtered, IndexedSequence), "filtered sequences are not IndexedSequence")


# --- error propagation tests ---

class Boom(Exception):
    pass


def explode_on_two(x):
    if x == 2:
        raise Boom("two")
    return x


@test("errors from user functions surface only when draining")
def test_errors_deferred():
    chain = wrap([1, 2, 3]).map(explode_on_two)
    error = assert_raises(Boom, chain.value)
    assert_that(str(error) == "two", "the original exception should propagate unchanged")
    assert_that(any("index 1" in note for note in error.__notes__), f"notes were {error.__notes__}")


@test("errors abort the drain and reach get callers")
def test_errors_abort():
    source, record = monitor([1, 2, 3, 4])
    assert_raises(Boom, wrap(source).filter(lambda x: explode_on_two(x) > 0).each, noop)
    assert_that(record.touched == [0, 1], f"nothing past the failing element should be read, got {record.touched}")
    assert_raises(Boom, wrap([1, 2, 3]).map(explode_on_two).get, 1)
    assert_that(wrap([1, 2, 3]).map(explode_on_two).get(2) == 3, "other positions are unaffected")


@test("errors raised by the consumer propagate")
def test_consumer_errors():
    def consumer(element, index):
        raise Boom(f"consumer failed on {element}")

    error = assert_raises(Boom, wrap(['a']).each, consumer)
    assert_that(str(error) == "consumer failed on a", f"got {error}")


# --- instrumentation tests ---

@test("instrumentation counts drains and materializations")
def test_instrumentation():
    counters = Instrumentation()
    base = wrap([1, 2, 3, 4], instrumentation=counters)
    chain = base.map(increment).filter(is_even)
    assert_that(chain.instrumentation is counters, "derived nodes inherit the root's instrumentation")
    assert_that(counters.arrays_created == 0 and counters.drains_started == 0, "building a chain counts nothing")

    chain.value()
    chain.to.list()
    chain.each(noop)
    assert_that(counters.arrays_created == 2, f"arrays created: {counters.arrays_created}")
    assert_that(counters.drains_started == 3, f"drains started: {counters.drains_started}")

    counters.reset()
    assert_that(counters.arrays_created == 0, "reset should clear the counters")


# --- fixture payload tests ---

@test("operators work over generated people")
def test_people_pipeline():
    everyone = people(6)
    assert_that(len(everyone) == 6, "six people should be generated")
    assert_that(all(set(p) == set(person_schema) for p in everyone), "every person should follow the schema")

    source, record = monitor(everyone)
    names = wrap(source).filter(lambda p: p['age'] >= 18).map(lambda p: p['name']).take(3)
    assert_that(comprises(names, [p['name'] for p in everyone[:3]]), "first three names expected")
    assert_that(record.access_count() == 3, f"expected 3 reads, got {record.touched}")


if __name__ == "__main__":
    suite.run(title="lazyq core engine test suite")
