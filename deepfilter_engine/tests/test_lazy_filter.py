import itertools
import unittest

import numpy as np

from deepfilter_engine.cache.memoization import FilterMemoization
from deepfilter_engine.engine.filter_engine import filter_collection
from deepfilter_engine.engine.lazy_filter import (
    filter_chunked, filter_count, filter_exists, filter_first, filter_lazy, filter_lazy_async,
    filter_lazy_chunked
)
from deepfilter_exception_model.exception import ConfigurationError, InvalidExpressionError, InvalidInputError

NUMBERS = [{"n": i, "even": i % 2 == 0} for i in range(10)]


class CountingPredicate:
    """Predicate expression that records how many items it has seen."""

    def __init__(self, test):
        self.test = test
        self.calls = 0

    def __call__(self, item):
        self.calls += 1
        return self.test(item)


class AsyncSource:
    def __init__(self, items):
        self.items = items

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self.items:
            yield item


class TestFilterLazy(unittest.TestCase):

    def setUp(self):
        self.memoization = FilterMemoization()

    def test_yields_matches_in_order(self):
        result = filter_lazy(iter(NUMBERS), {"even": True}, memoization=self.memoization)
        self.assertEqual([item["n"] for item in result], [0, 2, 4, 6, 8])

    def test_works_on_unbounded_sources(self):
        source = ({"n": i} for i in itertools.count())
        result = filter_lazy(source, {"n": {"$gte": 100}}, memoization=self.memoization)
        self.assertEqual(next(result), {"n": 100})
        self.assertEqual(next(result), {"n": 101})

    def test_evaluates_on_demand(self):
        predicate = CountingPredicate(lambda item: item["even"])
        result = filter_lazy(NUMBERS, predicate, memoization=self.memoization)
        self.assertEqual(predicate.calls, 0)
        next(result)
        self.assertEqual(predicate.calls, 1)
        next(result)
        self.assertEqual(predicate.calls, 3)

    def test_errors_raised_on_call(self):
        with self.assertRaises(InvalidExpressionError):
            filter_lazy(NUMBERS, {"n": {"$unknown": 1}}, memoization=self.memoization)
        with self.assertRaises(InvalidInputError):
            filter_lazy(42, "x", memoization=self.memoization)
        with self.assertRaises(InvalidInputError):
            filter_lazy("text", "x", memoization=self.memoization)

    def test_fresh_call_restarts(self):
        first = list(filter_lazy(NUMBERS, {"even": False}, memoization=self.memoization))
        second = list(filter_lazy(NUMBERS, {"even": False}, memoization=self.memoization))
        self.assertEqual(first, second)


class TestFilterLazyAsync(unittest.IsolatedAsyncioTestCase):

    async def test_yields_matches(self):
        result = filter_lazy_async(AsyncSource(NUMBERS), {"n": {"$lt": 3}}, memoization=FilterMemoization())
        collected = [item["n"] async for item in result]
        self.assertEqual(collected, [0, 1, 2])

    async def test_rejects_sync_iterables(self):
        with self.assertRaises(InvalidInputError):
            filter_lazy_async(NUMBERS, "x")

    async def test_errors_raised_on_call(self):
        with self.assertRaises(InvalidExpressionError):
            filter_lazy_async(AsyncSource(NUMBERS), {"$or": "x"})


class TestChunkedFilters(unittest.TestCase):

    def setUp(self):
        self.memoization = FilterMemoization()

    def test_chunks_concatenate_to_full_result(self):
        big = [{"n": i, "keep": i % 3 != 0} for i in range(2500)]
        expression = {"keep": True}
        chunks = filter_chunked(big, expression, 1000, memoization=self.memoization)
        self.assertEqual([len(c) for c in chunks], [1000, 666])
        self.assertEqual([item for chunk in chunks for item in chunk],
                         filter_collection(big, expression, memoization=self.memoization))

    def test_lazy_chunks(self):
        chunks = list(filter_lazy_chunked(NUMBERS, {"even": True}, 2, memoization=self.memoization))
        self.assertEqual([[i["n"] for i in c] for c in chunks], [[0, 2], [4, 6], [8]])

    def test_no_matches_gives_no_chunks(self):
        self.assertEqual(filter_chunked(NUMBERS, {"n": 99}, 3, memoization=self.memoization), [])

    def test_chunk_size_must_be_positive(self):
        for size in (0, -5, 2.5):
            with self.assertRaises(ConfigurationError):
                filter_chunked(NUMBERS, {"even": True}, size, memoization=self.memoization)
            with self.assertRaises(ConfigurationError):
                filter_lazy_chunked(NUMBERS, {"even": True}, size, memoization=self.memoization)

    def test_chunked_rejects_non_collections(self):
        with self.assertRaises(InvalidInputError):
            filter_chunked(iter(NUMBERS), {"even": True}, 2, memoization=self.memoization)


class TestEarlyExitFilters(unittest.TestCase):

    def setUp(self):
        self.memoization = FilterMemoization()

    def test_first_stops_early(self):
        predicate = CountingPredicate(lambda item: item["n"] >= 3)
        result = filter_first(NUMBERS, predicate, 2, memoization=self.memoization)
        self.assertEqual([i["n"] for i in result], [3, 4])
        self.assertEqual(predicate.calls, 5)

    def test_first_defaults_to_one(self):
        self.assertEqual(filter_first(NUMBERS, {"even": False}, memoization=self.memoization), [NUMBERS[1]])

    def test_first_count_must_be_positive(self):
        with self.assertRaises(ConfigurationError):
            filter_first(NUMBERS, {"even": True}, 0, memoization=self.memoization)

    def test_exists_short_circuits(self):
        predicate = CountingPredicate(lambda item: item["n"] == 1)
        self.assertTrue(filter_exists(NUMBERS, predicate, memoization=self.memoization))
        self.assertEqual(predicate.calls, 2)
        self.assertFalse(filter_exists(NUMBERS, {"n": 42}, memoization=self.memoization))

    def test_count(self):
        self.assertEqual(filter_count(NUMBERS, {"even": True}, memoization=self.memoization), 5)
        self.assertEqual(filter_count(np.array([1, 2, 3]), {"$": 2}, memoization=self.memoization), 1)
        self.assertEqual(filter_count([], "x", memoization=self.memoization), 0)

    def test_reject_non_collections(self):
        for function in (filter_first, filter_exists, filter_count):
            with self.assertRaises(InvalidInputError):
                function({"n": 1}, {"n": 1}, memoization=self.memoization)


if __name__ == '__main__':
    unittest.main()
