import re
import unittest

from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.cache.memoization import FilterMemoization
from deepfilter_engine.predicate.object_predicate import KeyTag, classify_key
from deepfilter_engine.predicate.predicate_factory import create_predicate_fn
from deepfilter_engine.predicate.string_predicate import create_string_predicate
from deepfilter_engine.utils.pattern_matching import create_wildcard_regex, wildcard_to_regex


class TestPatternMatching(unittest.TestCase):

    def test_wildcard_translation(self):
        self.assertEqual(wildcard_to_regex("J%n"), "^J.*n$")
        self.assertEqual(wildcard_to_regex("A_c"), "^A.c$")

    def test_literal_characters_escaped(self):
        regex = create_wildcard_regex("a.b%", case_sensitive=False, memoization=FilterMemoization())
        self.assertIsNotNone(regex.match("a.bcd"))
        self.assertIsNone(regex.match("axbcd"))

    def test_case_sensitivity(self):
        memoization = FilterMemoization()
        self.assertIsNotNone(create_wildcard_regex("j%", False, memoization).match("John"))
        self.assertIsNone(create_wildcard_regex("j%", True, memoization).match("John"))


class TestStringPredicate(unittest.TestCase):

    def setUp(self):
        self.config = FilterConfig()
        self.memoization = FilterMemoization()

    def _predicate(self, expression, config=None):
        return create_string_predicate(expression, config or self.config, self.memoization)

    def test_scalar_item(self):
        predicate = self._predicate("berlin")
        self.assertTrue(predicate("Berlin"))
        self.assertFalse(predicate("Berlin Mitte"))
        self.assertFalse(predicate(None))

    def test_object_item_matches_any_field(self):
        predicate = self._predicate("Berlin")
        self.assertTrue(predicate({"name": "Alfreds Futterkiste", "city": "Berlin"}))
        self.assertFalse(predicate({"name": "Bon app", "city": "Marseille"}))

    def test_array_item(self):
        self.assertTrue(self._predicate("red")(["green", "red"]))
        self.assertFalse(self._predicate("red")(["green"]))

    def test_wildcards(self):
        self.assertTrue(self._predicate("%erl%")("Berlin"))
        self.assertTrue(self._predicate("B_rlin")({"city": "Berlin"}))
        self.assertFalse(self._predicate("B_rlin")("Bberlin"))

    def test_negation(self):
        predicate = self._predicate("!Berlin")
        self.assertFalse(predicate({"city": "Berlin"}))
        self.assertTrue(predicate({"city": "Paris"}))
        self.assertFalse(self._predicate("!%erl%")("Berlin"))

    def test_case_sensitive(self):
        predicate = self._predicate("berlin", FilterConfig(case_sensitive=True))
        self.assertFalse(predicate("Berlin"))
        self.assertTrue(predicate("berlin"))


class TestObjectPredicate(unittest.TestCase):

    def setUp(self):
        self.config = FilterConfig()
        self.memoization = FilterMemoization()

    def _predicate(self, expression, config=None):
        return create_predicate_fn(expression, config or self.config, self.memoization)

    def test_key_classification(self):
        self.assertIs(classify_key("$and", []), KeyTag.LOGICAL)
        self.assertIs(classify_key("$", "x"), KeyTag.ANY_PROPERTY)
        self.assertIs(classify_key("age", {"$gt": 1}), KeyTag.OPERATOR)
        self.assertIs(classify_key("address", {"city": "Berlin"}), KeyTag.NESTED)
        self.assertIs(classify_key("tag", ["red"]), KeyTag.ANY_OF)
        self.assertIs(classify_key("name", "J%"), KeyTag.WILDCARD)
        self.assertIs(classify_key("name", "!J%"), KeyTag.WILDCARD)
        self.assertIs(classify_key("name", "John"), KeyTag.EQUALITY)
        self.assertIs(classify_key("age", 3), KeyTag.EQUALITY)

    def test_equality_is_strict(self):
        predicate = self._predicate({"city": "Berlin"})
        self.assertTrue(predicate({"city": "Berlin"}))
        self.assertFalse(predicate({"city": "berlin"}))
        self.assertFalse(predicate({"city": "Berlin Mitte"}))
        self.assertFalse(predicate({"town": "Berlin"}))

    def test_equality_negation(self):
        predicate = self._predicate({"city": "!Berlin"})
        self.assertFalse(predicate({"city": "Berlin"}))
        self.assertTrue(predicate({"city": "Paris"}))

    def test_all_keys_must_pass(self):
        predicate = self._predicate({"city": "Berlin", "active": True})
        self.assertTrue(predicate({"city": "Berlin", "active": True}))
        self.assertFalse(predicate({"city": "Berlin", "active": False}))
        self.assertFalse(predicate({"city": "Berlin", "active": 1}))

    def test_any_of(self):
        predicate = self._predicate({"tag": ["red", "blue"]})
        self.assertTrue(predicate({"tag": "red"}))
        self.assertTrue(predicate({"tag": "blue"}))
        self.assertFalse(predicate({"tag": "green"}))

    def test_any_of_with_wildcards_and_exclusions(self):
        predicate = self._predicate({"name": ["J%", "!Jane"]})
        self.assertTrue(predicate({"name": "John"}))
        self.assertFalse(predicate({"name": "Jane"}))
        self.assertFalse(predicate({"name": "Alice"}))

        exclusions_only = self._predicate({"name": ["!Jane", "!John"]})
        self.assertTrue(exclusions_only({"name": "Alice"}))
        self.assertFalse(exclusions_only({"name": "John"}))

    def test_nested_objects(self):
        predicate = self._predicate({"address": {"city": "Berlin", "geo": {"zone": "A"}}})
        self.assertTrue(predicate({"address": {"city": "Berlin", "geo": {"zone": "A"}}}))
        self.assertFalse(predicate({"address": {"city": "Berlin", "geo": {"zone": "B"}}}))
        self.assertFalse(predicate({"address": "Berlin"}))

    def test_nested_over_array_of_objects(self):
        predicate = self._predicate({"orders": {"status": "shipped"}})
        self.assertTrue(predicate({"orders": [{"status": "open"}, {"status": "shipped"}]}))
        self.assertFalse(predicate({"orders": [{"status": "open"}]}))

    def test_nested_beyond_max_depth_is_false(self):
        expression = {"a": {"b": {"c": {"d": 1}}}}
        record = {"a": {"b": {"c": {"d": 1}}}}
        self.assertTrue(self._predicate(expression)(record))
        self.assertFalse(self._predicate(expression, FilterConfig(max_depth=2))(record))

    def test_operator_fields(self):
        predicate = self._predicate({"age": {"$gte": 18, "$lt": 65}})
        self.assertTrue(predicate({"age": 18}))
        self.assertFalse(predicate({"age": 65}))
        self.assertFalse(predicate({"age": "30"}))
        self.assertFalse(predicate({}))

    def test_dotted_paths(self):
        predicate = self._predicate({"address.city": "Berlin"})
        self.assertTrue(predicate({"address": {"city": "Berlin"}}))

    def test_any_property_key(self):
        predicate = self._predicate({"$": "berl"})
        self.assertTrue(predicate({"name": "Alice", "city": "Berlin"}))
        self.assertFalse(predicate({"name": "Alice", "city": "Paris"}))
        self.assertTrue(predicate("Berlin"))

    def test_logical_keys(self):
        predicate = self._predicate({"$or": [{"city": "Berlin"}, {"city": "Paris"}], "active": True})
        self.assertTrue(predicate({"city": "Paris", "active": True}))
        self.assertFalse(predicate({"city": "Rome", "active": True}))
        self.assertFalse(predicate({"city": "Paris", "active": False}))

    def test_logical_members_may_be_functions(self):
        predicate = self._predicate({"$not": lambda item: item["age"] < 18})
        self.assertTrue(predicate({"age": 30}))
        self.assertFalse(predicate({"age": 10}))

    def test_regex_operator_with_compiled_pattern(self):
        predicate = self._predicate({"email": {"$regex": re.compile(r"@example\.com$")}})
        self.assertTrue(predicate({"email": "a@example.com"}))
        self.assertFalse(predicate({"email": "a@example.org"}))


class TestPredicateFactory(unittest.TestCase):

    def setUp(self):
        self.memoization = FilterMemoization()

    def test_function_used_directly(self):
        function = lambda item: item > 2  # noqa: E731
        self.assertIs(create_predicate_fn(function, FilterConfig(), self.memoization), function)

    def test_primitive_uses_any_property_semantics(self):
        predicate = create_predicate_fn(42, FilterConfig(), self.memoization)
        self.assertTrue(predicate({"id": 42}))
        self.assertTrue(predicate({"id": 1420}))
        self.assertTrue(predicate(42))
        self.assertFalse(predicate({"id": 7}))

    def test_primitive_with_custom_comparator(self):
        config = FilterConfig(custom_comparator=lambda actual, expected: actual == expected)
        predicate = create_predicate_fn(42, config, self.memoization)
        self.assertTrue(predicate({"id": 42}))
        self.assertFalse(predicate({"id": 1420}))

    def test_deterministic(self):
        predicate = create_predicate_fn({"age": {"$gt": 1}}, FilterConfig(), self.memoization)
        item = {"age": 2}
        self.assertEqual({predicate(item) for _ in range(5)}, {True})

    def test_cache_compiles_once_per_structural_key(self):
        config = FilterConfig(enable_cache=True)
        first = create_predicate_fn({"name": "Alice", "age": {"$gte": 18}}, config, self.memoization)
        second = create_predicate_fn({"age": {"$gte": 18}, "name": "Alice"}, config, self.memoization)
        self.assertIs(first, second)
        stats = self.memoization.predicate_cache.get_stats()
        self.assertEqual(stats["misses"], 1)
        self.assertEqual(stats["hits"], 1)

    def test_cache_separates_configs(self):
        expression = {"name": "alice"}
        first = create_predicate_fn(expression, FilterConfig(enable_cache=True), self.memoization)
        second = create_predicate_fn(expression, FilterConfig(enable_cache=True, case_sensitive=True),
                                     self.memoization)
        self.assertIsNot(first, second)

    def test_without_cache_nothing_is_stored(self):
        create_predicate_fn({"name": "Alice"}, FilterConfig(), self.memoization)
        self.assertEqual(len(self.memoization.predicate_cache), 0)


if __name__ == '__main__':
    unittest.main()
