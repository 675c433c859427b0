import unittest
from collections import deque

import numpy as np

from deepfilter_data_model.constants import MAX_EXPRESSION_NESTING
from deepfilter_data_model.filter_config import FilterConfig
from deepfilter_engine.validation.expression_validator import (
    validate_collection, validate_expression, validate_options, validate_positive
)
from deepfilter_exception_model.exception import (
    ConfigurationError, GeospatialError, InvalidExpressionError, InvalidInputError, TypeMismatchError
)


class TestValidateExpression(unittest.TestCase):

    def test_accepts_well_formed_expressions(self):
        expressions = [
            "Berlin",
            42,
            None,
            lambda item: True,
            {"name": "Alice", "age": {"$gte": 18}},
            {"address": {"city": "Berlin"}},
            {"$": "berlin"},
            {"tag": ["red", "!blue"]},
            {"$and": [{"a": 1}, {"$or": [{"b": 2}, "text"]}]},
            {"$not": {"a": 1}},
            {"price": {"$not": {"price": {"$gt": 5}}}},
        ]
        for expression in expressions:
            self.assertIs(validate_expression(expression), expression)

    def test_rejects_top_level_array(self):
        with self.assertRaises(InvalidExpressionError):
            validate_expression(["a", "b"])

    def test_rejects_unsupported_types(self):
        with self.assertRaises(InvalidExpressionError):
            validate_expression(object())
        with self.assertRaises(InvalidExpressionError):
            validate_expression({"a": {1: "x"}})

    def test_rejects_unknown_operator(self):
        with self.assertRaises(InvalidExpressionError) as ctx:
            validate_expression({"age": {"$between": [1, 2]}})
        self.assertEqual(ctx.exception.operator, "$between")

        with self.assertRaises(InvalidExpressionError):
            validate_expression({"$where": "x"})

    def test_rejects_top_level_field_operator(self):
        with self.assertRaises(InvalidExpressionError) as ctx:
            validate_expression({"$gt": 5})
        self.assertEqual(ctx.exception.message, "Operator $gt must be applied to a field")

    def test_rejects_mixed_operator_object(self):
        with self.assertRaises(InvalidExpressionError) as ctx:
            validate_expression({"age": {"$gt": 5, "years": 3}})
        self.assertEqual(ctx.exception.message, "Operator objects cannot mix operators and field names")

    def test_logical_arity(self):
        with self.assertRaises(InvalidExpressionError) as ctx:
            validate_expression({"$and": {"a": 1}})
        self.assertEqual(ctx.exception.message, "$and operator requires an array of expressions")
        with self.assertRaises(InvalidExpressionError):
            validate_expression({"$or": "a"})
        with self.assertRaises(InvalidExpressionError) as ctx:
            validate_expression({"$not": [{"a": 1}]})
        self.assertEqual(ctx.exception.message, "$not operator requires a single expression")

    def test_logical_members_validated(self):
        with self.assertRaises(InvalidExpressionError):
            validate_expression({"$and": [{"a": {"$nope": 1}}]})
        with self.assertRaises(InvalidExpressionError):
            validate_expression({"$or": [["nested", "array"]]})

    def test_deep_and_cyclic_field_nesting_accepted(self):
        deep = {"v": 1}
        for _ in range(600):
            deep = {"a": deep}
        self.assertIs(validate_expression(deep), deep)

        cyclic = {"v": 1}
        cyclic["child"] = cyclic
        self.assertIs(validate_expression(cyclic), cyclic)

    def test_logical_nesting_bounded(self):
        expression = {"v": 1}
        for _ in range(MAX_EXPRESSION_NESTING - 1):
            expression = {"$and": [expression]}
        self.assertIs(validate_expression(expression), expression)

        with self.assertRaises(InvalidExpressionError):
            validate_expression({"$or": [{"$and": [expression]}]})

        cyclic = {"$and": []}
        cyclic["$and"].append(cyclic)
        with self.assertRaises(InvalidExpressionError):
            validate_expression(cyclic)

    def test_arguments_parsed_past_max_depth(self):
        expression = {"a": {"b": {"c": {"d": {"e": {"$gt": "x"}}}}}}
        with self.assertRaises(TypeMismatchError):
            validate_expression(expression)
        with self.assertRaises(TypeMismatchError):
            validate_expression({"a": {"b": {"c": {"d": {"x": {"$and": [{"e": {"$gt": "x"}}]}}}}}})
        with self.assertRaises(GeospatialError):
            validate_expression({"a": {"b": {"c": {"d": {"loc": {"$geoBox": {"southwest": 1}}}}}}})

        # within max_depth the argument is left to the compiler
        self.assertIs(validate_expression(expression, FilterConfig(max_depth=5)), expression)


class TestValidateInputs(unittest.TestCase):

    def test_collections(self):
        items = [1, 2]
        self.assertIs(validate_collection(items, "f"), items)
        self.assertEqual(validate_collection((1, 2), "f"), [1, 2])
        self.assertEqual(validate_collection(deque([1, 2]), "f"), [1, 2])
        self.assertEqual(validate_collection(np.array([1, 2]), "f"), [1, 2])
        self.assertEqual(len(validate_collection(np.zeros((3, 2)), "f")), 3)

    def test_rejects_non_collections(self):
        for value in ("abc", b"abc", {"a": 1}, 5, None, (x for x in [1]), {1, 2}):
            with self.assertRaises(InvalidInputError) as ctx:
                validate_collection(value, "filter_collection")
            self.assertEqual(ctx.exception.function_name, "filter_collection")
            self.assertEqual(ctx.exception.received_type, type(value).__name__)

    def test_positive(self):
        self.assertEqual(validate_positive(3, "count"), 3)
        for value in (0, -1, 1.5, True, "2"):
            with self.assertRaises(ConfigurationError) as ctx:
                validate_positive(value, "chunk_size", "filter_chunked")
            self.assertEqual(ctx.exception.option, "chunk_size")

    def test_options(self):
        self.assertIsInstance(validate_options(None), FilterConfig)
        self.assertTrue(validate_options({"caseSensitive": True}).case_sensitive)
        with self.assertRaises(ConfigurationError):
            validate_options({"maxDepth": "deep"})


if __name__ == '__main__':
    unittest.main()
