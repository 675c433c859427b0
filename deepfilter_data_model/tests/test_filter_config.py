import unittest

from deepfilter_data_model.filter_config import DEFAULT_CONFIG, FilterConfig, OrderByField, merge_config
from deepfilter_data_model.settings import EngineSettings
from deepfilter_exception_model.exception import ConfigurationError


class TestFilterConfig(unittest.TestCase):

    def test_defaults(self):
        self.assertFalse(DEFAULT_CONFIG.case_sensitive)
        self.assertEqual(DEFAULT_CONFIG.max_depth, 3)
        self.assertFalse(DEFAULT_CONFIG.enable_cache)
        self.assertIsNone(DEFAULT_CONFIG.custom_comparator)
        self.assertIsNone(DEFAULT_CONFIG.limit)
        self.assertIsNone(DEFAULT_CONFIG.order_by)

    def test_merge_none_returns_defaults(self):
        self.assertIs(merge_config(None), DEFAULT_CONFIG)

    def test_merge_accepts_camel_case_aliases(self):
        config = merge_config({"caseSensitive": True, "maxDepth": 5, "enableCache": True})
        self.assertTrue(config.case_sensitive)
        self.assertEqual(config.max_depth, 5)
        self.assertTrue(config.enable_cache)

    def test_merge_accepts_snake_case_names(self):
        config = merge_config({"case_sensitive": True, "limit": 2})
        self.assertTrue(config.case_sensitive)
        self.assertEqual(config.limit, 2)

    def test_merge_passes_config_through(self):
        config = FilterConfig(max_depth=2)
        self.assertIs(merge_config(config), config)

    def test_max_depth_out_of_range(self):
        with self.assertRaises(ConfigurationError) as ctx:
            merge_config({"maxDepth": 11})
        self.assertEqual(ctx.exception.option, "maxDepth")

        with self.assertRaises(ConfigurationError):
            merge_config({"max_depth": 0})

    def test_unknown_option_rejected(self):
        with self.assertRaises(ConfigurationError):
            merge_config({"debug": True})

    def test_non_bool_case_sensitive_rejected(self):
        with self.assertRaises(ConfigurationError):
            merge_config({"caseSensitive": "yes"})

    def test_non_mapping_options_rejected(self):
        with self.assertRaises(ConfigurationError) as ctx:
            merge_config(["caseSensitive"])
        self.assertEqual(ctx.exception.option, "options")

    def test_config_is_frozen(self):
        config = FilterConfig()
        with self.assertRaises(Exception):
            config.max_depth = 5

    def test_order_by_normalization(self):
        self.assertEqual(FilterConfig().order_by_fields(), [])
        self.assertEqual(FilterConfig(order_by="name").order_by_fields(),
                         [OrderByField(field="name", direction="asc")])

        config = merge_config({"orderBy": ["age", {"field": "name", "direction": "desc"}]})
        self.assertEqual(config.order_by_fields(), [
            OrderByField(field="age", direction="asc"),
            OrderByField(field="name", direction="desc"),
        ])

    def test_invalid_order_direction_rejected(self):
        with self.assertRaises(ConfigurationError):
            merge_config({"orderBy": {"field": "name", "direction": "sideways"}})

    def test_effective_limit(self):
        self.assertIsNone(FilterConfig().effective_limit())
        self.assertIsNone(FilterConfig(limit=0).effective_limit())
        self.assertIsNone(FilterConfig(limit=-3).effective_limit())
        self.assertEqual(FilterConfig(limit=4).effective_limit(), 4)

    def test_custom_comparator_accepted(self):
        comparator = lambda actual, expected: actual == expected  # noqa: E731
        config = merge_config({"customComparator": comparator})
        self.assertIs(config.custom_comparator, comparator)


class TestEngineSettings(unittest.TestCase):

    def test_defaults(self):
        settings = EngineSettings()
        self.assertEqual(settings.predicate_cache_size, 500)
        self.assertEqual(settings.predicate_cache_ttl_seconds, 300.0)
        self.assertEqual(settings.regex_cache_size, 1000)

    def test_environment_override(self):
        import os
        from unittest import mock

        with mock.patch.dict(os.environ, {"DEEPFILTER_PREDICATE_CACHE_SIZE": "42"}):
            self.assertEqual(EngineSettings().predicate_cache_size, 42)


if __name__ == '__main__':
    unittest.main()
