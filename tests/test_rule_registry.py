"""Unit tests for rule configs and the rule registry."""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import copy
import unittest
from datetime import date

import yaml

from tududi_inbox.core.action_registry import ActionResolver, BookmarkResolver
from tududi_inbox.core.errors import ConfigurationError
from tududi_inbox.core.models import EvaluationContext, RuleConfig
from tududi_inbox.core.rule_modules import DEFAULT_RULES
from tududi_inbox.core.rule_module import RuleModule, confidence_for_priority
from tududi_inbox.core.rule_registry import RuleRegistry, build_default_registry, build_registry


CONFIG_YAML = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config", "config.yaml"
)


def rule(name, priority=10, conditions=None, **extra):
    data = {
        "name": name,
        "priority": priority,
        "conditions": {"contains_url": True} if conditions is None else conditions,
        "action": {"category": "note"},
    }
    data.update(extra)
    return data


class FixedProjectResolver(ActionResolver):
    def resolve(self, template, context):
        return {"category": template.category, "suggested_project": "Inbox Zero"}


class TestRuleConfig(unittest.TestCase):
    """Declarative rule definitions."""

    def test_default_rules_round_trip(self):
        for data in DEFAULT_RULES:
            self.assertEqual(RuleConfig.from_dict(data).to_dict(), data)

    def test_shipped_yaml_matches_built_in_rules(self):
        with open(CONFIG_YAML) as f:
            shipped = yaml.safe_load(f)["rules"]
        self.assertEqual(shipped, DEFAULT_RULES)
        for data in shipped:
            self.assertEqual(RuleConfig.from_dict(data).to_dict(), data)

    def test_unknown_keys_survive_round_trip(self):
        data = rule("extra", enabled=False, owner={"team": "inbox", "tags": ["a"]})
        data["action"]["colour"] = "blue"
        config = RuleConfig.from_dict(data)
        self.assertEqual(config.extras["enabled"], False)
        self.assertEqual(config.to_dict(), data)

    def test_missing_conditions_stay_missing(self):
        data = {"name": "bare", "priority": 1, "action": {"category": "note"}}
        config = RuleConfig.from_dict(data)
        self.assertEqual(dict(config.conditions), {})
        self.assertEqual(config.to_dict(), data)

    def test_explicit_nulls_survive_round_trip(self):
        data = rule("nulls", resolver=None, description=None)
        data["action"] = {
            "category": "task",
            "reason": None,
            "tags": None,
            "due_date": {"type": "extracted", "value": None},
        }
        self.assertEqual(RuleConfig.from_dict(data).to_dict(), data)

    def test_unknown_due_date_key_rejected(self):
        data = rule("typo")
        data["action"]["due_date"] = {"type": "relative", "vaule": "today"}
        with self.assertRaises(ConfigurationError):
            RuleConfig.from_dict(data)

    def test_conditions_are_read_only(self):
        data = rule("frozen", conditions={"contains_keywords": ["a", "b"]})
        config = RuleConfig.from_dict(data)
        with self.assertRaises(TypeError):
            config.conditions["contains_url"] = True
        self.assertIsInstance(config.conditions["contains_keywords"], tuple)

    def test_from_dict_copies_input(self):
        data = rule("copy", conditions={"contains_keywords": ["a"]})
        config = RuleConfig.from_dict(data)
        data["conditions"]["contains_keywords"].append("b")
        self.assertEqual(config.conditions["contains_keywords"], ("a",))

    def test_priority_must_be_integer(self):
        for bad in ("high", None, 1.5, True):
            with self.assertRaises(ConfigurationError):
                RuleConfig.from_dict(rule("bad", priority=bad))

    def test_missing_name_or_category(self):
        with self.assertRaises(ConfigurationError):
            RuleConfig.from_dict({"priority": 1, "action": {"category": "task"}})
        data = rule("no-category")
        data["action"] = {"reason": "x"}
        with self.assertRaises(ConfigurationError):
            RuleConfig.from_dict(data)

    def test_confidence_levels(self):
        self.assertEqual(confidence_for_priority(80), "high")
        self.assertEqual(confidence_for_priority(79), "medium")
        self.assertEqual(confidence_for_priority(50), "medium")
        self.assertEqual(confidence_for_priority(49), "low")


class TestRuleRegistry(unittest.TestCase):
    """Building and querying the registry."""

    def test_default_registry_order(self):
        registry = build_default_registry()
        self.assertEqual(registry.names(), [r["name"] for r in DEFAULT_RULES])
        self.assertIsInstance(registry.get("url-bookmark-note").resolver, BookmarkResolver)
        self.assertIsNone(registry.get("missing"))

    def test_registration_order_is_not_sorted(self):
        registry = build_registry([rule("low", 1), rule("high", 99)])
        self.assertEqual(registry.names(), ["low", "high"])

    def test_registry_is_immutable(self):
        registry = build_default_registry()
        self.assertIsInstance(registry.modules, tuple)
        with self.assertRaises(AttributeError):
            registry.modules.append(None)

    def test_duplicate_names_rejected(self):
        with self.assertRaises(ConfigurationError):
            build_registry([rule("same"), rule("same")])

    def test_unknown_condition_names_the_rule(self):
        with self.assertRaises(ConfigurationError) as ctx:
            build_registry([rule("mystery", conditions={"smells_fishy": True})])
        self.assertIn("mystery", str(ctx.exception))
        self.assertIn("smells_fishy", str(ctx.exception))

    def test_unknown_resolver_rejected(self):
        with self.assertRaises(ConfigurationError):
            build_registry([rule("odd", resolver="telepathy")])

    def test_rule_without_conditions_never_matches(self):
        registry = build_registry([rule("empty", conditions={})])
        module = registry.get("empty")
        context = EvaluationContext(content="anything", cleaned_content="anything", today=date(2024, 6, 10))
        self.assertFalse(module.evaluate(context))

    def test_custom_resolver_pair(self):
        config = RuleConfig.from_dict(rule("custom"))
        registry = build_registry([(config, FixedProjectResolver())])
        module = registry.get("custom")
        context = EvaluationContext(
            content="https://a.io", cleaned_content="https://a.io", today=date(2024, 6, 10)
        )
        suggestion = module.build_action(context)
        self.assertEqual(suggestion.suggested_project, "Inbox Zero")
        self.assertEqual(suggestion.rule_name, "custom")
        self.assertEqual(suggestion.confidence, "low")

    def test_invalid_resolver_in_pair(self):
        with self.assertRaises(ConfigurationError):
            build_registry([(rule("pair"), "bookmark")])

    def test_building_does_not_mutate_definitions(self):
        definitions = copy.deepcopy(DEFAULT_RULES)
        build_registry(definitions)
        self.assertEqual(definitions, DEFAULT_RULES)

    def test_registry_from_modules(self):
        module = RuleModule.from_config(RuleConfig.from_dict(rule("direct")))
        registry = RuleRegistry([module])
        self.assertEqual(len(registry), 1)
        self.assertEqual(registry.configs()[0].name, "direct")


if __name__ == "__main__":
    unittest.main()
