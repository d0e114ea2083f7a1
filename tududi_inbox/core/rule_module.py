# tududi_inbox/core/rule_module.py

"""
Rule Module
One RuleConfig bound to its condition predicates and action resolver.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from tududi_inbox.core.action_registry import ActionResolver, ResolverFactory
from tududi_inbox.core.conditions import ConditionKind, Predicate, get_predicate
from tududi_inbox.core.models import EvaluationContext, RuleConfig, Suggestion


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConditionBinding:
    """A validated (kind, predicate, parameter) triple."""

    kind: ConditionKind
    predicate: Predicate
    value: object

    def check(self, context: EvaluationContext) -> bool:
        return bool(self.predicate(self.value, context))


def confidence_for_priority(priority: int) -> str:
    if priority >= 80:
        return "high"
    if priority >= 50:
        return "medium"
    return "low"


class RuleModule:
    """
    Evaluates one rule against an EvaluationContext.

    ALL bound conditions must be true (AND logic). A module without any
    bound condition never matches, so a rule cannot turn into a catch-all
    by accident.

    Usage:
        module = RuleModule.from_config(config)
        if module.evaluate(context):
            suggestion = module.build_action(context)
    """

    def __init__(self, config: RuleConfig, bindings: tuple, resolver: ActionResolver):
        self.config = config
        self.bindings = tuple(bindings)
        self.resolver = resolver

    @classmethod
    def from_config(
        cls, config: RuleConfig, resolver: Optional[ActionResolver] = None
    ) -> "RuleModule":
        """
        Bind condition names to predicates.
        Unknown names raise ConfigurationError; None parameters are skipped.
        """
        bindings = []
        for name, value in config.conditions.items():
            predicate = get_predicate(name)
            if value is None:
                logger.debug(f"Rule '{config.name}': condition '{name}' has no value, skipped")
                continue
            bindings.append(ConditionBinding(ConditionKind(name), predicate, value))

        if not bindings:
            logger.warning(f"Rule '{config.name}' has no conditions and will never match")

        if resolver is None:
            resolver = ResolverFactory.get_resolver(config)

        return cls(config, tuple(bindings), resolver)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def priority(self) -> int:
        return self.config.priority

    def evaluate(self, context: EvaluationContext) -> bool:
        if not self.bindings:
            return False

        for binding in self.bindings:
            if not binding.check(context):
                logger.debug(f"Rule '{self.name}': {binding.kind.value} not satisfied")
                return False

        logger.debug(f"Rule '{self.name}': all {len(self.bindings)} conditions satisfied")
        return True

    def build_action(self, context: EvaluationContext) -> Suggestion:
        fields = self.resolver.resolve(self.config.action, context)
        fields["rule_name"] = self.name
        fields.setdefault("confidence", confidence_for_priority(self.priority))
        return Suggestion(**fields)

    def __repr__(self) -> str:
        return f"RuleModule(name={self.name!r}, priority={self.priority})"
