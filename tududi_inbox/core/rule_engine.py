# tududi_inbox/core/rule_engine.py

"""
Rule Engine
Classifies inbox content against the rule registry.
Pure logic module: no I/O.

All rules are evaluated in registration order. Among the rules that
match, the highest priority wins; ties go to the rule registered first.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from tududi_inbox.core import text_analysis
from tududi_inbox.core.models import (
    AuxiliaryContext,
    EvaluationContext,
    InboxItem,
    Suggestion,
)
from tududi_inbox.core.rule_module import RuleModule
from tududi_inbox.core.rule_registry import RuleRegistry
from tududi_inbox.utils.config_manager import EngineConfig


logger = logging.getLogger(__name__)


class RuleEngine:
    """
    Evaluates inbox items against a RuleRegistry.

    Evaluation never raises: a rule that fails is logged and treated as
    not matching, and the caller always gets a Suggestion back.

    Usage:
        engine = RuleEngine(build_default_registry())
        suggestion = engine.evaluate(item, {"has_associated_project": True})
        if suggestion.has_suggestion:
            print(f"Rule: {suggestion.rule_name}, Category: {suggestion.category}")
    """

    def __init__(
        self,
        registry: RuleRegistry,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            registry: Rule modules, in registration order
            config: Engine settings (long-text threshold, timezone)
            clock: Returns "now"; read once per evaluation. Defaults to
                the wall clock in the configured timezone.
        """
        self.registry = registry
        self.config = config or EngineConfig()
        self._clock = clock or self._wall_clock
        logger.debug(f"Rule engine initialized with {len(registry)} rules")

    def _wall_clock(self) -> datetime:
        return datetime.now(self.config.tzinfo)

    # ──────────────────────────────────────────────
    # CONTEXT
    # ──────────────────────────────────────────────

    def build_context(
        self,
        item: Union[InboxItem, str, None],
        aux_context=None,
    ) -> EvaluationContext:
        """Parse the content and capture today's date for one evaluation."""
        if isinstance(item, InboxItem):
            content, source = item.content or "", item.source
        else:
            content, source = item or "", None

        try:
            aux = AuxiliaryContext.from_value(aux_context)
            aux_problem = None
        except TypeError as e:
            aux, aux_problem = AuxiliaryContext(), str(e)

        context = EvaluationContext(
            content=content,
            cleaned_content=text_analysis.clean_text(content),
            today=self._clock().date(),
            parsed_tags=text_analysis.parse_hashtags(content),
            parsed_projects=text_analysis.parse_project_refs(content),
            has_associated_project=aux.has_associated_project,
            source=source,
            long_text_threshold=self.config.long_text_threshold,
            extras=aux.extras,
        )

        if aux_problem:
            # Ignored rather than raised; has_project then fails closed
            warning = context.warn("auxiliary_context", f"{aux_problem}, ignored")
            logger.warning(f"Auxiliary context rejected: {warning}")
        return context

    # ──────────────────────────────────────────────
    # EVALUATION
    # ──────────────────────────────────────────────

    def evaluate(self, item: Union[InboxItem, str, None], aux_context=None) -> Suggestion:
        """
        Classify one inbox item.

        Args:
            item: InboxItem or raw content
            aux_context: AuxiliaryContext or dict, e.g. {"has_associated_project": True}

        Returns:
            The winning rule's Suggestion, or Suggestion.none() if no rule
            matched (a normal outcome, not an error)
        """
        context = self.build_context(item, aux_context)
        return self.evaluate_context(context)

    def evaluate_context(self, context: EvaluationContext) -> Suggestion:
        matches = self.find_matching_rules(context)
        matched_names = tuple(module.name for module in matches)

        winner = self.select_winner(matches)
        if winner is None:
            logger.info("No rules matched for this inbox item")
            return Suggestion.none(warnings=context.warnings)

        try:
            suggestion = winner.build_action(context)
        except Exception as e:
            logger.error(f"Rule '{winner.name}' failed to build its action: {e}")
            return Suggestion.none(matched_rules=matched_names, warnings=context.warnings)

        logger.info(
            f"Rule matched: '{winner.name}' -> category: {suggestion.category} "
            f"(matched: {list(matched_names)})"
        )
        return suggestion.with_overrides(
            matched_rules=matched_names,
            warnings=tuple(context.warnings),
        )

    def find_matching_rules(self, context: EvaluationContext) -> list:
        """All rules whose conditions hold, in registration order."""
        matches = []
        for module in self.registry:
            try:
                if module.evaluate(context):
                    matches.append(module)
            except Exception as e:
                logger.error(f"Error evaluating rule '{module.name}': {e}")
        return matches

    @staticmethod
    def select_winner(matches: list) -> Optional[RuleModule]:
        """Highest priority; on ties the earliest in the list."""
        winner = None
        for module in matches:
            if winner is None or module.priority > winner.priority:
                winner = module
        return winner

    # ──────────────────────────────────────────────
    # CONTENT INSPECTION
    # ──────────────────────────────────────────────

    @staticmethod
    def contains_code(text: str) -> bool:
        return text_analysis.contains_code(text)

    @staticmethod
    def contains_url(text: str) -> bool:
        return text_analysis.contains_url(text)

    def get_rules_summary(self) -> list:
        """
        Get a summary of all registered rules.
        Useful for display/logging at startup.
        """
        summary = []
        for i, module in enumerate(self.registry, 1):
            summary.append({
                "order": i,
                "name": module.name,
                "priority": module.priority,
                "conditions": module.config.to_dict().get("conditions", {}),
                "category": module.config.action.category,
            })
        return summary
