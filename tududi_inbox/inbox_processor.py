import logging
from typing import Iterable, Optional, Union

from tududi_inbox.core import text_analysis
from tududi_inbox.core.models import InboxItem, ProcessingResult, Suggestion
from tududi_inbox.core.rule_engine import RuleEngine
from tududi_inbox.core.rule_registry import build_registry
from tududi_inbox.utils.config_manager import AppConfig, ConfigManager

logger = logging.getLogger(__name__)


class InboxProcessingService:
    """
    Entry point for callers that need a suggestion for an inbox item.
    Orchestrates: Context -> Rule Evaluation -> Suggestion -> Audit trail.
    Stateless apart from the optional audit logger; inbox items are
    never persisted here.
    """

    def __init__(self, engine: RuleEngine, audit_logger=None):
        self.engine = engine
        self.audit = audit_logger

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None, audit_logger=None, clock=None):
        """Build registry and engine from configuration (built-in defaults if None)."""
        config = config or ConfigManager.defaults()
        registry = build_registry(config.rules)
        engine = RuleEngine(registry, config.engine, clock=clock)
        return cls(engine, audit_logger=audit_logger)

    # ──────────────────────────────────────────────
    # CLASSIFICATION
    # ──────────────────────────────────────────────

    def classify(
        self,
        item: Union[InboxItem, str],
        aux_context=None,
    ) -> Suggestion:
        """
        Suggest how to file one inbox item.

        Args:
            item: InboxItem or its raw content
            aux_context: e.g. {"hasAssociatedProject": True}

        Returns:
            Suggestion (Suggestion.none() when no rule applies)
        """
        return self.process(item, aux_context).suggestion

    def process(self, item: Union[InboxItem, str], aux_context=None) -> ProcessingResult:
        """Classify one item and record the outcome on the audit trail."""
        if not isinstance(item, InboxItem):
            item = InboxItem.from_text(item or "")

        try:
            suggestion = self.engine.evaluate(item, aux_context)
            result = ProcessingResult(item=item, suggestion=suggestion)
        except Exception as e:
            # Not expected: evaluation itself never raises
            logger.error(f"Error classifying inbox item {item.id}: {e}")
            result = ProcessingResult(item=item, success=False, error_message=str(e))

        self._record(result)
        return result

    def classify_many(self, items: Iterable, aux_context=None) -> list:
        """Classify items one after another, preserving order."""
        return [self.classify(item, aux_context) for item in items]

    def analyze_text(self, content: str, aux_context=None) -> dict:
        """
        Parse and classify text without creating an inbox item.

        Returns:
            Dict with parsed_tags, parsed_projects, cleaned_content and
            the suggestion fields
        """
        content = content or ""
        suggestion = self.engine.evaluate(content, aux_context)
        return {
            "parsed_tags": text_analysis.parse_hashtags(content),
            "parsed_projects": text_analysis.parse_project_refs(content),
            "cleaned_content": text_analysis.clean_text(content),
            "suggestion": suggestion.to_dict(),
        }

    # ──────────────────────────────────────────────
    # CONTENT INSPECTION
    # ──────────────────────────────────────────────

    def contains_code(self, text: str) -> bool:
        return self.engine.contains_code(text)

    def contains_url(self, text: str) -> bool:
        return self.engine.contains_url(text)

    def _record(self, result: ProcessingResult):
        if self.audit is not None:
            self.audit.log_result(result)
