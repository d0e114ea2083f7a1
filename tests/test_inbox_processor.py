"""Unit tests for the inbox processing service and data models."""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest
from datetime import datetime
from unittest.mock import Mock

from tududi_inbox.core.errors import EvaluationWarning
from tududi_inbox.core.models import (
    AuxiliaryContext,
    InboxItem,
    InboxStatus,
    ProcessingResult,
    Suggestion,
)
from tududi_inbox.inbox_processor import InboxProcessingService


MONDAY = datetime(2024, 6, 10, 18, 0)


class TestInboxProcessingService(unittest.TestCase):
    """Classification through the service facade."""

    def setUp(self):
        self.audit = Mock()
        self.service = InboxProcessingService.from_config(
            audit_logger=self.audit, clock=lambda: MONDAY
        )

    def test_classify_text(self):
        suggestion = self.service.classify("Buy milk tomorrow")
        self.assertEqual(suggestion.category, "task")
        self.assertEqual(suggestion.suggested_due_date, "2024-06-11")

    def test_classify_item_does_not_change_it(self):
        item = InboxItem(id="7", content="Book flights asap")
        suggestion = self.service.classify(item)
        self.assertEqual(suggestion.rule_name, "urgent-high-priority")
        self.assertEqual(item.status, InboxStatus.ADDED)
        self.assertEqual(item.content, "Book flights asap")

    def test_process_records_audit_entry(self):
        result = self.service.process("https://example.com", {"has_associated_project": False})
        self.assertTrue(result.success)
        self.assertEqual(result.suggestion.category, "bookmark")
        self.audit.log_result.assert_called_once_with(result)

    def test_unsupported_aux_context_is_a_warning(self):
        result = self.service.process("Fix the sink", ["not", "a", "mapping"])
        self.assertTrue(result.success)
        self.assertFalse(result.suggestion.has_suggestion)
        conditions = [w.condition for w in result.suggestion.warnings]
        self.assertIn("auxiliary_context", conditions)
        self.audit.log_result.assert_called_once_with(result)

    def test_analyze_text_with_unsupported_aux_context(self):
        analysis = self.service.analyze_text("Buy milk tomorrow", ["not", "a", "mapping"])
        self.assertEqual(analysis["suggestion"]["rule_name"], "today-tomorrow-tasks")
        self.assertTrue(
            any(w.startswith("auxiliary_context:") for w in analysis["suggestion"]["warnings"])
        )

    def test_none_content_is_empty(self):
        suggestion = self.service.classify(None)
        self.assertFalse(suggestion.has_suggestion)

    def test_classify_many_preserves_order(self):
        suggestions = self.service.classify_many(
            ["URGENT: taxes", "What is for dinner?", "hello"]
        )
        self.assertEqual(
            [s.rule_name for s in suggestions],
            ["urgent-high-priority", "question-note", None],
        )

    def test_analyze_text(self):
        analysis = self.service.analyze_text(
            'Call the landlord today #home +"Flat Move"'
        )
        self.assertEqual(analysis["parsed_tags"], ["home"])
        self.assertEqual(analysis["parsed_projects"], ["Flat Move"])
        self.assertEqual(analysis["cleaned_content"], "Call the landlord today")
        self.assertEqual(analysis["suggestion"]["rule_name"], "today-tomorrow-tasks")
        self.assertEqual(analysis["suggestion"]["suggested_due_date"], "2024-06-10")

    def test_content_helpers(self):
        self.assertTrue(self.service.contains_url("http://x.io"))
        self.assertFalse(self.service.contains_code("no code"))


class TestModels(unittest.TestCase):
    """Inbox item lifecycle and suggestion helpers."""

    def test_item_lifecycle(self):
        item = InboxItem.from_text("Renew passport", source="telegram")
        self.assertEqual(item.status, InboxStatus.ADDED)
        self.assertIsNone(item.updated_at)

        item.mark_processed()
        self.assertEqual(item.status, InboxStatus.PROCESSED)
        self.assertIsNotNone(item.updated_at)

        item.mark_deleted()
        with self.assertRaises(ValueError):
            item.mark_processed()

    def test_with_overrides_returns_copy(self):
        original = Suggestion(category="task", rule_name="r", confidence="low")
        changed = original.with_overrides(category="note", suggested_tags=["a"])
        self.assertEqual(original.category, "task")
        self.assertEqual(changed.category, "note")
        self.assertEqual(changed.suggested_tags, ("a",))

    def test_suggestion_to_dict(self):
        warning = EvaluationWarning(condition="has_project", message="missing flag")
        suggestion = Suggestion(
            category="note",
            rule_name="r",
            suggested_tags=("x",),
            matched_rules=("r", "s"),
            warnings=(warning,),
        )
        self.assertEqual(
            suggestion.to_dict(),
            {
                "rule_name": "r",
                "category": "note",
                "suggested_tags": ["x"],
                "matched_rules": ["r", "s"],
                "warnings": ["has_project: missing flag"],
            },
        )

    def test_aux_context_spellings(self):
        self.assertTrue(AuxiliaryContext.from_value({"hasAssociatedProject": 1}).has_associated_project)
        aux = AuxiliaryContext.from_value({"has_associated_project": False, "area": "work"})
        self.assertFalse(aux.has_associated_project)
        self.assertEqual(aux.extras, {"area": "work"})
        self.assertIsNone(AuxiliaryContext.from_value(None).has_associated_project)
        with self.assertRaises(TypeError):
            AuxiliaryContext.from_value("yes")

    def test_aux_flag_strings(self):
        self.assertFalse(AuxiliaryContext.from_value({"hasAssociatedProject": "false"}).has_associated_project)
        self.assertTrue(AuxiliaryContext.from_value({"has_associated_project": "Yes"}).has_associated_project)
        self.assertIsNone(AuxiliaryContext.from_value({"has_associated_project": "maybe"}).has_associated_project)
        self.assertIsNone(AuxiliaryContext.from_value({"has_associated_project": 7}).has_associated_project)
        with self.assertRaises(TypeError):
            AuxiliaryContext.from_value(["has_associated_project"])

    def test_processing_result_truncates_content(self):
        item = InboxItem(id="1", content="x" * 500)
        data = ProcessingResult(item=item).to_dict()
        self.assertEqual(len(data["item"]["content"]), 200)
        self.assertEqual(data["suggestion"], {"rule_name": None})
        self.assertNotIn("error", data)


if __name__ == "__main__":
    unittest.main()
