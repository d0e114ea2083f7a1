# tududi_inbox/audit_logger.py

"""
Audit Logger
Records every classification as structured JSON.
Provides a complete audit trail for debugging rule behaviour.

Console output is handled by display.py.
This module handles FILE-BASED structured logging.
"""

import os
import json
import logging
from datetime import datetime

from tududi_inbox.core.models import ProcessingResult
from tududi_inbox.utils.config_manager import LoggingConfig


logger = logging.getLogger(__name__)


class AuditLogger:
    """
    Logs classification results to structured JSON files.

    Each run appends to a daily log file.
    Format: logs/audit_YYYY-MM-DD.jsonl (one JSON object per line)

    Usage:
        audit = AuditLogger(config.logging)
        audit.log_result(processing_result)
        audit.log_summary(all_results)
    """

    def __init__(self, config: LoggingConfig, setup_file_logging: bool = True):
        self.log_dir = config.log_dir
        self.enabled = config.audit_enabled
        self._ensure_log_dir()

        if setup_file_logging:
            self._setup_file_logging(config)

    def _ensure_log_dir(self):
        """Create log directory if it doesn't exist."""
        os.makedirs(self.log_dir, exist_ok=True)

    def _setup_file_logging(self, config: LoggingConfig):
        """Setup Python logging to write to file."""
        log_file = os.path.join(
            self.log_dir,
            f"inbox_{datetime.now().strftime('%Y-%m-%d')}.log"
        )

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, config.file_level.upper(), logging.DEBUG))
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"
        ))

        root_logger = logging.getLogger()
        # Avoid adding duplicate handlers
        if not any(isinstance(h, logging.FileHandler) for h in root_logger.handlers):
            root_logger.addHandler(file_handler)

    @property
    def audit_file(self) -> str:
        return os.path.join(
            self.log_dir,
            f"audit_{datetime.now().strftime('%Y-%m-%d')}.jsonl"
        )

    # ──────────────────────────────────────────────
    # AUDIT TRAIL (Structured JSON)
    # ──────────────────────────────────────────────

    def log_result(self, result: ProcessingResult):
        """Append one JSON line for a single classification."""
        if not self.enabled:
            return
        self._append(result.to_dict())

    # ──────────────────────────────────────────────
    # RUN SUMMARY
    # ──────────────────────────────────────────────

    def log_summary(self, results: list):
        """Log a summary of the entire run."""
        category_counts = {}
        rule_counts = {}
        errors = 0
        for result in results:
            category = result.suggestion.category or "none"
            category_counts[category] = category_counts.get(category, 0) + 1
            rule = result.suggestion.rule_name or "none"
            rule_counts[rule] = rule_counts.get(rule, 0) + 1
            if not result.success:
                errors += 1

        summary = {
            "timestamp": datetime.now().isoformat(),
            "type": "run_summary",
            "total_processed": len(results),
            "category_counts": category_counts,
            "rule_counts": rule_counts,
            "errors": errors,
        }

        if self.enabled:
            self._append(summary)

        logger.info(f"Run summary: {len(results)} processed, {errors} errors")

    def _append(self, record: dict):
        try:
            with open(self.audit_file, "a") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(f"Failed to write audit log: {e}")
