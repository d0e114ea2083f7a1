# tududi_inbox/core/errors.py

"""
Error types for the classification engine.

ConfigurationError is fatal and raised while rules or settings are loaded.
EvaluationWarning is never raised: it is recorded on the evaluation context
and surfaced on the resulting Suggestion.
"""

from dataclasses import dataclass


class ConfigurationError(ValueError):
    """A rule definition or setting is invalid. Raised at startup."""


@dataclass(frozen=True)
class EvaluationWarning:
    """Non-fatal problem found while evaluating a single inbox item."""

    condition: str  # Condition kind (or "auxiliary_context") that hit the problem
    message: str

    def __str__(self) -> str:
        return f"{self.condition}: {self.message}"
