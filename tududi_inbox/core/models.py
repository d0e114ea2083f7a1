# tududi_inbox/core/models.py

"""
Data models used across all modules.
These define the SHAPE of data flowing through the system.
No classification logic here, just data structures and their
(de)serialization.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from tududi_inbox.core.errors import ConfigurationError, EvaluationWarning


# ──────────────────────────────────────────────
# INBOX ITEM
# ──────────────────────────────────────────────


class InboxStatus(str, Enum):
    ADDED = "added"
    PROCESSED = "processed"
    DELETED = "deleted"


@dataclass
class InboxItem:
    """
    A unit of free text captured by the user for later triage.
    Created by: the surrounding application (or InboxItem.from_text)
    Used by: InboxProcessingService, RuleEngine (reads content only)
    """

    id: str
    content: str
    status: InboxStatus = InboxStatus.ADDED
    source: str = "manual"  # "manual" / "telegram" / ...
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: Optional[str] = None

    @classmethod
    def from_text(cls, content: str, source: str = "manual") -> "InboxItem":
        """Create a fresh 'added' item for ad-hoc text."""
        return cls(id=uuid.uuid4().hex, content=content, source=source)

    def mark_processed(self):
        """A suggestion (or manual action) was accepted for this item."""
        self._transition(InboxStatus.PROCESSED)

    def mark_deleted(self):
        """The item was discarded."""
        self._transition(InboxStatus.DELETED)

    def _transition(self, status: InboxStatus):
        if self.status == InboxStatus.DELETED:
            raise ValueError(f"Inbox item {self.id} is deleted")
        self.status = status
        self.updated_at = datetime.now().isoformat()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "status": self.status.value,
            "source": self.source,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ──────────────────────────────────────────────
# RULE CONFIGURATION
# ──────────────────────────────────────────────


def _freeze(value):
    """Deep-copy YAML/JSON data into read-only containers."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value):
    """Inverse of _freeze: back to plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def _split_keys(data: Mapping, known: tuple):
    """(keys present in data, frozen mapping of the keys we don't model)."""
    declared = frozenset(data)
    extras = _freeze({k: v for k, v in data.items() if k not in known})
    return declared, extras


def _put_optional(result: dict, key: str, value, declared):
    # Explicit nulls survive a round-trip; unset fields stay absent
    if value is not None or (declared is not None and key in declared):
        result[key] = value


@dataclass(frozen=True)
class DueDateSpec:
    """
    How a rule derives a due date.

    Types:
      - none:      no due date
      - date:      literal ISO date in `value`
      - relative:  "today" / "tomorrow" / "next_week" or an int day offset
      - extracted: pulled out of the content by extract_due_date()
    """

    type: str
    value: Any = None
    declared: Optional[frozenset] = field(default=None, compare=False, repr=False)

    TYPES = ("none", "date", "relative", "extracted")
    RELATIVE_VALUES = ("today", "tomorrow", "next_week")

    def __post_init__(self):
        if self.type not in self.TYPES:
            raise ConfigurationError(
                f"Invalid due_date type '{self.type}'. Must be one of {self.TYPES}"
            )
        if self.type == "date":
            try:
                date.fromisoformat(str(self.value))
            except ValueError:
                raise ConfigurationError(
                    f"due_date value '{self.value}' is not an ISO date"
                ) from None
        if self.type == "relative":
            is_offset = isinstance(self.value, int) and not isinstance(self.value, bool)
            if not is_offset and self.value not in self.RELATIVE_VALUES:
                raise ConfigurationError(
                    f"Invalid relative due_date '{self.value}'. "
                    f"Must be an integer offset or one of {self.RELATIVE_VALUES}"
                )

    @classmethod
    def from_dict(cls, data) -> "DueDateSpec":
        if not isinstance(data, Mapping) or "type" not in data:
            raise ConfigurationError(f"due_date must be a mapping with a 'type': {data!r}")
        unknown = sorted(set(data) - {"type", "value"})
        if unknown:
            raise ConfigurationError(f"Unknown due_date keys: {unknown}")
        return cls(type=data["type"], value=data.get("value"), declared=frozenset(data))

    def to_dict(self) -> dict:
        result = {"type": self.type}
        _put_optional(result, "value", self.value, self.declared)
        return result


@dataclass(frozen=True)
class ActionTemplate:
    """Static part of what a rule suggests when it wins."""

    category: str  # "task" / "note" / "bookmark"
    reason: Optional[str] = None
    priority: Optional[str] = None  # "high" / "medium" / "low"
    due_date: Optional[DueDateSpec] = None
    tags: Optional[tuple] = None
    project: Optional[str] = None
    extras: Mapping[str, Any] = field(default_factory=dict)  # Keys we don't model, kept as loaded
    declared: Optional[frozenset] = field(default=None, compare=False, repr=False)

    KEYS = ("category", "reason", "priority", "due_date", "tags", "project")

    @classmethod
    def from_dict(cls, data) -> "ActionTemplate":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"action must be a mapping, got: {data!r}")
        category = data.get("category")
        if not isinstance(category, str) or not category:
            raise ConfigurationError("action.category must be a non-empty string")

        tags = data.get("tags")
        if tags is not None:
            if isinstance(tags, str) or not isinstance(tags, (list, tuple)):
                raise ConfigurationError(f"action.tags must be a list, got: {tags!r}")
            tags = tuple(tags)

        due_date = data.get("due_date")
        declared, extras = _split_keys(data, cls.KEYS)
        return cls(
            category=category,
            reason=data.get("reason"),
            priority=data.get("priority"),
            due_date=DueDateSpec.from_dict(due_date) if due_date is not None else None,
            tags=tags,
            project=data.get("project"),
            extras=extras,
            declared=declared,
        )

    def to_dict(self) -> dict:
        result = {"category": self.category}
        _put_optional(result, "reason", self.reason, self.declared)
        _put_optional(result, "priority", self.priority, self.declared)
        _put_optional(
            result,
            "due_date",
            self.due_date.to_dict() if self.due_date is not None else None,
            self.declared,
        )
        _put_optional(
            result,
            "tags",
            list(self.tags) if self.tags is not None else None,
            self.declared,
        )
        _put_optional(result, "project", self.project, self.declared)
        result.update(_thaw(self.extras))
        return result


@dataclass(frozen=True)
class RuleConfig:
    """
    Declarative definition of one rule module.
    Loaded from config.yaml (or the built-in defaults) and never mutated.

    Serialized form:
        name: url-bookmark-note
        priority: 75
        conditions:
          contains_url: true
        action:
          category: bookmark
          tags: [bookmark]
        resolver: bookmark        # optional
        description: "..."        # optional

    Keys outside this form are kept in `extras` and written back by
    to_dict(), so from_dict(d).to_dict() == d for every accepted d.
    """

    name: str
    priority: int
    conditions: Mapping[str, Any]
    action: ActionTemplate
    resolver: Optional[str] = None
    description: Optional[str] = None
    extras: Mapping[str, Any] = field(default_factory=dict)
    declared: Optional[frozenset] = field(default=None, compare=False, repr=False)

    KEYS = ("name", "priority", "conditions", "action", "resolver", "description")

    @classmethod
    def from_dict(cls, data) -> "RuleConfig":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Rule definition must be a mapping, got: {data!r}")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Rule is missing a name: {dict(data)!r}")

        priority = data.get("priority")
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise ConfigurationError(
                f"Rule '{name}' priority must be an integer, got: {priority!r}"
            )

        conditions = data.get("conditions", {})
        if not isinstance(conditions, Mapping):
            raise ConfigurationError(f"Rule '{name}' conditions must be a mapping")

        try:
            action = ActionTemplate.from_dict(data.get("action"))
        except ConfigurationError as e:
            raise ConfigurationError(f"Rule '{name}': {e}") from None

        declared, extras = _split_keys(data, cls.KEYS)
        return cls(
            name=name,
            priority=priority,
            conditions=_freeze(conditions),
            action=action,
            resolver=data.get("resolver"),
            description=data.get("description"),
            extras=extras,
            declared=declared,
        )

    def to_dict(self) -> dict:
        """Serialize back to the declarative form accepted by from_dict()."""
        result = {"name": self.name, "priority": self.priority}
        if self.declared is None or "conditions" in self.declared or self.conditions:
            result["conditions"] = _thaw(self.conditions)
        result["action"] = self.action.to_dict()
        _put_optional(result, "resolver", self.resolver, self.declared)
        _put_optional(result, "description", self.description, self.declared)
        result.update(_thaw(self.extras))
        return result


# ──────────────────────────────────────────────
# EVALUATION CONTEXT
# ──────────────────────────────────────────────


_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off")


def _as_flag(value) -> Optional[bool]:
    """bool, 0/1 or a true/false string; anything else counts as missing."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


@dataclass(frozen=True)
class AuxiliaryContext:
    """
    Lookups the caller supplies alongside the content.
    Only has_associated_project is known to the built-in conditions;
    anything else lands in `extras` for custom rules.
    """

    has_associated_project: Optional[bool] = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value) -> "AuxiliaryContext":
        """Accept None, an AuxiliaryContext, or a plain dict (camelCase or snake_case)."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Unsupported auxiliary context: {type(value).__name__}")

        data = dict(value)
        flag = data.pop("has_associated_project", None)
        camel = data.pop("hasAssociatedProject", None)
        if flag is None:
            flag = camel
        return cls(
            has_associated_project=_as_flag(flag),
            extras=data,
        )


@dataclass
class EvaluationContext:
    """
    Transient, per-evaluation view of one inbox item.
    Created by: RuleEngine.build_context()
    Used by: condition predicates, action resolvers
    Never persisted, never shared between evaluations.
    """

    content: str
    cleaned_content: str
    today: date  # Captured once per evaluation
    parsed_tags: list = field(default_factory=list)
    parsed_projects: list = field(default_factory=list)
    has_associated_project: Optional[bool] = None
    source: Optional[str] = None
    long_text_threshold: int = 50
    extras: Mapping[str, Any] = field(default_factory=dict)
    warnings: list = field(default_factory=list)

    @property
    def project_associated(self) -> bool:
        """Best-effort project check for resolvers (no warnings)."""
        return bool(self.has_associated_project) or bool(self.parsed_projects)

    def warn(self, condition: str, message: str) -> EvaluationWarning:
        warning = EvaluationWarning(condition=condition, message=message)
        if warning not in self.warnings:
            self.warnings.append(warning)
        return warning


# ──────────────────────────────────────────────
# SUGGESTION (engine output)
# ──────────────────────────────────────────────


@dataclass(frozen=True)
class Suggestion:
    """
    The engine's proposal for an inbox item.
    Created by: RuleModule.build_action() / Suggestion.none()
    Used by: InboxProcessingService, AuditLogger, Display

    Never mutated; use with_overrides() to derive a changed copy.
    """

    category: Optional[str] = None
    rule_name: Optional[str] = None
    reason: Optional[str] = None
    confidence: Optional[str] = None  # "high" / "medium" / "low"
    priority: Optional[str] = None
    suggested_due_date: Optional[str] = None  # ISO-8601 date
    suggested_tags: Optional[tuple] = None
    suggested_project: Optional[str] = None
    matched_rules: tuple = ()
    warnings: tuple = ()

    @classmethod
    def none(cls, matched_rules=(), warnings=()) -> "Suggestion":
        """The 'no suggestion available' outcome."""
        return cls(matched_rules=tuple(matched_rules), warnings=tuple(warnings))

    @property
    def has_suggestion(self) -> bool:
        return self.rule_name is not None

    def with_overrides(self, **changes) -> "Suggestion":
        if "suggested_tags" in changes and changes["suggested_tags"] is not None:
            changes["suggested_tags"] = tuple(changes["suggested_tags"])
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Serialize for JSON output / audit logging. Absent fields are omitted."""
        result = {"rule_name": self.rule_name}
        if self.category is not None:
            result["category"] = self.category
        if self.reason is not None:
            result["reason"] = self.reason
        if self.confidence is not None:
            result["confidence"] = self.confidence
        if self.priority is not None:
            result["priority"] = self.priority
        if self.suggested_due_date is not None:
            result["suggested_due_date"] = self.suggested_due_date
        if self.suggested_tags:
            result["suggested_tags"] = list(self.suggested_tags)
        if self.suggested_project is not None:
            result["suggested_project"] = self.suggested_project
        if self.matched_rules:
            result["matched_rules"] = list(self.matched_rules)
        if self.warnings:
            result["warnings"] = [str(w) for w in self.warnings]
        return result


# ──────────────────────────────────────────────
# PROCESSING RESULT
# ──────────────────────────────────────────────


@dataclass
class ProcessingResult:
    """
    Complete record of one classification.
    This is what gets logged to the audit trail.
    Created by: InboxProcessingService
    Used by: AuditLogger, Display
    """

    item: InboxItem
    suggestion: Suggestion = field(default_factory=Suggestion.none)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    success: bool = True
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "timestamp": self.timestamp,
            "success": self.success,
            "item": {
                "id": self.item.id,
                "source": self.item.source,
                "status": self.item.status.value,
                "content": self.item.content[:200],  # Truncate for log
            },
            "suggestion": self.suggestion.to_dict(),
        }
        if self.error_message:
            result["error"] = self.error_message
        return result
