from abc import ABC, abstractmethod
import logging
from typing import Optional

from tududi_inbox.core.conditions import extract_due_date, resolve_relative_due_date
from tududi_inbox.core.errors import ConfigurationError
from tududi_inbox.core.models import ActionTemplate, EvaluationContext, RuleConfig

logger = logging.getLogger(__name__)


class ActionResolver(ABC):
    """Turns a rule's static action template into suggestion fields."""

    @abstractmethod
    def resolve(self, template: ActionTemplate, context: EvaluationContext) -> dict:
        """
        Compute the suggestion fields for a winning rule.

        Args:
            template: The rule's static action template
            context: The per-evaluation context

        Returns:
            Dict of Suggestion field names to values. Fields that could not
            be computed are left out rather than defaulted.
        """
        pass

    @staticmethod
    def _template_fields(template: ActionTemplate) -> dict:
        fields = {"category": template.category}
        if template.reason is not None:
            fields["reason"] = template.reason
        if template.priority is not None:
            fields["priority"] = template.priority
        if template.tags is not None:
            fields["suggested_tags"] = tuple(template.tags)
        if template.project is not None:
            fields["suggested_project"] = template.project
        if template.due_date is not None and template.due_date.type == "date":
            fields["suggested_due_date"] = str(template.due_date.value)
        return fields


class PassThroughResolver(ActionResolver):
    """Default: the static template, unchanged."""

    def resolve(self, template, context):
        return self._template_fields(template)


class DueDateResolver(ActionResolver):
    """Resolves relative and extracted due dates against context.today."""

    def resolve(self, template, context):
        fields = self._template_fields(template)

        due_date = self._resolve_due_date(template, context)
        if due_date:
            fields["suggested_due_date"] = due_date
        else:
            fields.pop("suggested_due_date", None)
        return fields

    def _resolve_due_date(self, template, context) -> Optional[str]:
        spec = template.due_date
        if spec is None or spec.type == "none":
            return None
        if spec.type == "date":
            return str(spec.value)
        if spec.type == "relative":
            return resolve_relative_due_date(spec.value, context.today)

        extracted = extract_due_date(context)
        if extracted is None:
            logger.debug("No due date found in content, omitting suggested_due_date")
        return extracted


class BookmarkResolver(DueDateResolver):
    """
    URL items. With an associated project the bookmark is filed as a
    note in that project; otherwise the template stands.
    """

    def resolve(self, template, context):
        fields = super().resolve(template, context)

        if context.project_associated:
            fields["category"] = "note"
            fields["reason"] = "url_with_project"
            project = template.project or (
                context.parsed_projects[0] if context.parsed_projects else None
            )
            if project:
                fields["suggested_project"] = project
        return fields


class ResolverFactory:
    """Factory to create the correct ActionResolver for a rule."""

    RESOLVERS = {
        "pass_through": PassThroughResolver,
        "due_date": DueDateResolver,
        "bookmark": BookmarkResolver,
    }

    @staticmethod
    def get_resolver(config: RuleConfig) -> ActionResolver:
        if config.resolver is not None:
            resolver_cls = ResolverFactory.RESOLVERS.get(config.resolver)
            if resolver_cls is None:
                raise ConfigurationError(
                    f"Rule '{config.name}' has unknown resolver '{config.resolver}'. "
                    f"Must be one of {sorted(ResolverFactory.RESOLVERS)}"
                )
            return resolver_cls()

        due_date = config.action.due_date
        if due_date is not None and due_date.type in ("relative", "extracted"):
            return DueDateResolver()
        return PassThroughResolver()
