# tududi_inbox/core/rule_registry.py

"""
Rule Registry
The ordered, read-only collection of rule modules.

Built once at startup by build_registry() and handed to the RuleEngine.
Registration order is significant: it breaks priority ties (first
registered wins), so it is preserved exactly as given.
"""

import logging
from typing import Iterable, Optional

from tududi_inbox.core.action_registry import ActionResolver
from tududi_inbox.core.conditions import check_library
from tududi_inbox.core.errors import ConfigurationError
from tududi_inbox.core.models import RuleConfig
from tududi_inbox.core.rule_module import RuleModule
from tududi_inbox.core.rule_modules import DEFAULT_RULES


logger = logging.getLogger(__name__)


class RuleRegistry:
    """Immutable, ordered set of RuleModules with unique names."""

    def __init__(self, modules: Iterable[RuleModule]):
        self._modules = tuple(modules)
        self._by_name = {}
        for module in self._modules:
            if module.name in self._by_name:
                raise ConfigurationError(f"Duplicate rule name: '{module.name}'")
            self._by_name[module.name] = module

    def __iter__(self):
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def modules(self) -> tuple:
        return self._modules

    def names(self) -> list:
        return [module.name for module in self._modules]

    def get(self, name: str) -> Optional[RuleModule]:
        return self._by_name.get(name)

    def configs(self) -> list:
        return [module.config for module in self._modules]


def _as_pair(entry):
    """Normalize a registry entry to (RuleConfig, resolver-or-None)."""
    resolver = None
    if isinstance(entry, tuple):
        if len(entry) != 2:
            raise ConfigurationError(f"Registry entry must be (config, resolver): {entry!r}")
        entry, resolver = entry
        if resolver is not None and not isinstance(resolver, ActionResolver):
            raise ConfigurationError(
                f"Resolver for rule must be an ActionResolver, got: {type(resolver).__name__}"
            )

    if isinstance(entry, RuleConfig):
        return entry, resolver
    return RuleConfig.from_dict(entry), resolver


def build_registry(definitions: Iterable) -> RuleRegistry:
    """
    Build the registry from rule definitions, in the order given.

    Each definition is a RuleConfig, a declarative dict, or a
    (RuleConfig-or-dict, ActionResolver) pair for a custom resolver.

    Raises:
        ConfigurationError: unknown condition or resolver, duplicate name,
            malformed definition
    """
    check_library()

    modules = []
    for entry in definitions:
        config, resolver = _as_pair(entry)
        try:
            modules.append(RuleModule.from_config(config, resolver=resolver))
        except ConfigurationError as e:
            raise ConfigurationError(f"Rule '{config.name}': {e}") from None

    registry = RuleRegistry(modules)
    logger.debug(f"Rule registry built with {len(registry)} rules: {registry.names()}")
    return registry


def build_default_registry() -> RuleRegistry:
    return build_registry(DEFAULT_RULES)
