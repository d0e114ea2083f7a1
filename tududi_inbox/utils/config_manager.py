# tududi_inbox/utils/config_manager.py

"""
Configuration Manager

Loads settings from .env (environment overrides) and config.yaml (behavior).
Validates everything up front and fails fast with a ConfigurationError.
Provides a single config object for all modules.

config.yaml sections:
  - engine:  long-text threshold, timezone used for "today"
  - logging: console/file levels, log directory, audit trail switch
  - rules:   declarative rule definitions (built-in defaults if absent)
"""

import os
import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import load_dotenv

from tududi_inbox.core.conditions import ConditionKind
from tududi_inbox.core.errors import ConfigurationError
from tududi_inbox.core.models import RuleConfig
from tududi_inbox.core.rule_modules import DEFAULT_RULES

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ──────────────────────────────────────────────
# CONFIGURATION DATACLASSES
# ──────────────────────────────────────────────


@dataclass
class EngineConfig:
    """Classification engine settings."""

    long_text_threshold: int = 50  # Words before content counts as "long"
    timezone: Optional[str] = None  # IANA name; None = local time

    @property
    def tzinfo(self) -> Optional[tzinfo]:
        if not self.timezone:
            return None
        return ZoneInfo(self.timezone)


@dataclass
class LoggingConfig:
    """Logging settings."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_dir: str = "logs"
    audit_enabled: bool = True


@dataclass
class AppConfig:
    """Complete application configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    rules: list = field(default_factory=list)  # RuleConfig, in registration order


# ──────────────────────────────────────────────
# ENV PARSING
# ──────────────────────────────────────────────


def _parse_bool(env_val: Optional[str], yaml_val, default: bool) -> bool:
    """Environment variable overrides yaml, which overrides default."""
    if env_val is not None:
        return env_val.lower() not in ("false", "0", "no", "off")
    if yaml_val is not None:
        return bool(yaml_val)
    return default


def _parse_int(env_val: Optional[str], yaml_val, default: int) -> int:
    """Environment variable overrides yaml, which overrides default."""
    if env_val is not None:
        try:
            return int(env_val)
        except ValueError:
            return default
    if yaml_val is not None:
        try:
            return int(yaml_val)
        except (ValueError, TypeError):
            return default
    return default


# ──────────────────────────────────────────────
# CONFIG MANAGER
# ──────────────────────────────────────────────


class ConfigManager:
    """
    Loads and validates all configuration.

    Environment overrides (from .env or the process environment):
      - INBOX_LONG_TEXT_THRESHOLD
      - INBOX_TIMEZONE
      - INBOX_AUDIT_ENABLED
      - INBOX_LOG_LEVEL
    """

    def __init__(self, config_path: str = "config/config.yaml", env_path: str = ".env"):
        self.config_path = config_path
        self.env_path = env_path

    def load(self) -> AppConfig:
        """Load and validate all configuration. Returns AppConfig object."""

        # Step 1: Load overrides from .env
        self._load_env()

        # Step 2: Load behavior from config.yaml
        yaml_config = self._load_yaml()

        # Step 3: Build typed config objects
        config = self._build_config(yaml_config)

        # Step 4: Validate everything
        self._validate(config)

        self._log_startup_status(config)

        return config

    @classmethod
    def defaults(cls) -> AppConfig:
        """Built-in settings and rules, no files involved."""
        config = cls()._build_config({})
        cls()._validate(config)
        return config

    def _load_env(self):
        """Load environment variables from .env file."""
        if os.path.exists(self.env_path):
            load_dotenv(self.env_path)
        else:
            logger.debug(f"No .env file found at {self.env_path}, using system environment")

    def _load_yaml(self) -> dict:
        """Load and parse config.yaml file."""
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Copy config/config.yaml from the repository and adjust it."
            )

        with open(self.config_path, "r") as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from None

        if config is None:
            raise ConfigurationError(f"Configuration file is empty: {self.config_path}")
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {self.config_path}"
            )

        return config

    def _build_config(self, yaml_config: dict) -> AppConfig:
        """Combine environment overrides and yaml settings into AppConfig."""

        # ── Engine config ─────────────────────────
        engine_yaml = yaml_config.get("engine") or {}
        engine = EngineConfig(
            long_text_threshold=_parse_int(
                os.getenv("INBOX_LONG_TEXT_THRESHOLD"),
                engine_yaml.get("long_text_threshold"),
                50,
            ),
            timezone=os.getenv("INBOX_TIMEZONE") or engine_yaml.get("timezone"),
        )

        # ── Logging config ────────────────────────
        logging_yaml = yaml_config.get("logging") or {}
        logging_config = LoggingConfig(
            console_level=os.getenv("INBOX_LOG_LEVEL")
            or logging_yaml.get("console_level", "INFO"),
            file_level=logging_yaml.get("file_level", "DEBUG"),
            log_dir=logging_yaml.get("log_dir", "logs"),
            audit_enabled=_parse_bool(
                os.getenv("INBOX_AUDIT_ENABLED"),
                logging_yaml.get("audit_enabled"),
                True,
            ),
        )

        # ── Rules ─────────────────────────────────
        rules_yaml = yaml_config.get("rules")
        if rules_yaml is None:
            logger.debug("No 'rules' section in config.yaml, using built-in rules")
            rules_yaml = DEFAULT_RULES
        if not isinstance(rules_yaml, list):
            raise ConfigurationError("'rules' must be a list of rule definitions")

        rules = [RuleConfig.from_dict(rule_data) for rule_data in rules_yaml]

        return AppConfig(engine=engine, logging=logging_config, rules=rules)

    # ──────────────────────────────────────────────
    # VALIDATION
    # ──────────────────────────────────────────────

    def _validate(self, config: AppConfig):
        """Validate settings and rules; collect every problem, then fail."""
        errors = []

        # ── Engine settings ───────────────────────
        if config.engine.long_text_threshold < 1:
            errors.append("engine.long_text_threshold must be at least 1")
        if config.engine.timezone:
            try:
                ZoneInfo(config.engine.timezone)
            except (ZoneInfoNotFoundError, ValueError):
                errors.append(f"Unknown timezone: '{config.engine.timezone}'")

        # ── Logging settings ──────────────────────
        for name in ("console_level", "file_level"):
            level = str(getattr(config.logging, name)).upper()
            if level not in VALID_LOG_LEVELS:
                errors.append(f"logging.{name} must be one of {VALID_LOG_LEVELS}")

        # ── Rules ─────────────────────────────────
        if not config.rules:
            errors.append("No rules defined in config.yaml")

        seen = set()
        for rule in config.rules:
            if rule.name in seen:
                errors.append(f"Duplicate rule name: '{rule.name}'")
            seen.add(rule.name)

            if not rule.conditions:
                errors.append(f"Rule '{rule.name}' has no conditions")
            for condition_name in rule.conditions:
                try:
                    ConditionKind.parse(condition_name)
                except ConfigurationError as e:
                    errors.append(f"Rule '{rule.name}': {e}")

        if errors:
            error_msg = "Configuration errors found:\n"
            for error in errors:
                error_msg += f"  - {error}\n"
            raise ConfigurationError(error_msg)

    # ──────────────────────────────────────────────
    # STARTUP LOGGING
    # ──────────────────────────────────────────────

    def _log_startup_status(self, config: AppConfig):
        logger.info("=" * 50)
        logger.info("CONFIGURATION LOADED")
        logger.info("=" * 50)
        logger.info(f"  Config:      {self.config_path}")
        logger.info(f"  Timezone:    {config.engine.timezone or 'local'}")
        logger.info(f"  Long text:   {config.engine.long_text_threshold} words")
        logger.info(f"  Audit trail: {'ON' if config.logging.audit_enabled else 'OFF'}")
        logger.info(f"  Rules:       {len(config.rules)} rules loaded")
        logger.info("=" * 50)
