import sys
import json
import argparse
import logging

from tududi_inbox.audit_logger import AuditLogger
from tududi_inbox.core.errors import ConfigurationError
from tududi_inbox.core.models import InboxItem
from tududi_inbox.inbox_processor import InboxProcessingService
from tududi_inbox.utils.config_manager import ConfigManager
import tududi_inbox.utils.display as display


class InboxClassifier:
    """
    Command-line classifier.
    Loads configuration, builds the rule registry once, then classifies
    each piece of text it is given.
    """

    def __init__(self, config_path: str = "config/config.yaml", env_path: str = ".env"):
        # ── Step 1: Load Configuration ──
        self.config = ConfigManager(config_path=config_path, env_path=env_path).load()

        # ── Step 2: Setup Logging ──
        self._setup_logging()

        # ── Step 3: Initialize Modules ──
        audit = AuditLogger(self.config.logging) if self.config.logging.audit_enabled else None
        self.audit = audit
        self.processor = InboxProcessingService.from_config(self.config, audit_logger=audit)

        self.logger = logging.getLogger(__name__)

    def _setup_logging(self):
        """Configure console logging on stderr so stdout stays clean for --json."""
        log_level = getattr(
            logging,
            self.config.logging.console_level.upper(),
            logging.INFO,
        )

        console_handler = logging.StreamHandler(stream=sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-5s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )

        logging.basicConfig(level=logging.DEBUG, handlers=[console_handler])

    # ──────────────────────────────────────────────
    # MAIN RUN METHOD
    # ──────────────────────────────────────────────

    def run(self, texts: list, has_project=None, as_json: bool = False, source: str = "manual"):
        """Classify every text and print the suggestions."""
        aux = None if has_project is None else {"has_associated_project": has_project}
        items = [InboxItem.from_text(text, source=source) for text in texts if text.strip()]

        if not as_json:
            display.show_startup_banner(self.config)

        results = []
        for i, item in enumerate(items, 1):
            result = self.processor.process(item, aux)
            results.append(result)

            if as_json:
                print(json.dumps({"item": item.content, **result.suggestion.to_dict()}))
            else:
                display.show_processing_result(result, i, len(items))

        if not as_json and results:
            display.show_run_summary(results)
        if self.audit is not None:
            self.audit.log_summary(results)

        return results

    def list_rules(self):
        display.show_rules_summary(self.processor.engine.get_rules_summary())


# ──────────────────────────────────────────────
# ENTRY POINT
# ──────────────────────────────────────────────


def main(argv=None):
    """Entry point for the application."""
    parser = argparse.ArgumentParser(description="Suggest how to file tududi inbox items")
    parser.add_argument(
        "texts",
        nargs="*",
        help="Inbox text to classify (reads one item per line from stdin if omitted)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to configuration file (default: config/config.yaml)",
    )
    parser.add_argument("--env", type=str, default=".env", help="Path to .env file")
    project = parser.add_mutually_exclusive_group()
    project.add_argument(
        "--project",
        dest="has_project",
        action="store_const",
        const=True,
        help="Treat the items as attached to an existing project",
    )
    project.add_argument(
        "--no-project",
        dest="has_project",
        action="store_const",
        const=False,
        help="Treat the items as not attached to any project",
    )
    parser.add_argument("--source", type=str, default="manual", help="Origin channel of the items")
    parser.add_argument("--json", action="store_true", help="Print one JSON object per item")
    parser.add_argument("--list-rules", action="store_true", help="Show registered rules and exit")
    args = parser.parse_args(argv)

    try:
        classifier = InboxClassifier(config_path=args.config, env_path=args.env)

        if args.list_rules:
            classifier.list_rules()
            return

        texts = args.texts or [line.rstrip("\n") for line in sys.stdin]
        classifier.run(
            texts,
            has_project=args.has_project,
            as_json=args.json,
            source=args.source,
        )

    except FileNotFoundError as e:
        print(f"\nConfiguration error: {e}", file=sys.stderr)
        sys.exit(1)

    except ConfigurationError as e:
        print(f"\nConfiguration validation error:\n{e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\n\nStopped by user.", file=sys.stderr)
        sys.exit(0)

    except Exception as e:
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        logging.getLogger(__name__).exception("Unexpected error")
        sys.exit(1)


if __name__ == "__main__":
    main()
