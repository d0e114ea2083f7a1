# tududi_inbox/utils/display.py

"""
Display Module: readable console output.
Designed to make it immediately obvious:
  - What inbox text was received
  - Which rule matched
  - What the engine suggests doing with it
"""

from datetime import datetime

from tududi_inbox.core.models import InboxItem, ProcessingResult, Suggestion


# ──────────────────────────────────────────────
# COLORS
# ──────────────────────────────────────────────


class C:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"


def col(text: str, color: str) -> str:
    return f"{color}{text}{C.RESET}"


CATEGORY_COLORS = {
    "task": C.GREEN,
    "note": C.BLUE,
    "bookmark": C.MAGENTA,
}


# ──────────────────────────────────────────────
# STARTUP
# ──────────────────────────────────────────────


def show_startup_banner(config):
    """Show startup banner with the active settings."""
    print()
    print(col("+" + "=" * 58 + "+", C.CYAN))
    print(
        col("|", C.CYAN)
        + col("         TUDUDI INBOX CLASSIFIER                          ", C.BOLD)
        + col("|", C.CYAN)
    )
    print(col("+" + "=" * 58 + "+", C.CYAN))
    print()
    print(f"  Timezone:     {config.engine.timezone or 'local'}")
    print(f"  Long text:    {config.engine.long_text_threshold} words")
    print(f"  Rules:        {len(config.rules)} loaded")
    print()


def show_rules_summary(summary: list):
    """Show registered rules in a table (from RuleEngine.get_rules_summary())."""
    print(col("  Rules Configuration:", C.BOLD))
    print(f"  {'#':<4} {'Rule Name':<28} {'Priority':<10} {'Category'}")
    print(f"  {'--':<4} {'---':<28} {'---':<10} {'---'}")

    for rule in summary:
        category = rule["category"]
        color = CATEGORY_COLORS.get(category, C.WHITE)
        print(
            f"  {rule['order']:<4} {rule['name']:<28} {rule['priority']:<10} "
            f"{col(category, color)}"
        )
    print()


# ──────────────────────────────────────────────
# PROCESSING EACH ITEM
# ──────────────────────────────────────────────


def show_item_divider(index: int, total: int):
    print()
    print(col("=" * 60, C.CYAN))
    print(col(f"  ITEM {index} of {total}", C.BOLD + C.CYAN))
    print(col("=" * 60, C.CYAN))


def show_incoming_item(item: InboxItem):
    """Show the captured text, first 5 lines."""
    print()
    print(col("  INBOX ITEM:", C.BOLD + C.WHITE))
    print(col("  +" + "-" * 56 + "+", C.DIM))
    print(col("  |", C.DIM) + f" Source:  {col(item.source, C.CYAN)}")

    lines = item.content.strip().split("\n") or [""]
    for line in lines[:5]:
        print(col("  |", C.DIM) + f"   {line[:52]}")
    if len(lines) > 5:
        print(col("  |", C.DIM) + col("   ...", C.DIM))

    print(col("  +" + "-" * 56 + "+", C.DIM))
    print()


def show_suggestion(suggestion: Suggestion):
    """Show the winning rule and what it suggests."""
    print(col("  SUGGESTION:", C.BOLD + C.WHITE))

    if not suggestion.has_suggestion:
        print(f"    Rule:     {col('No matching rule found', C.YELLOW)}")
        print(f"    Category: {col('unresolved', C.DIM)}")
    else:
        color = CATEGORY_COLORS.get(suggestion.category, C.WHITE)
        confidence_colors = {"high": C.GREEN, "medium": C.YELLOW, "low": C.RED}

        print(f"    Rule:       {col(suggestion.rule_name, C.CYAN)}")
        print(f"    Category:   {col(str(suggestion.category).upper(), color + C.BOLD)}")
        print(
            f"    Confidence: "
            f"{col(suggestion.confidence, confidence_colors.get(suggestion.confidence, C.WHITE))}"
        )
        if suggestion.priority:
            print(f"    Priority:   {suggestion.priority}")
        if suggestion.suggested_due_date:
            print(f"    Due:        {suggestion.suggested_due_date}")
        if suggestion.suggested_tags:
            print(f"    Tags:       {', '.join(suggestion.suggested_tags)}")
        if suggestion.suggested_project:
            print(f"    Project:    {suggestion.suggested_project}")
        if len(suggestion.matched_rules) > 1:
            others = [r for r in suggestion.matched_rules if r != suggestion.rule_name]
            print(f"    Also:       {col(', '.join(others), C.DIM)}")

    for warning in suggestion.warnings:
        print(f"    {col(f'Warning: {warning}', C.YELLOW)}")
    print()


def show_processing_error(item: InboxItem, error_msg: str):
    print(col("  [ERROR] Failed to classify this item", C.RED + C.BOLD))
    print(f"    Item:  {item.id}")
    print(f"    Error: {error_msg}")
    print()


# ──────────────────────────────────────────────
# FINAL SUMMARY
# ──────────────────────────────────────────────


def show_run_summary(results: list):
    """Category breakdown and a per-item table."""
    category_counts = {}
    errors = 0
    for result in results:
        category = result.suggestion.category or "unresolved"
        category_counts[category] = category_counts.get(category, 0) + 1
        if not result.success:
            errors += 1

    print()
    print(col("+" + "=" * 58 + "+", C.CYAN))
    print(
        col("|", C.CYAN)
        + col("                    RUN SUMMARY                         ", C.BOLD)
        + col("|", C.CYAN)
    )
    print(col("+" + "=" * 58 + "+", C.CYAN))
    print()
    print(f"  Processed:  {len(results)} item(s)")
    print(f"  Time:       {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print()

    print(col("  Suggested categories:", C.BOLD))
    for category, count in sorted(category_counts.items(), key=lambda x: -x[1]):
        bar = "#" * count
        print(f"    {category:<20} {bar} ({count})")

    if errors > 0:
        print()
        print(col(f"  WARNING: {errors} error(s) occurred during processing", C.RED))

    print()
    print(col("  Per-Item Results:", C.BOLD))
    print(f"  {'#':<3} {'Content':<30} {'Rule':<24} {'Due'}")
    print(f"  {'--':<3} {'---':<30} {'---':<24} {'---'}")

    for i, result in enumerate(results, 1):
        content = result.item.content.replace("\n", " ")[:29]
        rule = result.suggestion.rule_name or "N/A"
        due = result.suggestion.suggested_due_date or "-"
        print(f"  {i:<3} {content:<30} {rule:<24} {due}")

    print()


def show_processing_result(result: ProcessingResult, index: int, total: int):
    show_item_divider(index, total)
    show_incoming_item(result.item)
    if result.success:
        show_suggestion(result.suggestion)
    else:
        show_processing_error(result.item, result.error_message)
