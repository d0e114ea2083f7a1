# tududi_inbox/core/text_analysis.py

"""
Text Analysis
Pure string helpers used by the condition library and the inbox
processing service. No state, no I/O.

Inbox syntax:
  #tag              -> tag reference
  +project          -> project reference
  +"Quoted Project" -> project reference with spaces
"""

import re


# Imperative verbs commonly used to start a to-do item. A lexicon, not a
# part-of-speech tagger: unknown verbs are simply not recognised.
ACTION_VERBS = frozenset({
    "add", "archive", "arrange", "ask", "attend", "backup", "book", "bring",
    "build", "buy", "calculate", "call", "cancel", "celebrate", "check",
    "clean", "clear", "collect", "compare", "complete", "configure",
    "confirm", "contact", "cook", "create", "debug", "decide", "delete",
    "deliver", "deploy", "discuss", "do", "document", "donate", "download",
    "draft", "drive", "edit", "email", "feed", "file", "fill", "finalize",
    "find", "finish", "fix", "follow", "get", "go", "install", "invite",
    "investigate", "learn", "listen", "look", "mail", "make", "measure",
    "meet", "merge", "message", "move", "order", "organize", "pack", "pay",
    "pick", "plan", "post", "practice", "prepare", "print", "publish",
    "pull", "push", "read", "refactor", "register", "remind", "remove",
    "renew", "repair", "replace", "reply", "research", "respond", "return",
    "review", "run", "schedule", "sell", "send", "set", "share", "ship",
    "sign", "sort", "start", "stop", "study", "submit", "summarize", "take",
    "tell", "test", "text", "translate", "try", "unpack", "update",
    "upgrade", "upload", "visit", "walk", "wash", "watch", "water", "write",
})

AUXILIARY_VERBS = frozenset({
    "be", "is", "am", "are", "was", "were", "being", "been", "have", "has",
    "had", "having", "does", "did", "doing", "will", "would", "shall",
    "should", "may", "might", "can", "could", "must", "ought",
})

QUESTION_WORDS = (
    "what", "when", "where", "who", "why", "how", "which", "can", "could",
    "would", "should", "will", "do", "does", "did", "is", "are", "was", "were",
)

TIME_REFERENCES = (
    "tomorrow", "today", "yesterday", "deadline", "due", "schedule",
    "appointment", "by", "before", "after", "next week", "this week",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
    "sunday",
)

URL_PATTERN = re.compile(r"(?:https?://|\bwww\.)[^\s]+", re.IGNORECASE)
FENCED_CODE_PATTERN = re.compile(r"(```|~~~).*?\1", re.DOTALL)
INDENTED_LINE_PATTERN = re.compile(r"^(?: {4}|\t)\S")
TIME_REFERENCE_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(t) for t in TIME_REFERENCES) + r")\b",
    re.IGNORECASE,
)
TAG_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

MIN_INDENTED_LINES = 2


# ──────────────────────────────────────────────
# TOKENIZING & PARSING
# ──────────────────────────────────────────────


def tokenize_text(text: str) -> list:
    """
    Split on spaces, keeping +"Quoted Project" references in one token.
    A quote only opens a quoted run at the start of the text or right
    after a '+'.
    """
    tokens = []
    current = ""
    in_quotes = False

    for i, char in enumerate(text):
        if char == '"' and not in_quotes and (i == 0 or text[i - 1] == "+"):
            in_quotes = True
            current += char
        elif char == '"' and in_quotes:
            in_quotes = False
            current += char
        elif char.isspace() and not in_quotes:
            if current:
                tokens.append(current)
                current = ""
        else:
            current += char

    if current:
        tokens.append(current)
    return tokens


def parse_hashtags(text: str) -> list:
    """Unique #tag names in order of appearance."""
    tags = []
    for word in (text or "").split():
        if not word.startswith("#"):
            continue
        name = word[1:]
        if name and TAG_NAME_PATTERN.match(name) and name not in tags:
            tags.append(name)
    return tags


def parse_project_refs(text: str) -> list:
    """Unique +project names in order of appearance (quotes stripped)."""
    projects = []
    for token in tokenize_text((text or "").strip()):
        if not token.startswith("+"):
            continue
        name = token[1:]
        if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
            name = name[1:-1]
        if name and name not in projects:
            projects.append(name)
    return projects


def clean_text(text: str) -> str:
    """Content with every #tag and +project token removed."""
    tokens = tokenize_text((text or "").strip())
    kept = [t for t in tokens if not (t.startswith("#") or t.startswith("+"))]
    return " ".join(kept).strip()


def word_count(text: str) -> int:
    return len((text or "").split())


# ──────────────────────────────────────────────
# CONTENT CHECKS
# ──────────────────────────────────────────────


def is_action_verb(word: str) -> bool:
    if not word or not isinstance(word, str):
        return False
    normalized = word.strip().lower().strip(".,:;!?\"'()[]")
    if normalized in AUXILIARY_VERBS:
        return False
    return normalized in ACTION_VERBS


def starts_with_verb(text: str) -> bool:
    """True if the first word looks like an imperative action verb."""
    words = (text or "").split()
    if not words:
        return False
    return is_action_verb(words[0])


def contains_url(text: str) -> bool:
    return bool(URL_PATTERN.search(text or ""))


def contains_code(text: str) -> bool:
    """
    Fenced block (``` or ~~~, opened and closed) or at least
    MIN_INDENTED_LINES consecutive lines indented by 4 spaces / a tab.
    """
    if not text:
        return False
    if FENCED_CODE_PATTERN.search(text):
        return True

    run = 0
    for line in text.splitlines():
        if INDENTED_LINE_PATTERN.match(line):
            run += 1
            if run >= MIN_INDENTED_LINES:
                return True
        elif line.strip():
            run = 0
    return False


def is_question(text: str) -> bool:
    """
    Ends with "?" or starts with a question word. Auxiliaries double as
    imperatives, so "Do the dishes" also counts as a question.
    """
    stripped = (text or "").strip()
    if not stripped:
        return False
    if stripped.endswith("?"):
        return True
    lowered = stripped.lower()
    return any(lowered.startswith(word + " ") for word in QUESTION_WORDS)


def is_long_text(text: str, threshold: int) -> bool:
    return word_count(text) >= threshold


def contains_time_reference(text: str) -> bool:
    return bool(TIME_REFERENCE_PATTERN.search(text or ""))
