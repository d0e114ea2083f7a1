# tududi_inbox/core/rule_modules.py

"""
Built-in rule definitions, in registration order.

These are the declarative records used when config.yaml has no
`rules:` section. config/config.yaml ships the same list so it can be
edited without touching code.
"""

URGENT_KEYWORDS = ["urgent", "asap", "immediately", "emergency", "critical"]

DEFAULT_RULES = [
    {
        "name": "urgent-high-priority",
        "priority": 90,
        "description": "Urgency keywords: high-priority task due today",
        "conditions": {"contains_priority_keywords": URGENT_KEYWORDS},
        "action": {
            "category": "task",
            "reason": "urgent_keywords",
            "priority": "high",
            "due_date": {"type": "relative", "value": "today"},
        },
    },
    {
        "name": "code-snippet-note",
        "priority": 85,
        "description": "Code blocks are kept as notes",
        "conditions": {"contains_code": True},
        "action": {"category": "note", "reason": "code_detected"},
    },
    {
        "name": "long-text-note",
        "priority": 82,
        "description": "Long captures read like notes, even when they mention a day",
        "conditions": {"is_long_text": True},
        "action": {"category": "note", "reason": "long_text"},
    },
    {
        "name": "today-tomorrow-tasks",
        "priority": 80,
        "description": "Imperative items mentioning today/tomorrow",
        "conditions": {
            "contains_keywords": ["today", "tomorrow"],
            "starts_with_verb": True,
        },
        "action": {
            "category": "task",
            "reason": "specific_time",
            "due_date": {"type": "extracted"},
        },
    },
    {
        "name": "bookmark-tag-note",
        "priority": 78,
        "description": "Items tagged #bookmark are filed as notes in their project",
        "conditions": {"has_tag": "bookmark", "has_project": True},
        "action": {"category": "note", "reason": "bookmark_tag"},
    },
    {
        "name": "url-bookmark-note",
        "priority": 75,
        "description": "Links become bookmarks, or project notes when a project is attached",
        "conditions": {"contains_url": True},
        "action": {
            "category": "bookmark",
            "reason": "url_detected",
            "tags": ["bookmark"],
        },
        "resolver": "bookmark",
    },
    {
        "name": "deadline-detection",
        "priority": 70,
        "description": "Date-like language: task with an extracted due date",
        "conditions": {"contains_time_reference": True},
        "action": {
            "category": "task",
            "reason": "deadline_detected",
            "due_date": {"type": "extracted"},
        },
    },
    {
        "name": "verb-with-project-task",
        "priority": 50,
        "description": "Imperative items attached to a project",
        "conditions": {"starts_with_verb": True, "has_project": True},
        "action": {"category": "task", "reason": "verb_detected"},
    },
    {
        "name": "question-note",
        "priority": 40,
        "description": "Questions are noted for later",
        "conditions": {"is_question": True},
        "action": {"category": "note", "reason": "question"},
    },
]
