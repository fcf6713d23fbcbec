"""Domain layer: the declarative regex pattern bank.

Entries are built from shared fragments so each optional clause is written
once. Order matters: the first entry whose regex matches wins, and within a
family the more specific wording comes first because the client-name capture
is greedy.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from spa_assistant.domain.intents import IntentResult, IntentSource, IntentType

# Shared fragments
CLIENT_NAME = r"([a-zA-Z0-9\-'\s]+)"
TIME = r"(\d{1,2}(?::\d{2})?\s*(?:a\.?m\.?|p\.?m\.?)|\d{1,2}(?::?\d{2})?\s*hours?)"
DATE = r"([a-zA-Z]+\s+\d+(?:st|nd|rd|th)?)"
YEAR = r"(?:,?\s+(\d{4}))?"
OPTIONAL_THE = r"(?:the\s+)?"
APPOINTMENT_KEYWORD = r"(?:appointment|booking)"
DAY = r"(today|tomorrow|[a-zA-Z]+\s+\d+(?:st|nd|rd|th)?)"
END = r"\s*[.!?]?\s*$"

CANCEL_VERBS = r"(?:cancel|delete|remove)"
COMPLETE_VERBS = r"(?:complete|finish)"
EDIT_VERBS = r"(?:change|edit|modify|update)"


@dataclass(frozen=True)
class PatternEntry:
    name: str
    intent_type: str
    confidence: float
    regex: str
    groups: Tuple[str, ...] = ()
    compiled: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "compiled", re.compile(self.regex, re.IGNORECASE))


def _appointment_family(prefix: str, verbs: str, intent_type: str) -> List[PatternEntry]:
    """Appointment patterns for one verb family, most specific first."""
    # "for" is optional but the name may not start with the at/on clause
    lead = rf"\b{verbs}\s+{OPTIONAL_THE}{APPOINTMENT_KEYWORD}\s+(?:for\s+)?(?!\s*(?:at|on)\b){CLIENT_NAME}"
    return [
        PatternEntry(
            f"{prefix}_client_time_date", intent_type, 1.0,
            rf"{lead}\s+at\s+{TIME}\s+on\s+{DATE}{YEAR}",
            ("client_name", "time", "date", "year"),
        ),
        PatternEntry(
            f"{prefix}_client_keyword_time_date", intent_type, 0.9,
            rf"\b{verbs}\s+{OPTIONAL_THE}{CLIENT_NAME}\s+{APPOINTMENT_KEYWORD}\s+at\s+{TIME}\s+on\s+{DATE}{YEAR}",
            ("client_name", "time", "date", "year"),
        ),
        PatternEntry(
            f"{prefix}_client_time", intent_type, 0.7,
            rf"{lead}\s+at\s+{TIME}{END}",
            ("client_name", "time"),
        ),
        PatternEntry(
            f"{prefix}_client_on_date", intent_type, 0.6,
            rf"{lead}\s+on\s+{DATE}{YEAR}{END}",
            ("client_name", "date", "year"),
        ),
        PatternEntry(
            f"{prefix}_client_date", intent_type, 0.55,
            rf"{lead}\s+{DATE}{YEAR}{END}",
            ("client_name", "date", "year"),
        ),
        PatternEntry(
            f"{prefix}_client_only", intent_type, 0.5,
            rf"{lead}{END}",
            ("client_name",),
        ),
    ]


APPOINTMENT_PATTERNS = (
    _appointment_family("cancel", CANCEL_VERBS, IntentType.CANCEL)
    + _appointment_family("complete", COMPLETE_VERBS, IntentType.COMPLETE)
    + _appointment_family("edit", EDIT_VERBS, IntentType.EDIT)
)

# Anchored so questions like "how do I book ..." fall through to the how-to tier
REQUEST_LEAD = r"^\s*(?:please\s+|(?:can|could)\s+you\s+|i\s+(?:want|need|would\s+like)\s+to\s+|let's\s+)?"

BOOKING_PATTERNS = [
    PatternEntry(
        "book_for_client", IntentType.BOOK_APPOINTMENT, 0.9,
        REQUEST_LEAD + r"(?:book|schedule|create|make|set\s+up)\s+(?:(?:a|an|new|another)\s+)*"
        rf"(?:appointment|booking|session|massage|facial|combo)\s+for\s+{CLIENT_NAME}",
        ("client_name",),
    ),
    PatternEntry(
        "book_generic", IntentType.BOOK_APPOINTMENT, 0.8,
        REQUEST_LEAD + r"(?:book|schedule|create|make|set\s+up)\s+(?:(?:a|an|new|another)\s+)*"
        r"(?:appointment|booking|session|massage|facial|combo)\b",
    ),
]

QUERY_PATTERNS = [
    PatternEntry(
        "show_appointments", IntentType.SHOW_APPOINTMENTS, 0.8,
        r"\b(?:show|view|see|display|check|list)\s+(?:me\s+)?(?:my\s+|the\s+|all\s+)?"
        rf"(?:appointments|bookings|schedule|calendar)(?:\s+(?:for\s+|on\s+)?{DAY})?",
        ("day",),
    ),
    PatternEntry(
        "what_appointments", IntentType.SHOW_APPOINTMENTS, 0.8,
        r"\bwhat\s+(?:appointments|bookings)\s+(?:do\s+(?:i|we)\s+have|are\s+there)"
        rf"(?:\s+(?:for\s+|on\s+)?{DAY})?",
        ("day",),
    ),
    PatternEntry(
        "whats_on_schedule", IntentType.SHOW_APPOINTMENTS, 0.75,
        rf"\bwhat(?:'s|\s+is)\s+on\s+(?:my\s+|the\s+)?(?:schedule|calendar)(?:\s+(?:for\s+|on\s+)?{DAY})?",
        ("day",),
    ),
]

HELP_PATTERNS = [
    PatternEntry("help_keyword", IntentType.HELP_GENERAL, 0.9, r"^\s*help\b"),
    PatternEntry(
        "what_can_you_do", IntentType.HELP_GENERAL, 0.9,
        r"\bwhat\s+(?:can|do)\s+you\s+(?:do|help\s+with)\b",
    ),
    PatternEntry(
        "how_does_this_work", IntentType.HELP_GENERAL, 0.85,
        r"\bhow\s+(?:does\s+this|do\s+you)\s+work\b",
    ),
]

HOW_TO_PATTERNS = [
    PatternEntry(
        "how_to_action", IntentType.HOW_TO_GENERAL, 0.8,
        r"\bhow\s+(?:do|can|would|should)\s+i\s+"
        r"(book|schedule|cancel|complete|finish|change|edit|update|delete|remove|add|view|see)\b",
        ("action",),
    ),
]

EXPENSE_EDIT_PATTERNS = [
    PatternEntry(
        "edit_expense_value", IntentType.EDIT_EXPENSE, 0.9,
        rf"\b{EDIT_VERBS}\s+{OPTIONAL_THE}expense\s+(?:for\s+)?(.+?)(?:\s+on\s+{DATE}{YEAR})?\s+to\s+(.+?){END}",
        ("description", "date", "year", "new_value"),
    ),
    PatternEntry(
        "edit_expense_no_value", IntentType.EDIT_EXPENSE, 0.7,
        rf"\b{EDIT_VERBS}\s+{OPTIONAL_THE}expense\s+(?:for\s+)?(.+?)(?:\s+on\s+{DATE}{YEAR})?{END}",
        ("description", "date", "year"),
    ),
]

EXPENSE_ADD_PATTERNS = [
    PatternEntry(
        "add_expense", IntentType.ADD_EXPENSE, 0.8,
        REQUEST_LEAD + r"(?:add|create|enter|log|record)\s+(?:(?:a|an|new|another)\s+)*expense\b",
    ),
]

EXPENSE_DELETE_PATTERNS = [
    PatternEntry(
        "delete_expense_with_date", IntentType.DELETE_EXPENSE, 0.9,
        rf"\b(?:delete|remove|cancel)\s+{OPTIONAL_THE}expense\s+(?:for\s+)?(.+?)\s+on\s+{DATE}{YEAR}{END}",
        ("description", "date", "year"),
    ),
    PatternEntry(
        "delete_expense", IntentType.DELETE_EXPENSE, 0.7,
        rf"\b(?:delete|remove|cancel)\s+{OPTIONAL_THE}expense\s+(?:for\s+)?(.+?){END}",
        ("description",),
    ),
]

# Bank order is the precedence order
PATTERN_BANK: List[PatternEntry] = (
    APPOINTMENT_PATTERNS
    + BOOKING_PATTERNS
    + QUERY_PATTERNS
    + HELP_PATTERNS
    + HOW_TO_PATTERNS
    + EXPENSE_EDIT_PATTERNS
    + EXPENSE_ADD_PATTERNS
    + EXPENSE_DELETE_PATTERNS
)


def match(text: str, bank: Optional[List[PatternEntry]] = None) -> Optional[IntentResult]:
    """First matching entry as an IntentResult, or None."""
    for entry in bank if bank is not None else PATTERN_BANK:
        found = entry.compiled.search(text)
        if found:
            return IntentResult(
                intent_name=entry.name,
                type=entry.intent_type,
                confidence=entry.confidence,
                captured_groups=found.groups() if entry.groups else None,
                source=IntentSource.REGEX,
                group_names=entry.groups,
            )
    return None
