"""Domain layer: keyword/feature heuristic scoring of free text.

The weights and thresholds below were tuned by hand against staff phrasing and
have not been validated beyond that. They live in HeuristicTuning so they can
be adjusted without touching the scoring code.
"""
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from spa_assistant.domain.intents import IntentType

VERBS = frozenset({
    "want", "need", "show", "see", "view", "display", "check", "get",
    "book", "create", "schedule", "make", "set", "arrange",
    "change", "modify", "edit", "alter", "update", "reschedule",
    "cancel", "delete", "remove", "call", "postpone",
    "complete", "finish", "done", "mark",
    "add", "enter", "log", "record", "input", "adjust",
})
NOUNS = frozenset({
    "appointment", "appointments", "booking", "bookings", "session", "sessions",
    "massage", "massages", "facial", "facials", "combo", "combos",
    "schedule", "schedules", "calendar", "calendars",
    "expense", "expenses", "cost", "costs", "bill", "bills",
    "payment", "payments", "charge", "charges",
})
TIME_WORDS = frozenset({
    "today", "tonight", "tomorrow", "yesterday", "morning", "afternoon",
    "evening", "night", "week", "month", "year", "now", "soon", "later",
})
QUESTION_WORDS = frozenset({"what", "when", "where", "who", "why", "how", "which"})
MONEY_WORDS = frozenset({"dollar", "dollars", "buck", "bucks", "cent", "cents", "$"})
_MONEY_RE = re.compile(r"\$\d+|\d+\.\d+")

APPOINTMENT_OBJECTS = (
    "appointment", "appointments", "booking", "bookings", "session", "sessions",
)
EXPENSE_OBJECTS = (
    "expense", "expenses", "cost", "costs", "bill", "bills",
    "payment", "payments", "charge", "charges",
)


@dataclass(frozen=True)
class IntentTemplate:
    name: str
    intent_type: str
    priority: int
    keywords: Tuple[str, ...]
    objects: Tuple[str, ...] = ()
    time_context: Tuple[str, ...] = ()
    threshold: float = 0.2


@dataclass(frozen=True)
class HeuristicTuning:
    keyword_weight: float = 0.4
    object_weight: float = 0.3
    time_context_bonus: float = 0.2
    time_word_bonus: float = 0.1
    money_bonus: float = 0.1
    what_question_boost: float = 0.5
    question_penalty: float = 0.4
    # Templates that questions are expected to hit, exempt from the penalty
    question_friendly: FrozenSet[str] = frozenset({"show_appointments", "how_to_questions"})
    what_boost_template: str = "show_appointments"


@dataclass(frozen=True)
class TextFeatures:
    words: Tuple[str, ...]
    verbs: Tuple[str, ...]
    nouns: Tuple[str, ...]
    time_words: Tuple[str, ...]
    question_words: Tuple[str, ...]
    money: Tuple[str, ...]
    text: str = ""


DEFAULT_TEMPLATES: List[IntentTemplate] = [
    IntentTemplate(
        "book_appointment", IntentType.BOOK_APPOINTMENT, 1,
        ("book", "create", "schedule", "make", "set", "arrange"),
        APPOINTMENT_OBJECTS + ("massage", "massages", "facial", "facials", "combo", "combos"),
    ),
    IntentTemplate(
        "add_expense", IntentType.ADD_EXPENSE, 1,
        ("add", "create", "enter", "log", "record", "input"),
        EXPENSE_OBJECTS,
    ),
    IntentTemplate(
        "change_appointment", IntentType.EDIT, 2,
        ("change", "modify", "edit", "alter", "update", "reschedule"),
        APPOINTMENT_OBJECTS,
    ),
    IntentTemplate(
        "change_expense", IntentType.EDIT_EXPENSE, 2,
        ("change", "modify", "edit", "alter", "update", "adjust"),
        EXPENSE_OBJECTS,
    ),
    IntentTemplate(
        "show_appointments", IntentType.SHOW_APPOINTMENTS, 3,
        ("show", "display", "view", "see", "check", "get"),
        ("appointment", "appointments", "schedule", "schedules",
         "calendar", "calendars", "booking", "bookings"),
        time_context=("today", "tonight", "tomorrow", "this week", "next week"),
    ),
    IntentTemplate(
        "cancel_appointment", IntentType.CANCEL, 4,
        ("cancel", "delete", "remove", "call", "postpone"),
        APPOINTMENT_OBJECTS,
    ),
    IntentTemplate(
        "delete_expense", IntentType.DELETE_EXPENSE, 4,
        ("delete", "remove", "erase", "cancel"),
        EXPENSE_OBJECTS,
    ),
    IntentTemplate(
        "complete_appointment", IntentType.COMPLETE, 5,
        ("complete", "finish", "done", "mark"),
        APPOINTMENT_OBJECTS,
    ),
    IntentTemplate(
        "help_general", IntentType.HELP_GENERAL, 10,
        ("help", "capabilities", "work"),
        threshold=0.3,
    ),
    IntentTemplate(
        "how_to_questions", IntentType.HOW_TO_GENERAL, 10,
        ("how", "what"),
        threshold=0.3,
    ),
]


def extract_features(text: str) -> TextFeatures:
    lowered = text.lower()
    words = tuple(lowered.split())
    return TextFeatures(
        words=words,
        verbs=tuple(w for w in words if w in VERBS),
        nouns=tuple(w for w in words if w in NOUNS),
        time_words=tuple(w for w in words if w in TIME_WORDS),
        question_words=tuple(w for w in words if w in QUESTION_WORDS),
        money=tuple(w for w in words if w in MONEY_WORDS or _MONEY_RE.search(w)),
        text=lowered,
    )


def count_keyword_matches(words: Tuple[str, ...], keywords: Tuple[str, ...]) -> int:
    """Keywords hit by any word, where containment in either direction counts."""
    return sum(
        1 for keyword in keywords
        if any(word in keyword or keyword in word for word in words)
    )


def score_template(template: IntentTemplate, features: TextFeatures,
                   tuning: HeuristicTuning) -> float:
    score = 0.0
    if template.keywords:
        ratio = count_keyword_matches(features.words, template.keywords) / len(template.keywords)
        score += ratio * tuning.keyword_weight
    if template.objects:
        ratio = count_keyword_matches(features.words, template.objects) / len(template.objects)
        score += ratio * tuning.object_weight
    if template.time_context and any(phrase in features.text for phrase in template.time_context):
        score += tuning.time_context_bonus
    if features.time_words:
        score += tuning.time_word_bonus
    if features.money:
        score += tuning.money_bonus

    if features.question_words:
        if template.name == tuning.what_boost_template and "what" in features.question_words:
            score += tuning.what_question_boost
        elif template.name not in tuning.question_friendly:
            score -= tuning.question_penalty
    return score


def has_overlap(template: IntentTemplate, features: TextFeatures) -> bool:
    return (
        count_keyword_matches(features.words, template.keywords) > 0
        or count_keyword_matches(features.words, template.objects) > 0
    )


def has_evidence(template: IntentTemplate, features: TextFeatures) -> bool:
    """Keyword, object or time-context overlap; the generic bonuses alone never qualify."""
    return has_overlap(template, features) or any(
        phrase in features.text for phrase in template.time_context
    )


def score_all(text: str, templates: Optional[List[IntentTemplate]] = None,
              tuning: Optional[HeuristicTuning] = None) -> Dict[str, float]:
    """Raw score per template name, useful for debugging classifications."""
    features = extract_features(text)
    tuning = tuning or HeuristicTuning()
    return {
        template.name: score_template(template, features, tuning)
        for template in (templates or DEFAULT_TEMPLATES)
    }


def best_template(text: str, templates: Optional[List[IntentTemplate]] = None,
                  tuning: Optional[HeuristicTuning] = None) -> Optional[Tuple[IntentTemplate, float]]:
    """Lowest priority number among qualifying templates, highest score breaks ties."""
    templates = templates or DEFAULT_TEMPLATES
    tuning = tuning or HeuristicTuning()
    features = extract_features(text)
    # Text that shares no keyword or object with any template is unknown
    if not any(has_overlap(template, features) for template in templates):
        return None
    qualifying = []
    for template in templates:
        if not has_evidence(template, features):
            continue
        score = score_template(template, features, tuning)
        if score >= template.threshold:
            qualifying.append((template, score))
    if not qualifying:
        return None
    qualifying.sort(key=lambda pair: (pair[0].priority, -pair[1]))
    return qualifying[0]
