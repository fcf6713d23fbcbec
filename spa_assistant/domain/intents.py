"""Domain layer: intent classification results."""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


class IntentType:
    """Intent type tags shared by every classifier tier."""
    CANCEL = "cancel"
    COMPLETE = "complete"
    EDIT = "edit"
    EDIT_EXPENSE = "edit_expense"
    DELETE_EXPENSE = "delete_expense"
    BOOK_APPOINTMENT = "book_appointment"
    ADD_EXPENSE = "add_expense"
    SHOW_APPOINTMENTS = "show_appointments"
    HELP_GENERAL = "help_general"
    HOW_TO_GENERAL = "how_to_general"
    UNKNOWN = "unknown"


# Intent types that start a multi-turn workflow
WORKFLOW_TYPES = frozenset({
    IntentType.CANCEL,
    IntentType.COMPLETE,
    IntentType.EDIT,
    IntentType.EDIT_EXPENSE,
    IntentType.DELETE_EXPENSE,
})


class IntentSource:
    REGEX = "regex"
    SIMILARITY = "similarity"
    HEURISTIC = "heuristic"
    NONE = "none"


@dataclass(frozen=True)
class IntentResult:
    """Outcome of classifying one user turn."""
    intent_name: str
    type: str
    confidence: float
    captured_groups: Optional[Tuple[Optional[str], ...]] = None
    source: str = IntentSource.NONE
    group_names: Tuple[str, ...] = ()
    priority: Optional[int] = None

    @property
    def is_unknown(self) -> bool:
        return self.type == IntentType.UNKNOWN

    @property
    def starts_workflow(self) -> bool:
        return self.type in WORKFLOW_TYPES

    def named_groups(self) -> Dict[str, Optional[str]]:
        """Captured groups keyed by the field names the pattern declared."""
        if not self.captured_groups:
            return {}
        return {
            name: (value.strip() if isinstance(value, str) else value)
            for name, value in zip(self.group_names, self.captured_groups)
        }


UNKNOWN_INTENT = IntentResult(
    intent_name="unknown",
    type=IntentType.UNKNOWN,
    confidence=0.0,
    captured_groups=None,
    source=IntentSource.NONE,
)
