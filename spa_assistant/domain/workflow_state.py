"""Domain layer: conversation state and the pending workflow records.

A conversation holds exactly one workflow value, so two workflows can never
be pending at once.
"""
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional, Union

from spa_assistant.domain.intents import IntentType
from spa_assistant.schemas import Appointment, Expense


class CancelStep(IntEnum):
    VALIDATE = 0
    AWAIT_CONFIRM = 1
    EXECUTING = 2


class CompleteStep(IntEnum):
    VALIDATE = 0
    COLLECT_TIP = 1
    AWAIT_CONFIRM = 2
    EXECUTING = 3


class EditStep(IntEnum):
    VALIDATE = 0
    COLLECT_CATEGORY = 1
    COLLECT_REASON = 2
    AWAIT_CONFIRM = 3
    EXECUTING = 4


class ExpenseStep(IntEnum):
    VALIDATE = 0
    AWAIT_CONFIRM = 1
    EXECUTING = 2


@dataclass(frozen=True)
class AppointmentCriteria:
    """What the user typed to identify an appointment."""
    client_name: str
    time: str
    date: str
    year: Optional[str] = None

    def describe(self) -> str:
        when = f"{self.date} {self.year}" if self.year else self.date
        return f"{self.client_name} at {self.time} on {when}"


@dataclass(frozen=True)
class ExpenseCriteria:
    description: str
    date: Optional[str] = None
    year: Optional[str] = None
    date_text: Optional[str] = None


@dataclass(frozen=True)
class Idle:
    kind = None
    step = 0


@dataclass(frozen=True)
class PendingCancellation:
    criteria: AppointmentCriteria
    appointment: Appointment
    step: CancelStep = CancelStep.AWAIT_CONFIRM
    kind = IntentType.CANCEL


@dataclass(frozen=True)
class PendingCompletion:
    criteria: AppointmentCriteria
    appointment: Appointment
    step: CompleteStep = CompleteStep.COLLECT_TIP
    tip: Optional[float] = None
    kind = IntentType.COMPLETE


@dataclass(frozen=True)
class PendingEdit:
    criteria: AppointmentCriteria
    appointment: Appointment
    step: EditStep = EditStep.COLLECT_CATEGORY
    new_category: Optional[str] = None
    new_payment: Optional[float] = None
    reason: Optional[str] = None
    kind = IntentType.EDIT


@dataclass(frozen=True)
class PendingExpenseEdit:
    criteria: ExpenseCriteria
    expense: Expense
    new_amount: float
    step: ExpenseStep = ExpenseStep.AWAIT_CONFIRM
    kind = IntentType.EDIT_EXPENSE


@dataclass(frozen=True)
class PendingExpenseDelete:
    criteria: ExpenseCriteria
    expense: Expense
    step: ExpenseStep = ExpenseStep.AWAIT_CONFIRM
    kind = IntentType.DELETE_EXPENSE


Workflow = Union[
    Idle,
    PendingCancellation,
    PendingCompletion,
    PendingEdit,
    PendingExpenseEdit,
    PendingExpenseDelete,
]

IDLE = Idle()


@dataclass(frozen=True)
class ConversationState:
    workflow: Workflow = IDLE

    @property
    def is_idle(self) -> bool:
        return isinstance(self.workflow, Idle)

    def with_workflow(self, workflow: Workflow) -> "ConversationState":
        return replace(self, workflow=workflow)

    def reset(self) -> "ConversationState":
        return replace(self, workflow=IDLE)

    def _pending(self, cls):
        return self.workflow if isinstance(self.workflow, cls) else None

    @property
    def pending_cancellation(self) -> Optional[PendingCancellation]:
        return self._pending(PendingCancellation)

    @property
    def pending_completion(self) -> Optional[PendingCompletion]:
        return self._pending(PendingCompletion)

    @property
    def pending_edit(self) -> Optional[PendingEdit]:
        return self._pending(PendingEdit)

    @property
    def pending_expense_edit(self) -> Optional[PendingExpenseEdit]:
        return self._pending(PendingExpenseEdit)

    @property
    def pending_expense_delete(self) -> Optional[PendingExpenseDelete]:
        return self._pending(PendingExpenseDelete)
