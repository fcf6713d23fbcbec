"""Application layer: workflow executors and single-turn intent handlers."""
import logging
from abc import abstractmethod
from dataclasses import replace
from datetime import timedelta
from typing import List, Optional, Tuple

from spa_assistant.application.extraction import (
    appointment_criteria, expense_criteria, requested_value,
)
from spa_assistant.config import Settings
from spa_assistant.domain.commands import ExecutionResult, IntentHandler, WorkflowExecutor
from spa_assistant.domain.effects import BotMessage, Effect, NavigateAfter, TurnResult, say
from spa_assistant.domain.intents import IntentResult, IntentType
from spa_assistant.domain.pricing import (
    USER_CATEGORIES, calculate_payment, translate_category_to_database, translate_category_to_user,
)
from spa_assistant.domain.validation import parse_dollar_amount, validate_tip_amount
from spa_assistant.domain.workflow_state import (
    AppointmentCriteria, CancelStep, CompleteStep, ConversationState, EditStep, ExpenseCriteria,
    ExpenseStep, PendingCancellation, PendingCompletion, PendingEdit, PendingExpenseDelete,
    PendingExpenseEdit,
)
from spa_assistant.infrastructure.errors import (
    SpaApiError, SpaApiTimeoutError, SpaApiValidationError,
)
from spa_assistant.infrastructure.repositories import AppointmentRepository, ExpenseRepository
from spa_assistant.schemas import Appointment, Expense
from spa_assistant.utils.time import local_today, parse_natural_language_date

logger = logging.getLogger(__name__)

YES_NO_PROMPT = "Please type 'yes' to confirm or 'no' to cancel."
CHECKING_APPOINTMENT = "Let me check if that appointment exists..."
TIMEOUT_MESSAGE = (
    "I'm having trouble reaching the spa system right now. "
    "Want to start over? Just send your request again."
)
APPOINTMENT_SEARCH_ERROR = (
    "Sorry, I encountered an error while checking for the appointment. Please try again."
)
EXPENSE_SEARCH_ERROR = (
    "Sorry, I encountered an error while looking up the expense. Please try again."
)
NO_REASON_WORDS = {"no", "none", "skip", "n/a", "na", "nothing"}


def parse_confirmation(text: str) -> Optional[bool]:
    """True for anything containing 'yes', False for anything containing 'no', else None."""
    lowered = text.lower()
    if "yes" in lowered:
        return True
    if "no" in lowered:
        return False
    return None


def describe_tip(tip: float) -> str:
    return "no tip" if tip == 0 else f"tip: ${tip:.2f}"


class BaseWorkflowExecutor(WorkflowExecutor):
    """Shared remote-error handling and yes/no confirmation for executors."""

    usage_message = ""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _remote_failure(self, state: ConversationState, error: SpaApiError, failure_message: str,
                        effects: Optional[List[Effect]] = None) -> TurnResult:
        if isinstance(error, SpaApiValidationError):
            text = error.message
        elif isinstance(error, SpaApiTimeoutError):
            text = TIMEOUT_MESSAGE
        else:
            text = failure_message
        logger.warning(f"[{self.kind.upper()}] spa API failure, clearing workflow: {error.message}")
        return TurnResult(state.reset(), list(effects or []) + say(text))

    def success_effects(self, record, result: ExecutionResult) -> List[Effect]:
        return []

    async def _confirm_step(self, state: ConversationState, record, text: str,
                            decline_message: str, failure_message: str) -> TurnResult:
        decision = parse_confirmation(text)
        if decision is None:
            return TurnResult(state, say(YES_NO_PROMPT))
        if not decision:
            logger.info(f"[{self.kind.upper()}] declined by user")
            return TurnResult(state.reset(), say(decline_message))
        try:
            result = await self.execute(record)
        except SpaApiError as e:
            return self._remote_failure(state, e, failure_message)
        logger.info(f"[{self.kind.upper()}] executed: {result.message}")
        return TurnResult(state.reset(), [BotMessage(result.message)] + self.success_effects(record, result))


class AppointmentWorkflowExecutor(BaseWorkflowExecutor):
    """Looks up one open appointment before opening its workflow."""

    search_filter: dict = {}
    not_found_message = (
        "Sorry, I couldn't find that appointment. "
        "It may have already been cancelled or doesn't exist."
    )

    def __init__(self, appointments: AppointmentRepository, settings: Settings):
        super().__init__(settings)
        self.appointments = appointments

    async def validate_and_respond(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        criteria = appointment_criteria(intent)
        if criteria is None:
            return TurnResult(state, say(self.usage_message))
        effects = say(CHECKING_APPOINTMENT)
        try:
            matches = await self.appointments.search(
                criteria.client_name, criteria.time, criteria.date, criteria.year,
                **self.search_filter,
            )
        except SpaApiError as e:
            return self._remote_failure(state, e, APPOINTMENT_SEARCH_ERROR, effects)
        if not matches:
            logger.info(f"[{self.kind.upper()}] no appointment for {criteria.describe()}")
            return TurnResult(state.reset(), effects + say(self.not_found_message))
        if len(matches) > 1:
            logger.info(f"[{self.kind.upper()}] {len(matches)} matches, using the first")
        return self.open_workflow(state, criteria, matches[0], effects)

    @abstractmethod
    def open_workflow(self, state: ConversationState, criteria: AppointmentCriteria,
                      appointment: Appointment, effects: List[Effect]) -> TurnResult:
        """Build the pending record for the matched appointment and ask the first question."""
        pass

    def success_effects(self, record, result: ExecutionResult) -> List[Effect]:
        return [
            BotMessage(f"Redirecting to appointments page for {record.criteria.date}..."),
            NavigateAfter(self.settings.appointment_redirect_delay_seconds, result.redirect_url),
        ]


class CancelAppointmentExecutor(AppointmentWorkflowExecutor):
    kind = IntentType.CANCEL
    search_filter = {"completed": False}
    usage_message = (
        "To cancel an appointment I need the client name, time and date. For example: "
        "\"cancel appointment for Jane at 2:00 PM on August 19th\""
    )

    def open_workflow(self, state, criteria, appointment, effects):
        record = PendingCancellation(criteria=criteria, appointment=appointment,
                                     step=CancelStep.AWAIT_CONFIRM)
        return TurnResult(
            state.with_workflow(record),
            effects + say(f"I found an appointment for {criteria.describe()}. Type 'yes' to cancel it."),
        )

    async def handle_answer(self, state: ConversationState, text: str) -> TurnResult:
        record = state.pending_cancellation
        return await self._confirm_step(
            state, replace(record, step=CancelStep.EXECUTING), text,
            "Okay, I won't cancel the appointment. Nothing was changed.",
            "Sorry, I encountered an error while cancelling the appointment. Please try again.",
        )

    async def execute(self, record: PendingCancellation) -> ExecutionResult:
        await self.appointments.delete(record.appointment.id)
        return ExecutionResult(
            success=True,
            message=f"I successfully cancelled the appointment for {record.criteria.describe()}.",
            redirect_url=f"/appointments?date={record.appointment.iso_date}",
        )


class CompleteAppointmentExecutor(AppointmentWorkflowExecutor):
    kind = IntentType.COMPLETE
    search_filter = {"status": "pending"}
    not_found_message = (
        "Sorry, I couldn't find an open appointment for that client at that time. "
        "It may have already been completed or doesn't exist."
    )
    usage_message = (
        "To complete an appointment I need the client name, time and date. For example: "
        "\"complete appointment for Jane at 2:00 PM on August 19th\""
    )

    def open_workflow(self, state, criteria, appointment, effects):
        record = PendingCompletion(criteria=criteria, appointment=appointment,
                                   step=CompleteStep.COLLECT_TIP)
        return TurnResult(
            state.with_workflow(record),
            effects + say(
                f"I found an appointment for {criteria.describe()}. To complete it, I need the tip amount:",
                "What was the tip amount? (You can say 0, none, or the dollar amount)",
            ),
        )

    async def handle_answer(self, state: ConversationState, text: str) -> TurnResult:
        record = state.pending_completion
        if record.step == CompleteStep.COLLECT_TIP:
            tip, error = validate_tip_amount(text)
            if error:
                return TurnResult(state, say(error))
            updated = replace(record, tip=tip, step=CompleteStep.AWAIT_CONFIRM)
            return TurnResult(
                state.with_workflow(updated),
                say(f"Perfect! I'll complete the appointment with {describe_tip(tip)}. Type 'yes' to confirm."),
            )
        return await self._confirm_step(
            state, replace(record, step=CompleteStep.EXECUTING), text,
            "Okay, I won't complete the appointment. Nothing was changed.",
            "Sorry, I encountered an error while completing the appointment. Please try again.",
        )

    async def execute(self, record: PendingCompletion) -> ExecutionResult:
        tip = record.tip or 0.0
        await self.appointments.complete(record.appointment.id, tip)
        tip_text = "no tip" if tip == 0 else f"a ${tip:.2f} tip"
        return ExecutionResult(
            success=True,
            message=f"I successfully completed the appointment for {record.criteria.describe()} with {tip_text}.",
            redirect_url=f"/appointments?date={record.appointment.iso_date}",
        )


class EditAppointmentExecutor(AppointmentWorkflowExecutor):
    kind = IntentType.EDIT
    search_filter = {"status": "pending"}
    not_found_message = (
        "Sorry, I couldn't find an open appointment for that client at that time. "
        "It may have already been completed or doesn't exist."
    )
    usage_message = (
        "To change an appointment I need the client name, time and date. For example: "
        "\"change appointment for Jane at 2:00 PM on August 19th\""
    )
    category_prompt = "What would you like to change it to? (facial, massage, or combo)"

    def open_workflow(self, state, criteria, appointment, effects):
        record = PendingEdit(criteria=criteria, appointment=appointment, step=EditStep.COLLECT_CATEGORY)
        current = translate_category_to_user(appointment.category or "unknown")
        return TurnResult(
            state.with_workflow(record),
            effects + say(
                f"I found an appointment for {criteria.describe()}. "
                f"It is currently a {current} (${appointment.payment:.2f}).",
                self.category_prompt,
            ),
        )

    async def handle_answer(self, state: ConversationState, text: str) -> TurnResult:
        record = state.pending_edit
        if record.step == EditStep.COLLECT_CATEGORY:
            return self._collect_category(state, record, text)
        if record.step == EditStep.COLLECT_REASON:
            reason = "" if text.strip().lower() in NO_REASON_WORDS else text.strip()
            updated = replace(record, reason=reason, step=EditStep.AWAIT_CONFIRM)
            old_category = translate_category_to_user(record.appointment.category or "unknown")
            new_category = translate_category_to_user(record.new_category)
            return TurnResult(
                state.with_workflow(updated),
                say(
                    f"Please confirm: change the appointment for {record.criteria.describe()} "
                    f"from {old_category} to {new_category}. The payment will change from "
                    f"${record.appointment.payment:.2f} to ${record.new_payment:.2f}. {YES_NO_PROMPT}"
                ),
            )
        return await self._confirm_step(
            state, replace(record, step=EditStep.EXECUTING), text,
            "Okay, I won't make any changes to the appointment.",
            "Sorry, I encountered an error while updating the appointment. Please try again.",
        )

    def _collect_category(self, state: ConversationState, record: PendingEdit, text: str) -> TurnResult:
        choice = text.strip().lower()
        if choice not in USER_CATEGORIES:
            return TurnResult(state, say(f"Please choose a valid category. {self.category_prompt}"))
        new_category = translate_category_to_database(choice)
        if new_category == record.appointment.category:
            return TurnResult(
                state,
                say(f"That appointment is already a {choice}. Please choose a different category: "
                    "facial, massage, or combo."),
            )
        updated = replace(
            record,
            new_category=new_category,
            new_payment=calculate_payment(new_category),
            step=EditStep.COLLECT_REASON,
        )
        return TurnResult(
            state.with_workflow(updated),
            say("What's the reason for this change? (Type 'no' or 'none' to skip)"),
        )

    async def execute(self, record: PendingEdit) -> ExecutionResult:
        await self.appointments.update(record.appointment.id, {
            "category": record.new_category,
            "payment": record.new_payment,
            "update_reason": record.reason or "Edited via ChatBot",
        })
        old_category = translate_category_to_user(record.appointment.category or "unknown")
        new_category = translate_category_to_user(record.new_category)
        return ExecutionResult(
            success=True,
            message=(
                f"I successfully updated the appointment for {record.criteria.client_name} "
                f"from {old_category} to {new_category}. "
                f"The payment has been updated to ${record.new_payment:.2f}."
            ),
            redirect_url=f"/appointments?date={record.appointment.iso_date}",
        )


class ExpenseWorkflowExecutor(BaseWorkflowExecutor):
    """Expense workflows only ever act on a single unambiguous match."""

    example_command = ""

    def __init__(self, expenses: ExpenseRepository, settings: Settings):
        super().__init__(settings)
        self.expenses = expenses

    async def _find_single(self, intent: IntentResult, state: ConversationState
                           ) -> Tuple[Optional[ExpenseCriteria], Optional[Expense], Optional[TurnResult]]:
        try:
            criteria = expense_criteria(intent, local_today(self.settings.spa_timezone))
        except ValueError:
            date_text = intent.named_groups().get("date")
            return None, None, TurnResult(
                state, say(f"I couldn't understand the date \"{date_text}\". Please use a date like \"March 5th\".")
            )
        if criteria is None:
            return None, None, TurnResult(state, say(self.usage_message))
        try:
            matches = await self.expenses.search(criteria.description, criteria.date, criteria.year)
        except SpaApiError as e:
            return None, None, self._remote_failure(state, e, EXPENSE_SEARCH_ERROR)
        if not matches:
            return None, None, TurnResult(
                state.reset(),
                say(f"Sorry, I couldn't find an expense matching \"{criteria.description}\"."),
            )
        if len(matches) > 1:
            logger.info(f"[{self.kind.upper()}] {len(matches)} expenses match '{criteria.description}'")
            return None, None, TurnResult(
                state.reset(),
                say(
                    f"I found {len(matches)} expenses matching \"{criteria.description}\". "
                    f"Please be more specific by including the date, for example: "
                    f"\"{self.example_command.format(description=criteria.description)}\""
                ),
            )
        return criteria, matches[0], None

    @staticmethod
    def describe(expense: Expense) -> str:
        return f"\"{expense.description}\" for ${expense.amount:.2f} on {expense.iso_date}"


class EditExpenseExecutor(ExpenseWorkflowExecutor):
    kind = IntentType.EDIT_EXPENSE
    usage_message = (
        "To change an expense tell me which one and the new amount. For example: "
        "\"change expense for office supplies on March 5th to $45\""
    )
    example_command = "change expense for {description} on March 5th to $50"

    async def validate_and_respond(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        criteria, expense, early = await self._find_single(intent, state)
        if early is not None:
            return early
        amount = parse_dollar_amount(requested_value(intent))
        if amount is None:
            # Only amounts are edited through chat; everything else goes to the inline editor
            return TurnResult(
                state.reset(),
                [
                    BotMessage(
                        f"I found the expense {self.describe(expense)}. I can only change amounts here, "
                        "so I'm opening it for you to edit directly..."
                    ),
                    NavigateAfter(self.settings.expense_redirect_delay_seconds,
                                  f"/expenses?expandExpense={expense.id}"),
                ],
            )
        record = PendingExpenseEdit(criteria=criteria, expense=expense, new_amount=amount,
                                    step=ExpenseStep.AWAIT_CONFIRM)
        return TurnResult(
            state.with_workflow(record),
            say(f"I found the expense {self.describe(expense)}. Change the amount to ${amount:.2f}? "
                f"{YES_NO_PROMPT}"),
        )

    async def handle_answer(self, state: ConversationState, text: str) -> TurnResult:
        record = state.pending_expense_edit
        return await self._confirm_step(
            state, replace(record, step=ExpenseStep.EXECUTING), text,
            "Okay, I won't make any changes to the expense.",
            "Sorry, I encountered an error while updating the expense. Please try again.",
        )

    async def execute(self, record: PendingExpenseEdit) -> ExecutionResult:
        await self.expenses.update_amount(record.expense.id, record.new_amount)
        return ExecutionResult(
            success=True,
            message=(f"I successfully updated the expense \"{record.expense.description}\" "
                     f"from ${record.expense.amount:.2f} to ${record.new_amount:.2f}."),
            redirect_url=f"/expenses?expandExpense={record.expense.id}",
        )

    def success_effects(self, record, result):
        return [NavigateAfter(self.settings.expense_redirect_delay_seconds, result.redirect_url)]


class DeleteExpenseExecutor(ExpenseWorkflowExecutor):
    kind = IntentType.DELETE_EXPENSE
    usage_message = (
        "To delete an expense tell me which one. For example: "
        "\"delete expense for office supplies on March 5th\""
    )
    example_command = "delete expense for {description} on March 5th"

    async def validate_and_respond(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        criteria, expense, early = await self._find_single(intent, state)
        if early is not None:
            return early
        record = PendingExpenseDelete(criteria=criteria, expense=expense, step=ExpenseStep.AWAIT_CONFIRM)
        return TurnResult(
            state.with_workflow(record),
            say(f"I found the expense {self.describe(expense)}. Type 'yes' to delete it."),
        )

    async def handle_answer(self, state: ConversationState, text: str) -> TurnResult:
        record = state.pending_expense_delete
        return await self._confirm_step(
            state, replace(record, step=ExpenseStep.EXECUTING), text,
            "Okay, I won't delete the expense.",
            "Sorry, I encountered an error while deleting the expense. Please try again.",
        )

    async def execute(self, record: PendingExpenseDelete) -> ExecutionResult:
        await self.expenses.delete(record.expense.id)
        year, month = record.expense.iso_date[:4], int(record.expense.iso_date[5:7])
        return ExecutionResult(
            success=True,
            message=f"I successfully deleted the expense \"{record.expense.description}\".",
            redirect_url=f"/expenses?expandYear={year}&expandMonth={month}",
        )

    def success_effects(self, record, result):
        return [NavigateAfter(self.settings.expense_redirect_delay_seconds, result.redirect_url)]


HELP_TEXT = (
    "I can help you with:\n"
    "• Cancelling appointments: \"cancel appointment for Jane at 2:00 PM on August 19th\"\n"
    "• Completing appointments with a tip: \"complete appointment for Jane at 2:00 PM on August 19th\"\n"
    "• Changing a service: \"change appointment for Jane at 2:00 PM on August 19th\"\n"
    "• Booking: \"book an appointment\"\n"
    "• Viewing the schedule: \"show appointments for today\"\n"
    "• Expenses: \"add an expense\", \"change expense for office supplies to $45\", "
    "\"delete expense for office supplies on March 5th\""
)

HOW_TO_BOOK = "To book, say \"book an appointment\" and I'll open the booking form."
HOW_TO_CANCEL = (
    "To cancel, say \"cancel appointment for <client> at <time> on <date>\", "
    "for example \"cancel appointment for Jane at 2:00 PM on August 19th\"."
)
HOW_TO_COMPLETE = (
    "To complete, say \"complete appointment for <client> at <time> on <date>\" and I'll ask for the tip."
)
HOW_TO_CHANGE = (
    "To change a service, say \"change appointment for <client> at <time> on <date>\". "
    "To change an expense amount, say \"change expense for <description> to $<amount>\"."
)
HOW_TO_DELETE = (
    "To delete an expense, say \"delete expense for <description> on <date>\". "
    "To cancel an appointment, say \"cancel appointment for <client> at <time> on <date>\"."
)
HOW_TO_VIEW = (
    "To see the schedule, say \"show appointments for today\" or \"show appointments for August 19th\"."
)

HOW_TO_TEXT = {
    "book": HOW_TO_BOOK,
    "schedule": HOW_TO_BOOK,
    "cancel": HOW_TO_CANCEL,
    "complete": HOW_TO_COMPLETE,
    "finish": HOW_TO_COMPLETE,
    "change": HOW_TO_CHANGE,
    "edit": HOW_TO_CHANGE,
    "update": HOW_TO_CHANGE,
    "delete": HOW_TO_DELETE,
    "remove": HOW_TO_DELETE,
    "add": "To add an expense, say \"add an expense\" and I'll open the expense form.",
    "view": HOW_TO_VIEW,
    "see": HOW_TO_VIEW,
}
GENERAL_HOW_TO = "Just type what you need in plain words. Type 'help' to see everything I can do."


class BookAppointmentHandler(IntentHandler):
    def __init__(self, settings: Settings):
        self.settings = settings

    async def handle(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        client = intent.named_groups().get("client_name")
        text = f"Opening the booking form for {client}..." if client else "Opening the booking form..."
        return TurnResult(state, [BotMessage(text), NavigateAfter(self.settings.navigation_delay_seconds, "/?book=true")])


class AddExpenseHandler(IntentHandler):
    def __init__(self, settings: Settings):
        self.settings = settings

    async def handle(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        return TurnResult(state, [
            BotMessage("Opening the expense form so you can add a new expense..."),
            NavigateAfter(self.settings.expense_redirect_delay_seconds, "/expenses?addExpense=true"),
        ])


class ShowAppointmentsHandler(IntentHandler):
    def __init__(self, settings: Settings):
        self.settings = settings

    def _resolve_day(self, day: Optional[str]) -> Optional[str]:
        if not day:
            return None
        today = local_today(self.settings.spa_timezone)
        lowered = day.lower()
        if lowered == "today":
            return today.isoformat()
        if lowered == "tomorrow":
            return (today + timedelta(days=1)).isoformat()
        try:
            return parse_natural_language_date(day, today=today)
        except ValueError:
            logger.info(f"[SHOW] ignoring unparseable day '{day}'")
            return None

    async def handle(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        day = intent.named_groups().get("day")
        iso_date = self._resolve_day(day)
        if iso_date:
            return TurnResult(state, [
                BotMessage(f"Showing appointments for {day}..."),
                NavigateAfter(self.settings.navigation_delay_seconds, f"/appointments?date={iso_date}"),
            ])
        return TurnResult(state, [
            BotMessage("Opening the appointments page..."),
            NavigateAfter(self.settings.navigation_delay_seconds, "/appointments"),
        ])


class HelpHandler(IntentHandler):
    async def handle(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        return TurnResult(state, say(HELP_TEXT))


class HowToHandler(IntentHandler):
    async def handle(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        action = (intent.named_groups().get("action") or "").lower()
        return TurnResult(state, say(HOW_TO_TEXT.get(action, GENERAL_HOW_TO)))
