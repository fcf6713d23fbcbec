"""Application layer: the dialogue processor that runs one chat turn."""
import logging
import re
from typing import Dict, Optional

from spa_assistant.application.handlers import (
    AddExpenseHandler, BookAppointmentHandler, CancelAppointmentExecutor,
    CompleteAppointmentExecutor, DeleteExpenseExecutor, EditAppointmentExecutor,
    EditExpenseExecutor, HelpHandler, HowToHandler, ShowAppointmentsHandler,
)
from spa_assistant.config import Settings, get_settings
from spa_assistant.domain.commands import IntentHandler, WorkflowExecutor
from spa_assistant.domain.effects import TurnResult, say
from spa_assistant.domain.intent_classifier import IntentClassifier, default_classifier
from spa_assistant.domain.intents import IntentType
from spa_assistant.domain.workflow_state import ConversationState
from spa_assistant.infrastructure.repositories import AppointmentRepository, ExpenseRepository

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Please type a message."
NOTHING_PENDING_MESSAGE = "I don't have any pending action to confirm. Please make a request first."
UNKNOWN_MESSAGE = "I'm sorry I didn't understand that request. I will perform no actions. Please try again."
ABORTED_MESSAGE = "Okay, I've cancelled that request. Nothing was changed."

_ESCAPE_RE = re.compile(
    r"^\s*(?:start\s+over|never\s*mind|stop(?:\s+talking)?|forget\s+it|quit)\s*[.!]*\s*$",
    re.IGNORECASE,
)
_BARE_CONFIRMATION_RE = re.compile(
    r"^\s*(?:yes|y|yeah|yep|yup|ok|okay|sure|confirm|no|n|nope|nah)\s*[.!]*\s*$",
    re.IGNORECASE,
)


def is_escape(text: str) -> bool:
    return bool(_ESCAPE_RE.match(text))


def is_bare_confirmation(text: str) -> bool:
    return bool(_BARE_CONFIRMATION_RE.match(text))


class DialogueProcessor:
    """Runs each turn: answer the pending workflow, otherwise classify and dispatch."""

    def __init__(self, appointments: AppointmentRepository, expenses: ExpenseRepository,
                 intent_classifier: Optional[IntentClassifier] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.intent_classifier = intent_classifier or default_classifier

        self.executors: Dict[str, WorkflowExecutor] = {
            IntentType.CANCEL: CancelAppointmentExecutor(appointments, self.settings),
            IntentType.COMPLETE: CompleteAppointmentExecutor(appointments, self.settings),
            IntentType.EDIT: EditAppointmentExecutor(appointments, self.settings),
            IntentType.EDIT_EXPENSE: EditExpenseExecutor(expenses, self.settings),
            IntentType.DELETE_EXPENSE: DeleteExpenseExecutor(expenses, self.settings),
        }
        self.handlers: Dict[str, IntentHandler] = {
            IntentType.BOOK_APPOINTMENT: BookAppointmentHandler(self.settings),
            IntentType.ADD_EXPENSE: AddExpenseHandler(self.settings),
            IntentType.SHOW_APPOINTMENTS: ShowAppointmentsHandler(self.settings),
            IntentType.HELP_GENERAL: HelpHandler(),
            IntentType.HOW_TO_GENERAL: HowToHandler(),
        }

    async def process_turn(self, state: ConversationState, text: str) -> TurnResult:
        text = (text or "").strip()
        if not text:
            return TurnResult(state, say(EMPTY_INPUT_MESSAGE))

        if not state.is_idle:
            return await self._answer_pending(state, text)

        if is_bare_confirmation(text):
            return TurnResult(state, say(NOTHING_PENDING_MESSAGE))

        intent = self.intent_classifier.classify(text)
        logger.info(f"[DIALOGUE] '{text[:60]}' -> {intent.intent_name} via {intent.source}")

        if intent.starts_workflow:
            executor = self.executors[intent.type]
            if intent.confidence < self.settings.min_workflow_confidence or not intent.captured_groups:
                # Fuzzy tiers know the intent but not the details
                return TurnResult(state, say(executor.usage_message))
            return await executor.validate_and_respond(intent, state)

        handler = self.handlers.get(intent.type)
        if handler is None:
            return TurnResult(state, say(UNKNOWN_MESSAGE))
        return await handler.handle(intent, state)

    async def _answer_pending(self, state: ConversationState, text: str) -> TurnResult:
        workflow = state.workflow
        if is_escape(text):
            logger.info(f"[DIALOGUE] user abandoned {workflow.kind} at step {int(workflow.step)}")
            return TurnResult(state.reset(), say(ABORTED_MESSAGE))
        logger.info(f"[DIALOGUE] answering {workflow.kind} step {int(workflow.step)}")
        return await self.executors[workflow.kind].handle_answer(state, text)
