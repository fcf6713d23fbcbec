"""Domain layer: Command pattern for handling classified intents."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from spa_assistant.domain.effects import TurnResult
from spa_assistant.domain.intents import IntentResult
from spa_assistant.domain.workflow_state import ConversationState, Workflow


@dataclass
class ExecutionResult:
    success: bool
    message: str
    redirect_url: Optional[str] = None


class IntentHandler(ABC):
    """Handler interface for intents answered in a single turn."""

    @abstractmethod
    async def handle(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        """Respond to the intent."""
        pass


class WorkflowExecutor(ABC):
    """Executor interface for a multi-turn workflow family."""

    kind: str = ""

    @abstractmethod
    async def validate_and_respond(self, intent: IntentResult, state: ConversationState) -> TurnResult:
        """Look the target up remotely and, when found, open the workflow."""
        pass

    @abstractmethod
    async def handle_answer(self, state: ConversationState, text: str) -> TurnResult:
        """Treat text as the answer to the current step of the pending workflow."""
        pass

    @abstractmethod
    async def execute(self, record: Workflow) -> ExecutionResult:
        """Perform the confirmed mutation. Spa API errors propagate to the caller."""
        pass
