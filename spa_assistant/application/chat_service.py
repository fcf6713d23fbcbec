"""Application layer: chat sessions tying transcript, state and processor together."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from spa_assistant.application.command_processor import DialogueProcessor
from spa_assistant.domain.effects import BotMessage, NavigateAfter
from spa_assistant.domain.transcript import WELCOME_MESSAGE, ChatMessage
from spa_assistant.infrastructure.sessions import ChatSession, SessionRepository

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    pass


class TurnInProgressError(Exception):
    """A message arrived while the previous turn of the same session was still running."""


@dataclass
class ChatTurn:
    session_id: str
    user_message: ChatMessage
    bot_messages: List[ChatMessage] = field(default_factory=list)
    navigation: List[NavigateAfter] = field(default_factory=list)
    workflow: Optional[str] = None


class ChatService:
    def __init__(self, processor: DialogueProcessor, sessions: SessionRepository):
        self.processor = processor
        self.sessions = sessions

    def start_session(self) -> ChatSession:
        session = self.sessions.create()
        session.transcript.add_bot(WELCOME_MESSAGE)
        logger.info(f"💬 chat session started: {session.session_id}")
        return session

    def get_session(self, session_id: str) -> ChatSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def end_session(self, session_id: str) -> None:
        if not self.sessions.delete(session_id):
            raise SessionNotFoundError(session_id)
        logger.info(f"💬 chat session ended: {session_id}")

    async def send(self, session_id: str, text: str) -> ChatTurn:
        session = self.get_session(session_id)
        # One turn at a time per session so two workflows never race for the state slot
        if session.lock.locked():
            raise TurnInProgressError(session_id)
        async with session.lock:
            user_message = session.transcript.add_user(text)
            result = await self.processor.process_turn(session.state, text)
            session.state = result.state
            bot_messages = [
                session.transcript.add_bot(effect.text)
                for effect in result.effects if isinstance(effect, BotMessage)
            ]
            return ChatTurn(
                session_id=session_id,
                user_message=user_message,
                bot_messages=bot_messages,
                navigation=result.navigations,
                workflow=session.state.workflow.kind,
            )
