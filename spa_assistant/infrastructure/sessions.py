"""Infrastructure layer: in-memory chat session storage."""
import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

from spa_assistant.domain.transcript import Transcript
from spa_assistant.domain.workflow_state import ConversationState
from spa_assistant.utils.time import utc_now

logger = logging.getLogger(__name__)


@dataclass
class ChatSession:
    session_id: str
    state: ConversationState = field(default_factory=ConversationState)
    transcript: Transcript = field(default_factory=Transcript)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    created_at: datetime = field(default_factory=utc_now)
    last_active: datetime = field(default_factory=utc_now)


class SessionRepository(ABC):
    """Repository interface for chat sessions."""

    @abstractmethod
    def create(self) -> ChatSession:
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[ChatSession]:
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        pass


class InMemorySessionRepository(SessionRepository):
    """Sessions live only as long as the process.

    Sessions idle for longer than idle_timeout_seconds are dropped whenever a
    new one is created, so abandoned chats do not pile up.
    """

    def __init__(self, idle_timeout_seconds: float = 3600):
        self._sessions: Dict[str, ChatSession] = {}
        self.idle_timeout = timedelta(seconds=idle_timeout_seconds)

    def create(self) -> ChatSession:
        self.evict_idle()
        session = ChatSession(session_id=uuid.uuid4().hex)
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_active = utc_now()
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def evict_idle(self, now: Optional[datetime] = None) -> int:
        """Drop idle sessions that are not mid-turn; returns how many went."""
        cutoff = (now or utc_now()) - self.idle_timeout
        stale = [
            session_id for session_id, session in self._sessions.items()
            if session.last_active < cutoff and not session.lock.locked()
        ]
        for session_id in stale:
            del self._sessions[session_id]
        if stale:
            logger.info(f"🧹 evicted {len(stale)} idle chat session(s)")
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)
