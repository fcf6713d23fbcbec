"""Domain layer: the append-only chat transcript."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple

from spa_assistant.utils.time import utc_now

USER = "user"
BOT = "bot"

WELCOME_MESSAGE = (
    "Hi! I'm your spa assistant. I can help you manage appointments and expenses. "
    "Type your requests directly. For example: "
    "\"cancel appointment for test at 2:00 PM on August 19th\""
)


@dataclass(frozen=True)
class ChatMessage:
    id: int
    role: str
    text: str
    timestamp: datetime


class Transcript:
    """Messages in the order they were said; nothing is ever edited or removed."""

    def __init__(self):
        self._messages: List[ChatMessage] = []

    def append(self, role: str, text: str) -> ChatMessage:
        if role not in (USER, BOT):
            raise ValueError(f"Unknown role: {role}")
        message = ChatMessage(id=len(self._messages) + 1, role=role, text=text, timestamp=utc_now())
        self._messages.append(message)
        return message

    def add_user(self, text: str) -> ChatMessage:
        return self.append(USER, text)

    def add_bot(self, text: str) -> ChatMessage:
        return self.append(BOT, text)

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
