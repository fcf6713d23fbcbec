"""Domain layer: effects a dialogue turn asks the host to perform."""
from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class BotMessage:
    """A line the assistant says in the chat."""
    text: str


@dataclass(frozen=True)
class NavigateAfter:
    """Navigate the host UI to url once delay_seconds have passed."""
    delay_seconds: float
    url: str


Effect = Union[BotMessage, NavigateAfter]


@dataclass
class TurnResult:
    """New conversation state plus the effects produced by one turn."""
    state: "ConversationState"  # noqa: F821
    effects: List[Effect] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [e.text for e in self.effects if isinstance(e, BotMessage)]

    @property
    def navigations(self) -> List[NavigateAfter]:
        return [e for e in self.effects if isinstance(e, NavigateAfter)]

    @property
    def last_message(self) -> Optional[str]:
        messages = self.messages
        return messages[-1] if messages else None


def say(*texts: str) -> List[Effect]:
    return [BotMessage(text) for text in texts]
