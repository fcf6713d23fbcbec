"""Pydantic models for request/response bodies and spa API entities.

Adding explicit schemas improves validation, documentation and reduces
ad-hoc dict access complexity inside route handlers and executors.
"""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Union


class Appointment(BaseModel):
    """Appointment as returned by the spa API search endpoint."""
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    client: str
    time: str
    date: str
    category: Optional[str] = None
    payment: float = 0.0
    tip: Optional[float] = None
    status: Optional[str] = None

    @field_validator("payment", mode="before")
    @classmethod
    def default_payment(cls, v):
        return 0.0 if v is None else v

    @property
    def iso_date(self) -> str:
        """Date portion only, whether the API sent '2025-08-19' or a full timestamp."""
        return self.date[:10]


class Expense(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    description: str
    amount: float
    date: str
    category_id: Optional[Union[int, str]] = None
    category_name: Optional[str] = None

    @property
    def iso_date(self) -> str:
        return self.date[:10]


class ChatRequest(BaseModel):
    text: str = Field(..., max_length=1000)

    @field_validator("text")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message text must not be empty")
        return v


class ChatMessageOut(BaseModel):
    id: int
    role: str
    text: str
    timestamp: datetime


class NavigationOut(BaseModel):
    url: str
    delay_seconds: float


class ChatTurnResponse(BaseModel):
    session_id: str
    messages: List[ChatMessageOut] = Field(default_factory=list)
    navigation: List[NavigationOut] = Field(default_factory=list)
    workflow: Optional[str] = None


class SessionCreatedResponse(BaseModel):
    session_id: str
    messages: List[ChatMessageOut] = Field(default_factory=list)


class TranscriptResponse(BaseModel):
    session_id: str
    messages: List[ChatMessageOut] = Field(default_factory=list)
