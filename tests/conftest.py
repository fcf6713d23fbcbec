"""
Pytest configuration and shared fixtures for Spa Assistant tests.
"""
import pytest
from typing import Any, Dict, List, Optional
from fastapi.testclient import TestClient

from spa_assistant.application.chat_service import ChatService
from spa_assistant.application.command_processor import DialogueProcessor
from spa_assistant.config import Settings
from spa_assistant.dependencies import get_chat_service
from spa_assistant.domain.workflow_state import ConversationState
from spa_assistant.infrastructure.repositories import AppointmentRepository, ExpenseRepository
from spa_assistant.infrastructure.sessions import InMemorySessionRepository
from spa_assistant.schemas import Appointment, Expense
from main import app


class FakeAppointmentRepository(AppointmentRepository):
    """In-memory stand-in for the spa API that records every call."""

    def __init__(self, appointments: Optional[List[Appointment]] = None):
        self.appointments = list(appointments or [])
        self.search_calls: List[Dict[str, Any]] = []
        self.deleted: List[Any] = []
        self.completed: List[Dict[str, Any]] = []
        self.updates: List[Dict[str, Any]] = []
        self.search_error: Optional[Exception] = None
        self.mutation_error: Optional[Exception] = None

    async def search(self, client_name, time, date, year=None, completed=None, status=None):
        self.search_calls.append({
            "client_name": client_name, "time": time, "date": date,
            "year": year, "completed": completed, "status": status,
        })
        if self.search_error:
            raise self.search_error
        return [
            a for a in self.appointments
            if a.client.lower() == client_name.lower() and a.time == time
            and (completed is None or (a.status == "completed") == completed)
            and (status is None or a.status == status)
        ]

    async def delete(self, appointment_id):
        if self.mutation_error:
            raise self.mutation_error
        self.deleted.append(appointment_id)

    async def complete(self, appointment_id, tip):
        if self.mutation_error:
            raise self.mutation_error
        self.completed.append({"id": appointment_id, "tip": tip})

    async def update(self, appointment_id, changes):
        if self.mutation_error:
            raise self.mutation_error
        self.updates.append({"id": appointment_id, **changes})


class FakeExpenseRepository(ExpenseRepository):
    def __init__(self, expenses: Optional[List[Expense]] = None):
        self.expenses = list(expenses or [])
        self.search_calls: List[Dict[str, Any]] = []
        self.amount_updates: List[Dict[str, Any]] = []
        self.deleted: List[Any] = []
        self.search_error: Optional[Exception] = None

    async def search(self, description, date=None, year=None):
        self.search_calls.append({"description": description, "date": date, "year": year})
        if self.search_error:
            raise self.search_error
        return [
            e for e in self.expenses
            if description.lower() in e.description.lower()
            and (date is None or e.iso_date == date)
        ]

    async def update_amount(self, expense_id, amount):
        self.amount_updates.append({"id": expense_id, "amount": amount})

    async def delete(self, expense_id):
        self.deleted.append(expense_id)


def make_appointment(**overrides) -> Appointment:
    data = {
        "id": 1,
        "client": "John",
        "time": "2:00 PM",
        "date": "2025-08-19",
        "category": "Facial",
        "payment": 100.0,
        "tip": None,
        "status": "pending",
    }
    data.update(overrides)
    return Appointment(**data)


def make_expense(**overrides) -> Expense:
    data = {
        "id": 10,
        "description": "Office supplies",
        "amount": 30.0,
        "date": "2025-03-05",
        "category_id": 2,
    }
    data.update(overrides)
    return Expense(**data)


def pending_count(state: ConversationState) -> int:
    """How many pending workflow records are set; never more than one."""
    return sum(
        record is not None for record in (
            state.pending_cancellation,
            state.pending_completion,
            state.pending_edit,
            state.pending_expense_edit,
            state.pending_expense_delete,
        )
    )


@pytest.fixture
def settings():
    """Settings with the defaults used across tests."""
    return Settings()


@pytest.fixture
def appointment_repo():
    return FakeAppointmentRepository([
        make_appointment(),
        make_appointment(id=2, client="Sarah", time="3:00 PM", date="2025-08-21"),
        make_appointment(id=3, client="Maria", time="11:00 AM", date="2025-08-22",
                         category="Massage", payment=120.0),
    ])


@pytest.fixture
def expense_repo():
    return FakeExpenseRepository([
        make_expense(),
        make_expense(id=11, description="Towels", amount=45.0, date="2025-03-07"),
        make_expense(id=12, description="Towels", amount=52.0, date="2025-04-02"),
    ])


@pytest.fixture
def processor(appointment_repo, expense_repo, settings):
    return DialogueProcessor(appointment_repo, expense_repo, settings=settings)


@pytest.fixture
def chat_service(processor):
    return ChatService(processor, InMemorySessionRepository())


@pytest.fixture(scope="function")
def test_client(chat_service):
    """Create a test client with the chat service overridden to use fakes."""
    app.dependency_overrides[get_chat_service] = lambda: chat_service

    with TestClient(app) as client:
        yield client

    # Clean up
    app.dependency_overrides.clear()


async def run_turns(processor: DialogueProcessor, *texts: str, state: Optional[ConversationState] = None):
    """Feed several user turns through the processor; returns every TurnResult."""
    state = state or ConversationState()
    results = []
    for text in texts:
        result = await processor.process_turn(state, text)
        assert pending_count(result.state) <= 1
        results.append(result)
        state = result.state
    return results
