"""Application layer: turn captured pattern groups into search criteria."""
from datetime import date
from typing import Optional

from spa_assistant.domain.intents import IntentResult
from spa_assistant.domain.validation import (
    validate_client_name, validate_date_format, validate_time_format,
)
from spa_assistant.domain.workflow_state import AppointmentCriteria, ExpenseCriteria
from spa_assistant.utils.time import parse_natural_language_date, standardize_time_for_backend


def appointment_criteria(intent: IntentResult) -> Optional[AppointmentCriteria]:
    """Criteria for an appointment search, or None when client/time/date are not all present."""
    groups = intent.named_groups()
    client_name = groups.get("client_name")
    time_text = groups.get("time")
    date_text = groups.get("date")
    if not (validate_client_name(client_name) and validate_time_format(time_text)
            and validate_date_format(date_text)):
        return None
    return AppointmentCriteria(
        client_name=" ".join(client_name.split()),
        time=standardize_time_for_backend(time_text),
        date=date_text,
        year=groups.get("year") or None,
    )


def expense_criteria(intent: IntentResult, today: date) -> Optional[ExpenseCriteria]:
    """Criteria for an expense search. Raises ValueError when a typed date is not a real date."""
    groups = intent.named_groups()
    description = groups.get("description")
    if not description:
        return None
    date_text = groups.get("date")
    year = groups.get("year") or None
    iso_date = None
    if date_text:
        # Expenses are recorded after the fact, so never roll the year forward
        iso_date = parse_natural_language_date(date_text, year, today=today, prefer_future=False)
    return ExpenseCriteria(
        description=description,
        date=iso_date,
        year=year,
        date_text=date_text,
    )


def requested_value(intent: IntentResult) -> Optional[str]:
    return intent.named_groups().get("new_value")
