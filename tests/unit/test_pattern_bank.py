"""
Unit tests for the regex pattern bank.
"""
import pytest

from spa_assistant.domain import patterns
from spa_assistant.domain.intents import IntentSource, IntentType


class TestAppointmentPatterns:
    """Cancel / complete / edit phrasing and captured fields."""

    def test_full_cancel_command(self):
        result = patterns.match("cancel appointment for John at 2:00 PM on August 19th")

        assert result.type == IntentType.CANCEL
        assert result.intent_name == "cancel_client_time_date"
        assert result.confidence == 1.0
        assert result.source == IntentSource.REGEX
        assert result.named_groups() == {
            "client_name": "John", "time": "2:00 PM", "date": "August 19th", "year": None,
        }

    def test_multi_word_client_and_year(self):
        result = patterns.match("Cancel the booking for Mary-Jane O'Neil at 10am on Sept 3rd 2026")

        groups = result.named_groups()
        assert groups["client_name"] == "Mary-Jane O'Neil"
        assert groups["time"] == "10am"
        assert groups["date"] == "Sept 3rd"
        assert groups["year"] == "2026"

    def test_client_before_keyword_variant(self):
        result = patterns.match("cancel Jane appointment at 4:30 pm on August 20th")

        assert result.intent_name == "cancel_client_keyword_time_date"
        assert result.confidence == 0.9
        assert result.named_groups()["client_name"] == "Jane"

    @pytest.mark.parametrize("text,name,confidence", [
        ("cancel appointment for John at 2:00 PM", "cancel_client_time", 0.7),
        ("cancel appointment for John on August 19th", "cancel_client_on_date", 0.6),
        ("cancel appointment for John August 19th", "cancel_client_date", 0.55),
        ("cancel appointment for John", "cancel_client_only", 0.5),
    ])
    def test_partial_cancel_commands_go_general_last(self, text, name, confidence):
        result = patterns.match(text)

        assert result.intent_name == name
        assert result.confidence == confidence
        assert result.named_groups()["client_name"] == "John"

    @pytest.mark.parametrize("text,name,groups", [
        ("cancel appointment John at 2pm", "cancel_client_time", ("John", "2pm")),
        ("cancel appointment John at 2:00 PM on August 19th", "cancel_client_time_date",
         ("John", "2:00 PM", "August 19th", None)),
        ("complete the booking Maria August 22nd", "complete_client_date", ("Maria", "August 22nd", None)),
        ("change appointment Sarah", "edit_client_only", ("Sarah",)),
    ])
    def test_for_is_optional_before_client(self, text, name, groups):
        result = patterns.match(text)

        assert result.intent_name == name
        assert result.captured_groups == groups

    def test_time_clause_is_not_a_client_name(self):
        assert patterns.match("cancel appointment on August 19th") is None

    def test_military_time(self):
        result = patterns.match("remove appointment for Ann at 17:30 hours on May 2nd")

        assert result.type == IntentType.CANCEL
        assert result.named_groups()["time"] == "17:30 hours"

    def test_complete_and_edit_families(self):
        complete = patterns.match("complete appointment for John at 2:00 PM on August 19th")
        edit = patterns.match("change appointment for Sarah at 3:00 PM on August 21st")

        assert complete.type == IntentType.COMPLETE
        assert edit.type == IntentType.EDIT
        assert edit.named_groups()["client_name"] == "Sarah"


class TestOtherPatterns:
    """Booking, queries, help and how-to."""

    def test_booking_with_client(self):
        result = patterns.match("book an appointment for Jane")

        assert result.type == IntentType.BOOK_APPOINTMENT
        assert result.named_groups()["client_name"] == "Jane"

    def test_booking_question_falls_to_how_to(self):
        result = patterns.match("How do I book an appointment?")

        assert result.type == IntentType.HOW_TO_GENERAL
        assert result.named_groups()["action"] == "book"

    @pytest.mark.parametrize("text,day", [
        ("show appointments for today", "today"),
        ("show me my appointments for tomorrow", "tomorrow"),
        ("view the schedule on August 20th", "August 20th"),
        ("check my calendar", None),
    ])
    def test_show_appointments(self, text, day):
        result = patterns.match(text)

        assert result.type == IntentType.SHOW_APPOINTMENTS
        assert result.named_groups()["day"] == day

    @pytest.mark.parametrize("text", ["help", "Help me please", "what can you do?"])
    def test_help(self, text):
        assert patterns.match(text).type == IntentType.HELP_GENERAL

    def test_unrelated_text_has_no_match(self):
        assert patterns.match("Hello there") is None


class TestExpensePatterns:
    """Expense edit / add / delete."""

    def test_edit_with_date_and_value(self):
        result = patterns.match("change expense for office supplies on March 5th to $45")

        assert result.type == IntentType.EDIT_EXPENSE
        assert result.named_groups() == {
            "description": "office supplies", "date": "March 5th", "year": None, "new_value": "$45",
        }

    def test_edit_without_date(self):
        result = patterns.match("update the expense for towels to 52.50")

        assert result.named_groups()["description"] == "towels"
        assert result.named_groups()["date"] is None
        assert result.named_groups()["new_value"] == "52.50"

    def test_edit_without_value(self):
        result = patterns.match("edit expense for towels")

        assert result.intent_name == "edit_expense_no_value"
        assert "new_value" not in result.named_groups()

    def test_add_expense(self):
        assert patterns.match("add a new expense").type == IntentType.ADD_EXPENSE

    def test_delete_with_date_wins_over_plain_delete(self):
        result = patterns.match("delete expense for office supplies on March 5th")

        assert result.intent_name == "delete_expense_with_date"
        assert result.named_groups()["description"] == "office supplies"
        assert result.named_groups()["date"] == "March 5th"

    def test_plain_delete(self):
        result = patterns.match("remove the expense for towels")

        assert result.intent_name == "delete_expense"
        assert result.named_groups()["description"] == "towels"


class TestBankOrdering:
    def test_bank_order_follows_tiers(self):
        types = [entry.intent_type for entry in patterns.PATTERN_BANK]
        first_index = {t: types.index(t) for t in set(types)}

        assert first_index[IntentType.CANCEL] < first_index[IntentType.BOOK_APPOINTMENT]
        assert first_index[IntentType.BOOK_APPOINTMENT] < first_index[IntentType.SHOW_APPOINTMENTS]
        assert first_index[IntentType.SHOW_APPOINTMENTS] < first_index[IntentType.HELP_GENERAL]
        assert first_index[IntentType.HELP_GENERAL] < first_index[IntentType.HOW_TO_GENERAL]
        assert first_index[IntentType.HOW_TO_GENERAL] < first_index[IntentType.EDIT_EXPENSE]
        assert first_index[IntentType.EDIT_EXPENSE] < first_index[IntentType.ADD_EXPENSE]
        assert first_index[IntentType.ADD_EXPENSE] < first_index[IntentType.DELETE_EXPENSE]

    def test_group_names_match_regex_groups(self):
        for entry in patterns.PATTERN_BANK:
            assert entry.compiled.groups == len(entry.groups), entry.name
