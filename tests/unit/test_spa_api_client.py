"""
Unit tests for the spa API client and HTTP repositories.
"""
import pytest
import requests
from unittest.mock import MagicMock, patch

from spa_assistant.application.command_processor import DialogueProcessor
from spa_assistant.application.handlers import APPOINTMENT_SEARCH_ERROR, CHECKING_APPOINTMENT
from spa_assistant.config import Settings
from spa_assistant.domain.workflow_state import ConversationState
from spa_assistant.infrastructure.errors import (
    DEFAULT_VALIDATION_MESSAGE, SpaApiError, SpaApiTimeoutError, SpaApiValidationError,
)
from spa_assistant.infrastructure.repositories import (
    MALFORMED_RESPONSE, HttpAppointmentRepository, HttpExpenseRepository, SpaApiClient,
)

REQUEST = "spa_assistant.infrastructure.repositories.requests.request"


def make_response(status_code=200, body=None, content=b"x"):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def client():
    return SpaApiClient("http://spa.test/api/", timeout=3)


class TestAppointmentRepository:

    @pytest.mark.asyncio
    async def test_search_sends_filters_and_parses(self, client):
        body = [{"id": 7, "client": "John", "time": "2:00 PM", "date": "2025-08-19T00:00:00",
                 "category": "Facial", "payment": None, "status": "pending", "extra": "ignored"}]
        with patch(REQUEST, return_value=make_response(body=body)) as mock_request:
            results = await HttpAppointmentRepository(client).search(
                "John", "2:00 PM", "August 19th", year="2025", completed=False,
            )

        mock_request.assert_called_once_with(
            "GET", "http://spa.test/api/appointments/search",
            params={"clientName": "John", "time": "2:00 PM", "date": "August 19th",
                    "year": "2025", "completed": "false"},
            json=None, timeout=3,
        )
        assert results[0].id == 7
        assert results[0].payment == 0.0
        assert results[0].iso_date == "2025-08-19"

    @pytest.mark.asyncio
    async def test_complete_patches_tip(self, client):
        with patch(REQUEST, return_value=make_response(status_code=204, content=b"")) as mock_request:
            await HttpAppointmentRepository(client).complete(7, 12.5)

        args, kwargs = mock_request.call_args
        assert args == ("PATCH", "http://spa.test/api/appointments/7/complete")
        assert kwargs["json"] == {"tip": 12.5}

    @pytest.mark.asyncio
    async def test_update_puts_changes(self, client):
        with patch(REQUEST, return_value=make_response(body={"ok": True})) as mock_request:
            await HttpAppointmentRepository(client).update(7, {"category": "Massage", "payment": 120.0})

        args, kwargs = mock_request.call_args
        assert args[0] == "PUT"
        assert kwargs["json"] == {"category": "Massage", "payment": 120.0}


class TestExpenseRepository:

    @pytest.mark.asyncio
    async def test_search_omits_empty_filters(self, client):
        body = [{"id": 3, "description": "Towels", "amount": "45.00", "date": "2025-03-07", "category_id": 1}]
        with patch(REQUEST, return_value=make_response(body=body)) as mock_request:
            results = await HttpExpenseRepository(client).search("towels")

        assert mock_request.call_args.kwargs["params"] == {"description": "towels"}
        assert results[0].amount == 45.0

    @pytest.mark.asyncio
    async def test_delete(self, client):
        with patch(REQUEST, return_value=make_response(status_code=200, content=b"")) as mock_request:
            await HttpExpenseRepository(client).delete(3)

        assert mock_request.call_args.args == ("DELETE", "http://spa.test/api/expenses/3")


class TestErrorMapping:
    """HTTP failures become SpaApiError subclasses."""

    @pytest.mark.asyncio
    async def test_400_message_is_kept(self, client):
        body = {"error": "date_parsing_failed", "message": "Could not parse date", "originalDate": "Aug 99"}
        with patch(REQUEST, return_value=make_response(status_code=400, body=body)):
            with pytest.raises(SpaApiValidationError) as exc:
                await client.request("GET", "/appointments/search")

        assert exc.value.message == "Could not parse date"

    @pytest.mark.asyncio
    async def test_400_without_json_uses_default(self, client):
        with patch(REQUEST, return_value=make_response(status_code=400, body=ValueError("no json"))):
            with pytest.raises(SpaApiValidationError) as exc:
                await client.request("GET", "/appointments/search")

        assert exc.value.message == DEFAULT_VALIDATION_MESSAGE

    @pytest.mark.asyncio
    async def test_server_error(self, client):
        with patch(REQUEST, return_value=make_response(status_code=503, body={})):
            with pytest.raises(SpaApiError) as exc:
                await client.request("DELETE", "/expenses/1")

        assert exc.value.status_code == 503
        assert not isinstance(exc.value, SpaApiValidationError)

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        with patch(REQUEST, side_effect=requests.exceptions.Timeout("slow")):
            with pytest.raises(SpaApiTimeoutError):
                await client.request("GET", "/expenses/search")

    @pytest.mark.asyncio
    async def test_connection_error(self, client):
        with patch(REQUEST, side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(SpaApiError) as exc:
                await client.request("GET", "/expenses/search")

        assert not isinstance(exc.value, SpaApiTimeoutError)


class TestMalformedSearchResponses:
    """Search payloads of the wrong shape surface as SpaApiError."""

    @pytest.mark.asyncio
    async def test_appointment_missing_fields(self, client):
        with patch(REQUEST, return_value=make_response(body=[{"id": 1, "time": "2:00 PM"}])):
            with pytest.raises(SpaApiError) as exc:
                await HttpAppointmentRepository(client).search("John", "2:00 PM", "August 19th")

        assert exc.value.message == MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_expense_object_instead_of_list(self, client):
        with patch(REQUEST, return_value=make_response(body={"description": "Towels"})):
            with pytest.raises(SpaApiError) as exc:
                await HttpExpenseRepository(client).search("towels")

        assert exc.value.message == MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_empty_body_is_no_results(self, client):
        with patch(REQUEST, return_value=make_response(content=b"")):
            assert await HttpExpenseRepository(client).search("towels") == []

    @pytest.mark.asyncio
    async def test_bad_payload_becomes_chat_reply(self, client):
        processor = DialogueProcessor(
            HttpAppointmentRepository(client), HttpExpenseRepository(client), settings=Settings(),
        )
        with patch(REQUEST, return_value=make_response(body=[{"id": 1, "time": "2:00 PM"}])):
            result = await processor.process_turn(
                ConversationState(), "cancel appointment for John at 2:00 PM on August 19th",
            )

        assert result.messages == [CHECKING_APPOINTMENT, APPOINTMENT_SEARCH_ERROR]
        assert result.state.is_idle
