"""Infrastructure layer: Repository interfaces and spa API implementations."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel, ValidationError

from spa_assistant.infrastructure.errors import (
    SpaApiError, SpaApiTimeoutError, SpaApiValidationError,
)
from spa_assistant.schemas import Appointment, Expense

logger = logging.getLogger(__name__)

EntityId = Union[int, str]
MALFORMED_RESPONSE = "Malformed spa API response"


class AppointmentRepository(ABC):
    """Repository interface for appointment operations."""

    @abstractmethod
    async def search(self, client_name: str, time: str, date: str, year: Optional[str] = None,
                     completed: Optional[bool] = None, status: Optional[str] = None) -> List[Appointment]:
        """Find appointments matching client/time/date."""
        pass

    @abstractmethod
    async def delete(self, appointment_id: EntityId) -> None:
        """Cancel (delete) an appointment."""
        pass

    @abstractmethod
    async def complete(self, appointment_id: EntityId, tip: float) -> None:
        """Mark an appointment completed with a tip."""
        pass

    @abstractmethod
    async def update(self, appointment_id: EntityId, changes: Dict[str, Any]) -> None:
        """Update appointment fields."""
        pass


class ExpenseRepository(ABC):
    """Repository interface for expense operations."""

    @abstractmethod
    async def search(self, description: str, date: Optional[str] = None,
                     year: Optional[str] = None) -> List[Expense]:
        """Find expenses whose description matches."""
        pass

    @abstractmethod
    async def update_amount(self, expense_id: EntityId, amount: float) -> None:
        """Change the amount of an expense."""
        pass

    @abstractmethod
    async def delete(self, expense_id: EntityId) -> None:
        """Delete an expense."""
        pass


class SpaApiClient:
    """Thin JSON-over-HTTP client for the spa backend."""

    def __init__(self, base_url: str, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        logger.info(f"🔧 SpaApiClient initialized: {self.base_url} (timeout {self.timeout}s)")

    async def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                      json_body: Optional[Dict[str, Any]] = None) -> Any:
        # requests is blocking; keep the event loop free while it runs
        return await asyncio.to_thread(self._send, method, path, params, json_body)

    def _send(self, method: str, path: str, params: Optional[Dict[str, Any]],
              json_body: Optional[Dict[str, Any]]) -> Any:
        url = f"{self.base_url}{path}"
        logger.info(f"[SPA_API] {method} {path}")
        logger.debug(f"[SPA_API] params={params} body={json_body}")
        try:
            response = requests.request(method, url, params=params, json=json_body, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error(f"[SPA_API] timeout after {self.timeout}s: {method} {path}")
            raise SpaApiTimeoutError(f"Timed out calling {method} {path}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"[SPA_API] request failed: {method} {path}: {e}")
            raise SpaApiError(f"Could not reach spa API: {e}") from e

        if response.status_code == 400:
            message = None
            try:
                body = response.json()
                if isinstance(body, dict):
                    message = body.get("message")
            except ValueError:
                pass
            logger.warning(f"[SPA_API] validation error on {method} {path}: {message}")
            raise SpaApiValidationError(message)
        if response.status_code >= 300:
            logger.error(f"[SPA_API] {method} {path} -> {response.status_code}")
            raise SpaApiError(f"Spa API returned {response.status_code}", status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None


def parse_search_results(model: type, data: Any, path: str) -> List[BaseModel]:
    """Validate a search payload into models; a wrong shape is a remote failure."""
    if data is None:
        return []
    if not isinstance(data, list):
        logger.error(f"[SPA_API] {path} returned {type(data).__name__}, expected a list")
        raise SpaApiError(MALFORMED_RESPONSE)
    try:
        return [model.model_validate(item) for item in data]
    except ValidationError as e:
        logger.error(f"[SPA_API] {path} returned invalid {model.__name__} data: {e.error_count()} errors")
        raise SpaApiError(MALFORMED_RESPONSE) from e


class HttpAppointmentRepository(AppointmentRepository):
    """Spa API implementation of AppointmentRepository."""

    def __init__(self, client: SpaApiClient):
        self.client = client

    async def search(self, client_name: str, time: str, date: str, year: Optional[str] = None,
                     completed: Optional[bool] = None, status: Optional[str] = None) -> List[Appointment]:
        params: Dict[str, Any] = {"clientName": client_name, "time": time, "date": date}
        if year:
            params["year"] = year
        if completed is not None:
            params["completed"] = "true" if completed else "false"
        if status:
            params["status"] = status
        data = await self.client.request("GET", "/appointments/search", params=params)
        return parse_search_results(Appointment, data, "/appointments/search")

    async def delete(self, appointment_id: EntityId) -> None:
        await self.client.request("DELETE", f"/appointments/{appointment_id}")

    async def complete(self, appointment_id: EntityId, tip: float) -> None:
        await self.client.request("PATCH", f"/appointments/{appointment_id}/complete", json_body={"tip": tip})

    async def update(self, appointment_id: EntityId, changes: Dict[str, Any]) -> None:
        await self.client.request("PUT", f"/appointments/{appointment_id}", json_body=changes)


class HttpExpenseRepository(ExpenseRepository):
    """Spa API implementation of ExpenseRepository."""

    def __init__(self, client: SpaApiClient):
        self.client = client

    async def search(self, description: str, date: Optional[str] = None,
                     year: Optional[str] = None) -> List[Expense]:
        params: Dict[str, Any] = {"description": description}
        if date:
            params["date"] = date
        if year:
            params["year"] = year
        data = await self.client.request("GET", "/expenses/search", params=params)
        return parse_search_results(Expense, data, "/expenses/search")

    async def update_amount(self, expense_id: EntityId, amount: float) -> None:
        await self.client.request("PUT", f"/expenses/{expense_id}", json_body={"amount": amount})

    async def delete(self, expense_id: EntityId) -> None:
        await self.client.request("DELETE", f"/expenses/{expense_id}")
