"""Shared FastAPI dependencies (auth, service access).

Routers depend on these instead of importing singletons directly so tests can
swap them through app.dependency_overrides.
"""
import os

from fastapi import Header, HTTPException

from spa_assistant import services
from spa_assistant.application.chat_service import ChatService
from spa_assistant.application.training import ClassifierEvaluator
from spa_assistant.config import get_settings


def get_chat_service() -> ChatService:
    return services.chat_service


def get_classifier_evaluator() -> ClassifierEvaluator:
    return services.classifier_evaluator


def require_admin_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> bool:
    """Simple header-based admin key guard.

    Development fallback: if no key set and environment is non-production,
    allow requests to ease local iteration.
    """
    settings = get_settings()
    # Re-read raw env for key to avoid stale cache during tests
    key = os.getenv("ADMIN_API_KEY") or settings.admin_api_key
    if not key and settings.environment not in ("production", "staging"):
        return True
    if not key:
        raise HTTPException(status_code=503, detail="Admin API key not configured")
    if not x_api_key or x_api_key != key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return True
