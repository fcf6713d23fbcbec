"""Service singletons (initialized once) used across routers.

This avoids circular imports between routers and keeps construction logic
away from `main.py` for cleaner testing.
"""
import logging

from spa_assistant.application.chat_service import ChatService
from spa_assistant.application.command_processor import DialogueProcessor
from spa_assistant.application.training import ClassifierEvaluator
from spa_assistant.config import get_settings
from spa_assistant.domain.intent_classifier import default_classifier
from spa_assistant.infrastructure.repositories import (
    HttpAppointmentRepository, HttpExpenseRepository, SpaApiClient,
)
from spa_assistant.infrastructure.sessions import InMemorySessionRepository

settings = get_settings()
logger = logging.getLogger(__name__)

spa_api_client = SpaApiClient(settings.spa_api_base_url, timeout=settings.spa_api_timeout_seconds)
appointment_repository = HttpAppointmentRepository(spa_api_client)
expense_repository = HttpExpenseRepository(spa_api_client)

dialogue_processor = DialogueProcessor(
    appointments=appointment_repository,
    expenses=expense_repository,
    intent_classifier=default_classifier,
    settings=settings,
)
chat_service = ChatService(
    dialogue_processor, InMemorySessionRepository(settings.session_idle_timeout_seconds),
)
classifier_evaluator = ClassifierEvaluator(default_classifier)
logger.info(f"🤖 Dialogue processor ready (spa API: {settings.spa_api_base_url})")
