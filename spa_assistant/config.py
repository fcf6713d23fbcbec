"""Configuration module centralizing environment access.

A Settings object instead of ad-hoc os.getenv calls scattered through the
executors and routers.
"""
import os
from typing import Optional


def _float_env(name: str, default: str) -> float:
    return float(os.getenv(name, default))


class Settings:
    def __init__(self) -> None:
        # Core
        inferred_testing = (
            os.getenv("PYTEST_CURRENT_TEST")
            or os.getenv("ENVIRONMENT") == "testing"
            or os.getenv("TESTING") == "1"
        )
        self.environment: str = "testing" if inferred_testing else os.getenv("ENVIRONMENT", "development")
        self.port: int = int(os.getenv("PORT", "8000"))

        # Remote spa API
        self.spa_api_base_url: str = os.getenv("SPA_API_BASE_URL", "http://localhost:5000/api").rstrip("/")
        self.spa_api_timeout_seconds: float = _float_env("SPA_API_TIMEOUT_SECONDS", "10")

        # Dialogue pacing
        self.appointment_redirect_delay_seconds: float = _float_env("APPOINTMENT_REDIRECT_DELAY_SECONDS", "2.5")
        self.expense_redirect_delay_seconds: float = _float_env("EXPENSE_REDIRECT_DELAY_SECONDS", "1.5")
        self.navigation_delay_seconds: float = _float_env("NAVIGATION_DELAY_SECONDS", "1.5")

        # Chat sessions idle longer than this are discarded
        self.session_idle_timeout_seconds: float = _float_env("SESSION_IDLE_TIMEOUT_SECONDS", "3600")

        # Intents below this confidence never start a workflow
        self.min_workflow_confidence: float = _float_env("MIN_WORKFLOW_CONFIDENCE", "0.5")

        # Local calendar used for "today"/"tomorrow" and year inference
        self.spa_timezone: str = os.getenv("SPA_TIMEZONE", "America/New_York")

        # Admin protection for diagnostic endpoints
        self.admin_api_key: Optional[str] = os.getenv("ADMIN_API_KEY")


_SETTINGS_CACHE: Optional[Settings] = None


def get_settings(refresh: bool = False) -> Settings:
    """Return a (possibly cached) Settings instance.

    Pass refresh=True (or set env FORCE_SETTINGS_REFRESH=1) in tests after
    modifying environment variables to force re-evaluation.
    """
    global _SETTINGS_CACHE
    if refresh or os.getenv("FORCE_SETTINGS_REFRESH") == "1" or _SETTINGS_CACHE is None:
        _SETTINGS_CACHE = Settings()
    return _SETTINGS_CACHE
