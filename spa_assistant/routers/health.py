"""Health endpoint for deployment platforms."""
from fastapi import APIRouter

from spa_assistant.utils.time import iso_utc

router = APIRouter()


@router.get("/health")
async def health():
    """Simple liveness check - always returns ok if service is running."""
    return {"status": "ok", "ts": iso_utc()}
