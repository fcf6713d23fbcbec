"""
Spa assistant chat service.
FastAPI app exposing the intent-classification and dialogue engine over HTTP.
"""
import logging
from fastapi import FastAPI

from spa_assistant.config import get_settings
from spa_assistant.routers import all_routers

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Spa Assistant",
    description="Chat assistant for managing spa appointments and expenses",
    version="1.0.0",
)

for router in all_routers:
    app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": "Spa Assistant",
        "description": "Typed commands for appointments and expenses",
        "version": "1.0.0",
        "environment": settings.environment,
    }


if __name__ == "__main__":
    import uvicorn
    logger.info(f"🚀 Starting Spa Assistant on port {settings.port}")
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
