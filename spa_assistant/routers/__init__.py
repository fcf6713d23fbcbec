"""Aggregate FastAPI routers for inclusion in the application."""
from . import admin, chat, health

all_routers = [
    chat.router,
    admin.router,
    health.router,
]
