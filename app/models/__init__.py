"""SQLAlchemy ORM models."""

from app.models.chat import ChatMessage
from app.models.item import Scenario, Source, Style
from app.models.job import Job

__all__ = [
    "ChatMessage",
    "Job",
    "Scenario",
    "Source",
    "Style",
]
