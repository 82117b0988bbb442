"""Placeholder item models (sources, styles, scenarios)."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Text

from app.database import Base


class ItemMixin:
    """Columns shared by every item collection."""

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default="text")  # 'video', 'file', 'scenario', ...
    selected = Column(Boolean, nullable=False, default=True)
    content = Column(Text, nullable=False, default="")
    loading = Column(Boolean, nullable=False, default=False)
    video_url = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)


class Source(ItemMixin, Base):
    """Reference material used for chat context and scenario generation."""

    __tablename__ = "sources"


class Style(ItemMixin, Base):
    """Style analysis of a creator or document."""

    __tablename__ = "styles"


class Scenario(ItemMixin, Base):
    """Generated video scenario."""

    __tablename__ = "scenarios"
