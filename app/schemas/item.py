"""Placeholder item schemas (sources, styles, scenarios)."""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict

from app.schemas.common import CamelModel


class ItemCreate(CamelModel):
    """Schema for creating an item. The client may choose the id."""

    id: Optional[str] = None
    name: str
    type: str = "text"
    selected: bool = True
    content: str = ""
    loading: bool = False
    video_url: Optional[str] = None


class ItemUpdate(CamelModel):
    """Partial update; only the fields sent are written."""

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    selected: Optional[bool] = None
    content: Optional[str] = None
    loading: Optional[bool] = None
    video_url: Optional[str] = None


class ItemResponse(CamelModel):
    """Item as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    selected: bool
    content: str
    loading: bool
    video_url: Optional[str] = None
    created_at: Optional[datetime] = None
