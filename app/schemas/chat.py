"""Chat schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from app.schemas.common import CamelModel, ChatTurn, Material


class ChatMessageCreate(CamelModel):
    """Schema for storing a chat message."""

    role: str
    content: str


class ChatMessageResponse(CamelModel):
    """Stored chat message."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    role: str
    content: str
    created_at: Optional[datetime] = None


class ChatRequest(CamelModel):
    """Streaming chat request."""

    messages: List[ChatTurn]
    sources: List[Material] = Field(default_factory=list)
