"""Chat routes: stored history and streaming assistant replies."""

import json
import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.agents.scenario import format_materials
from app.config import settings
from app.database import get_db
from app.models.chat import ChatMessage
from app.schemas.chat import ChatMessageCreate, ChatMessageResponse, ChatRequest
from app.services.errors import JobError
from app.services.llm_client import LLMClient
from app.services.prompts import chat_system_prompt

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


def get_llm_client() -> LLMClient:
    """LLM client dependency."""
    return LLMClient()


@router.get("/chat-messages", response_model=List[ChatMessageResponse])
def list_chat_messages(db: Session = Depends(get_db)):
    """List the discussion history, oldest first."""
    return db.query(ChatMessage).order_by(ChatMessage.created_at.asc()).all()


@router.post("/chat-messages", response_model=ChatMessageResponse)
def create_chat_message(data: ChatMessageCreate, db: Session = Depends(get_db)):
    """Append a message to the discussion history."""
    message = ChatMessage(role=data.role, content=data.content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


@router.delete("/chat-messages")
def clear_chat_messages(db: Session = Depends(get_db)):
    """Delete the whole discussion history."""
    deleted = db.query(ChatMessage).delete()
    db.commit()
    logger.info(f"Deleted {deleted} chat messages")
    return {"success": True}


@router.post("/chat")
async def chat(data: ChatRequest, llm: LLMClient = Depends(get_llm_client)):
    """Stream an assistant reply as server-sent events."""
    messages = [{"role": "system", "content": chat_system_prompt(format_materials(data.sources))}]
    messages.extend({"role": m.role, "content": m.content} for m in data.messages)

    async def event_stream():
        try:
            async for chunk in llm.stream_chat_completion(settings.OPENROUTER_MODEL_CHAT, messages):
                yield f"data: {json.dumps({'content': chunk}, ensure_ascii=False)}\n\n"
        except JobError as e:
            logger.error(f"Streaming error: {e}")
            yield f"data: {json.dumps({'error': e.message}, ensure_ascii=False)}\n\n"
        yield "data: [DONE]\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
