"""Messaging router - Conversations, messages and the live message stream"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session
from ...database import SessionLocal, get_db
from .broker import MessageBroker, get_message_broker
from .schemas import ConversationResponse, ConversationStart, MessageCreate, MessageResponse
from .service import MessagingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["Messaging"])

KEEP_ALIVE_SECONDS = 15


def get_messaging_service(
    db: Session = Depends(get_db),
    broker: MessageBroker = Depends(get_message_broker),
) -> MessagingService:
    """Dependency injection for MessagingService"""
    return MessagingService(db, broker)


def format_snapshot(messages) -> str:
    payload = [MessageResponse.from_model(m).model_dump(mode="json") for m in messages]
    return f"event: snapshot\ndata: {json.dumps(payload)}\n\n"


# ============================================================================
# CONVERSATIONS
# ============================================================================


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    session: AuthSession = Depends(get_current_session),
    service: MessagingService = Depends(get_messaging_service),
):
    """Conversations of the signed-in user, most recently active first"""
    return [
        ConversationResponse.for_viewer(c, session.uid)
        for c in service.list_conversations(session)
    ]


@router.post("", response_model=ConversationResponse)
async def start_conversation(
    data: ConversationStart,
    session: AuthSession = Depends(get_current_session),
    service: MessagingService = Depends(get_messaging_service),
):
    """Open the conversation with a provider (or client), creating it if needed"""
    conversation = service.start_conversation(data, session)
    return ConversationResponse.for_viewer(conversation, session.uid)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: str,
    session: AuthSession = Depends(get_current_session),
    service: MessagingService = Depends(get_messaging_service),
):
    conversation = service.get_conversation(conversation_id, session)
    return ConversationResponse.for_viewer(conversation, session.uid)


# ============================================================================
# MESSAGES
# ============================================================================


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: str,
    session: AuthSession = Depends(get_current_session),
    service: MessagingService = Depends(get_messaging_service),
):
    return [MessageResponse.from_model(m) for m in service.list_messages(conversation_id, session)]


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    conversation_id: str,
    data: MessageCreate,
    session: AuthSession = Depends(get_current_session),
    service: MessagingService = Depends(get_messaging_service),
):
    return MessageResponse.from_model(service.send_message(conversation_id, data.text, session))


@router.post("/{conversation_id}/read")
async def mark_conversation_read(
    conversation_id: str,
    session: AuthSession = Depends(get_current_session),
    service: MessagingService = Depends(get_messaging_service),
):
    updated = service.mark_conversation_read(conversation_id, session)
    return {"updated": updated}


@router.get("/{conversation_id}/stream")
async def stream_messages(
    conversation_id: str,
    request: Request,
    session: AuthSession = Depends(get_current_session),
    service: MessagingService = Depends(get_messaging_service),
    broker: MessageBroker = Depends(get_message_broker),
):
    """
    Server-Sent Events feed of the conversation.

    Sends the full ordered message list as a ``snapshot`` event on connect and
    again after every change, until the client disconnects.
    """
    initial = format_snapshot(service.open_stream(conversation_id, session))

    async def event_stream():
        queue = broker.subscribe(conversation_id)
        db = SessionLocal()
        stream_service = MessagingService(db, broker)
        logger.info(f"📡 Stream opened: conversation {conversation_id} by {session.uid}")
        try:
            yield initial
            while not await request.is_disconnected():
                try:
                    await asyncio.wait_for(queue.get(), timeout=KEEP_ALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield format_snapshot(stream_service.snapshot(conversation_id))
        finally:
            broker.unsubscribe(conversation_id, queue)
            db.close()
            logger.info(f"📴 Stream closed: conversation {conversation_id}")

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


__all__ = ["router", "format_snapshot"]
