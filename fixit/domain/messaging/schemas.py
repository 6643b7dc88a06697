"""Messaging domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...models import Conversation, Message


class ConversationStart(BaseModel):
    """A client names the provider, a provider names the client"""

    providerId: Optional[str] = None
    clientId: Optional[str] = None

    @model_validator(mode="after")
    def check_counterpart(self):
        if not self.providerId and not self.clientId:
            raise ValueError("providerId or clientId is required")
        return self


class MessageCreate(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Message cannot be empty")
        if len(v) > 5000:
            raise ValueError("Message exceeds maximum length of 5000 characters")
        return v


class MessageResponse(BaseModel):
    id: str
    conversationId: str
    senderId: str
    senderName: Optional[str] = None
    senderType: str
    text: str
    createdAt: datetime
    read: bool

    @classmethod
    def from_model(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            conversationId=message.conversation_id,
            senderId=message.sender_id,
            senderName=message.sender_name,
            senderType=message.sender_type,
            text=message.text,
            createdAt=message.created_at,
            read=bool(message.read),
        )


class ConversationResponse(BaseModel):
    id: str
    clientId: str
    providerId: str
    clientName: Optional[str] = None
    providerName: Optional[str] = None
    lastMessage: Optional[str] = None
    lastMessageDate: Optional[datetime] = None
    unreadCount: int
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def for_viewer(cls, conversation: Conversation, viewer_id: str) -> "ConversationResponse":
        """unreadCount is the counter of whoever is looking at the conversation"""
        if viewer_id == conversation.provider_id:
            unread = conversation.provider_unread_count
        elif viewer_id == conversation.client_id:
            unread = conversation.client_unread_count
        else:
            unread = 0
        return cls(
            id=conversation.id,
            clientId=conversation.client_id,
            providerId=conversation.provider_id,
            clientName=conversation.client_name,
            providerName=conversation.provider_name,
            lastMessage=conversation.last_message,
            lastMessageDate=conversation.last_message_date,
            unreadCount=unread or 0,
            createdAt=conversation.created_at,
            updatedAt=conversation.updated_at,
        )
