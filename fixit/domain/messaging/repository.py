"""Messaging repository - Database operations for conversations and messages"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Conversation, Message


class MessagingRepository:
    """Repository for conversation and message database operations"""

    @staticmethod
    def get_conversation(db: Session, conversation_id: str) -> Optional[Conversation]:
        return db.query(Conversation).filter(Conversation.id == conversation_id).first()

    @staticmethod
    def get_conversation_for_pair(
        db: Session, client_id: str, provider_id: str
    ) -> Optional[Conversation]:
        return (
            db.query(Conversation)
            .filter(Conversation.client_id == client_id, Conversation.provider_id == provider_id)
            .first()
        )

    @staticmethod
    def create_conversation(db: Session, **conversation_data) -> Conversation:
        conversation = Conversation(**conversation_data)
        db.add(conversation)
        db.commit()
        db.refresh(conversation)
        return conversation

    @staticmethod
    def list_conversations(db: Session, user_id: str) -> list[Conversation]:
        return (
            db.query(Conversation)
            .filter(or_(Conversation.client_id == user_id, Conversation.provider_id == user_id))
            .order_by(Conversation.updated_at.desc())
            .all()
        )

    @staticmethod
    def list_messages(db: Session, conversation_id: str) -> list[Message]:
        return (
            db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )

    @staticmethod
    def add_message(db: Session, **message_data) -> Message:
        message = Message(**message_data)
        db.add(message)
        db.flush()
        return message

    @staticmethod
    def record_message(
        db: Session, conversation_id: str, text: str, sent_at, recipient_counter: str
    ) -> None:
        """Conversation summary plus one more unread message for the recipient"""
        counter = getattr(Conversation, recipient_counter)
        db.query(Conversation).filter(Conversation.id == conversation_id).update(
            {
                "last_message": text,
                "last_message_date": sent_at,
                "updated_at": sent_at,
                recipient_counter: counter + 1,
            },
            synchronize_session=False,
        )

    @staticmethod
    def mark_peer_messages_read(db: Session, conversation_id: str, viewer_id: str) -> int:
        return (
            db.query(Message)
            .filter(
                Message.conversation_id == conversation_id,
                Message.sender_id != viewer_id,
                Message.read.is_(False),
            )
            .update({"read": True}, synchronize_session=False)
        )

    @staticmethod
    def reset_unread(db: Session, conversation_id: str, viewer_counter: str) -> None:
        db.query(Conversation).filter(Conversation.id == conversation_id).update(
            {viewer_counter: 0}, synchronize_session=False
        )
