"""Messaging service - Conversations between a client and a provider"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Conversation, Message
from ...shared.timestamps import utcnow
from ..users.repository import UserRepository
from .broker import MessageBroker
from .repository import MessagingRepository
from .schemas import ConversationStart

logger = logging.getLogger(__name__)


def unread_counter(conversation: Conversation, user_id: str) -> str:
    """Name of the unread counter column that belongs to ``user_id``"""
    if user_id == conversation.client_id:
        return "client_unread_count"
    return "provider_unread_count"


class MessagingService:
    """Service layer for conversations and messages"""

    def __init__(self, db: Session, broker: MessageBroker):
        self.db = db
        self.broker = broker
        self.repo = MessagingRepository()
        self.users = UserRepository()

    def get_conversation(self, conversation_id: str, session: AuthSession) -> Conversation:
        conversation = self.repo.get_conversation(self.db, conversation_id)
        if not conversation:
            raise HTTPException(status_code=404, detail="Conversation not found")
        if session.uid not in (conversation.client_id, conversation.provider_id) and not session.is_admin:
            logger.warning(f"🚫 {session.uid} tried to open conversation {conversation_id}")
            raise HTTPException(status_code=403, detail="Access denied to this conversation")
        return conversation

    def _require_participant(self, conversation: Conversation, session: AuthSession) -> None:
        if session.uid not in (conversation.client_id, conversation.provider_id):
            raise HTTPException(status_code=403, detail="Only participants can do this")

    def start_conversation(self, data: ConversationStart, session: AuthSession) -> Conversation:
        """Return the pair's conversation, creating it on first contact"""
        if session.is_provider:
            if not data.clientId:
                raise HTTPException(status_code=400, detail="clientId is required")
            client = self.users.get_user(self.db, data.clientId)
            if not client or client.role != "client":
                raise HTTPException(status_code=404, detail="Client not found")
            provider_id, provider_name = session.uid, session.business_name or session.display_name
            client_id, client_name = client.id, client.display_name
        else:
            if not data.providerId:
                raise HTTPException(status_code=400, detail="providerId is required")
            provider = self.users.get_user(self.db, data.providerId)
            if not provider or provider.role != "provider":
                raise HTTPException(status_code=404, detail="Provider not found")
            provider_id, provider_name = provider.id, provider.business_name or provider.display_name
            client_id, client_name = session.uid, session.display_name

        if provider_id == client_id:
            raise HTTPException(status_code=400, detail="You cannot message yourself")

        existing = self.repo.get_conversation_for_pair(self.db, client_id, provider_id)
        if existing:
            return existing

        try:
            conversation = self.repo.create_conversation(
                self.db,
                client_id=client_id,
                provider_id=provider_id,
                client_name=client_name,
                provider_name=provider_name,
            )
        except IntegrityError:
            # Created concurrently by the other participant
            self.db.rollback()
            return self.repo.get_conversation_for_pair(self.db, client_id, provider_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create conversation {client_id}/{provider_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to start conversation") from e

        logger.info(f"💬 Conversation started: {conversation.id}")
        return conversation

    def list_conversations(self, session: AuthSession) -> list[Conversation]:
        return self.repo.list_conversations(self.db, session.uid)

    def list_messages(self, conversation_id: str, session: AuthSession) -> list[Message]:
        self.get_conversation(conversation_id, session)
        return self.repo.list_messages(self.db, conversation_id)

    def send_message(self, conversation_id: str, text: str, session: AuthSession) -> Message:
        """Insert the message, update the summary and the recipient's counter in one commit"""
        conversation = self.get_conversation(conversation_id, session)
        self._require_participant(conversation, session)

        is_client = session.uid == conversation.client_id
        recipient_id = conversation.provider_id if is_client else conversation.client_id
        sender_name = (
            session.display_name if is_client else session.business_name or session.display_name
        )
        now = utcnow()

        try:
            message = self.repo.add_message(
                self.db,
                conversation_id=conversation.id,
                sender_id=session.uid,
                sender_name=sender_name,
                sender_type="client" if is_client else "provider",
                text=text,
                created_at=now,
                read=False,
            )
            self.repo.record_message(
                self.db,
                conversation.id,
                text,
                now,
                unread_counter(conversation, recipient_id),
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to send message in {conversation_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send message") from e

        self.db.refresh(message)
        self.broker.publish(conversation.id)
        logger.info(f"📨 Message {message.id} sent in conversation {conversation.id}")
        return message

    def mark_conversation_read(self, conversation_id: str, session: AuthSession) -> int:
        """Mark the peer's messages read and zero the viewer's counter. Returns how many changed."""
        conversation = self.get_conversation(conversation_id, session)
        self._require_participant(conversation, session)

        try:
            changed = self.repo.mark_peer_messages_read(self.db, conversation.id, session.uid)
            self.repo.reset_unread(self.db, conversation.id, unread_counter(conversation, session.uid))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to mark conversation {conversation_id} read: {e}")
            raise HTTPException(status_code=500, detail="Failed to mark messages as read") from e

        if changed:
            self.broker.publish(conversation.id)
            logger.info(f"👀 {changed} message(s) read in conversation {conversation.id}")
        return changed

    def open_stream(self, conversation_id: str, session: AuthSession) -> list[Message]:
        """
        Opening a conversation counts as reading it: participants mark the
        peer's messages read before the first snapshot.
        """
        conversation = self.get_conversation(conversation_id, session)
        if session.uid in (conversation.client_id, conversation.provider_id):
            self.mark_conversation_read(conversation_id, session)
        return self.repo.list_messages(self.db, conversation_id)

    def snapshot(self, conversation_id: str) -> list[Message]:
        # New read transaction so commits from other sessions are visible
        self.db.rollback()
        return self.repo.list_messages(self.db, conversation_id)
