import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .shared.timestamps import utcnow


def generate_id():
    """Generate a store-assigned document id"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    # Keyed by the Firebase uid of the identity
    id = Column(String(128), primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="client")  # client, provider, admin
    business_name = Column(String(255), nullable=True)  # providers only
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    category = Column(String(50), nullable=False, index=True)
    provider_id = Column(String(128), nullable=False, index=True)
    provider_name = Column(String(255), nullable=True)
    business_name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)  # active, draft, archived
    # Cached aggregates, recomputed in the same transaction as every review write
    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    service_id = Column(String(36), nullable=False, index=True)
    service_name = Column(String(255), nullable=False)
    provider_id = Column(String(128), nullable=False, index=True)
    provider_name = Column(String(255), nullable=True)
    business_name = Column(String(255), nullable=True)
    client_id = Column(String(128), nullable=False, index=True)
    client_name = Column(String(255), nullable=True)
    client_email = Column(String(255), nullable=True)
    price = Column(Float, nullable=False)
    fee = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    # Status workflow: pending → confirmed → in_progress → completed, pending/confirmed → cancelled
    status = Column(String(20), nullable=False, default="pending", index=True)
    address = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    reason = Column(Text, nullable=True)  # cancellation reason
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    payment = relationship("Payment", back_populates="booking", uselist=False)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=generate_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), unique=True, nullable=False)
    service_id = Column(String(36), nullable=False)
    service_name = Column(String(255), nullable=True)
    provider_id = Column(String(128), nullable=False, index=True)
    provider_name = Column(String(255), nullable=True)
    client_id = Column(String(128), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, paid, refunded, failed
    method = Column(String(50), nullable=True)  # card, cash, paypal...
    date = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    booking = relationship("Booking", back_populates="payment")


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("client_id", "service_id", name="uq_review_client_service"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    service_id = Column(String(36), nullable=False, index=True)
    service_name = Column(String(255), nullable=True)
    provider_id = Column(String(128), nullable=False, index=True)
    provider_name = Column(String(255), nullable=True)
    client_id = Column(String(128), nullable=False, index=True)
    client_name = Column(String(255), nullable=True)
    booking_id = Column(String(36), nullable=True)
    rating = Column(Integer, nullable=False)  # 1..5
    comment = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "type", "item_id", name="uq_favorite_user_item"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(128), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # service, provider
    item_id = Column(String(128), nullable=False)
    item_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Conversation(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("client_id", "provider_id", name="uq_conversation_pair"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(128), nullable=False, index=True)
    provider_id = Column(String(128), nullable=False, index=True)
    client_name = Column(String(255), nullable=True)
    provider_name = Column(String(255), nullable=True)
    last_message = Column(Text, nullable=True)
    last_message_date = Column(DateTime, nullable=True)
    # One counter per participant, incremented with every message sent to them
    client_unread_count = Column(Integer, nullable=False, default=0)
    provider_unread_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    messages = relationship("Message", back_populates="conversation")


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=generate_id)
    conversation_id = Column(
        String(36), ForeignKey("conversations.id"), nullable=False, index=True
    )
    sender_id = Column(String(128), nullable=False)
    sender_name = Column(String(255), nullable=True)
    sender_type = Column(String(20), nullable=False)  # client, provider
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")


class ContactSubmission(Base):
    __tablename__ = "contact_submissions"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="new")
    created_at = Column(DateTime, default=utcnow, nullable=False)
