import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Boolean, DateTime, Index
from db.init import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_is_read_created_at", "is_read", "created_at"),
        Index("ix_messages_is_spam", "is_spam"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False)
    subject = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    phone = Column(String(20), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    is_spam = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
