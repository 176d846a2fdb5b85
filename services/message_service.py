import logging
import math
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.contact import MessagePage, MessageOut, MessageReceipt, MessageStats, Pagination
from models.message import Message
from utils.errors import InvalidArgument, NotFound

logger = logging.getLogger(__name__)

STATUS_READ = "read"
STATUS_UNREAD = "unread"
STATUS_SPAM = "spam"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MessageService:
    """Contact message submission and admin triage over one DB session."""

    def __init__(self, db: Session):
        self.db = db

    def submit(
        self,
        name: str,
        email: str,
        subject: str,
        message: str,
        phone: Optional[str] = None,
    ) -> MessageReceipt:
        row = Message(
            name=name,
            email=email.lower(),
            subject=subject,
            message=message,
            phone=phone,
            is_read=False,
            is_spam=False,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.info(f"Stored contact message {row.id} from {row.email}")
        return MessageReceipt.model_validate(row)

    def _filtered_query(self, status: Optional[str], search: Optional[str]):
        query = self.db.query(Message)

        # Filter by read status; every view except "spam" hides spam
        if status == STATUS_READ:
            query = query.filter(Message.is_read.is_(True), Message.is_spam.is_(False))
        elif status == STATUS_UNREAD:
            query = query.filter(Message.is_read.is_(False), Message.is_spam.is_(False))
        elif status == STATUS_SPAM:
            query = query.filter(Message.is_spam.is_(True))
        else:
            query = query.filter(Message.is_spam.is_(False))

        if search:
            pattern = f"%{_escape_like(search)}%"
            query = query.filter(
                or_(
                    Message.name.ilike(pattern, escape="\\"),
                    Message.email.ilike(pattern, escape="\\"),
                    Message.subject.ilike(pattern, escape="\\"),
                    Message.message.ilike(pattern, escape="\\"),
                )
            )
        return query

    def list_messages(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> MessagePage:
        query = self._filtered_query(status, search)

        total = query.count()
        rows = (
            query.order_by(Message.created_at.desc(), Message.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return MessagePage(
            items=[MessageOut.model_validate(r) for r in rows],
            pagination=Pagination(
                current_page=page,
                total_pages=math.ceil(total / limit),
                total_items=total,
                items_per_page=limit,
            ),
            stats=self.stats(),
        )

    def stats(self) -> MessageStats:
        """Global counts, independent of whatever filter the caller is viewing."""
        base = self.db.query(Message)
        return MessageStats(
            total=base.filter(Message.is_spam.is_(False)).count(),
            unread=base.filter(Message.is_read.is_(False), Message.is_spam.is_(False)).count(),
            read=base.filter(Message.is_read.is_(True), Message.is_spam.is_(False)).count(),
            spam=base.filter(Message.is_spam.is_(True)).count(),
        )

    def get_by_id(self, message_id: str) -> Message:
        row = self.db.query(Message).filter(Message.id == message_id).first()
        if not row:
            raise NotFound("Message not found")
        return row

    def set_read_status(self, message_id: str, is_read: bool = True) -> Message:
        row = self.get_by_id(message_id)
        row.is_read = is_read
        self.db.commit()
        self.db.refresh(row)
        return row

    def mark_spam(self, message_id: str) -> Message:
        # one-way: there is no operation that clears is_spam, and is_read is left alone
        row = self.get_by_id(message_id)
        row.is_spam = True
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, message_id: str) -> None:
        row = self.get_by_id(message_id)
        self.db.delete(row)
        self.db.commit()
        logger.info(f"Deleted message {message_id}")

    def bulk_delete(self, ids: Optional[List[str]]) -> int:
        if not ids:
            raise InvalidArgument("Please provide message IDs to delete")

        deleted = (
            self.db.query(Message)
            .filter(Message.id.in_(ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        logger.info(f"Bulk deleted {deleted} of {len(ids)} requested messages")
        return deleted
