import re
from datetime import datetime, timezone
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel

NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
# +91 followed by a 10 digit subscriber number starting with 6-9
PHONE_PATTERN = re.compile(r"^\+91[6-9]\d{9}$")


def _check_length(value: str, label: str, low: int, high: int) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    if not low <= len(value) <= high:
        raise ValueError(f"{label} must be between {low} and {high} characters")
    return value


def normalize_phone(value: str) -> str:
    return re.sub(r"[\s-]", "", value)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Pydantic models for request/response
class MessageCreate(BaseModel):
    name: str
    email: EmailStr
    subject: str
    message: str
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        value = _check_length(value, "Name", 2, 100)
        if re.search(r"\d", value):
            raise ValueError("Name should not contain numbers")
        if not NAME_PATTERN.match(value):
            raise ValueError("Name should only contain letters, spaces, hyphens, and apostrophes")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("subject")
    @classmethod
    def check_subject(cls, value: str) -> str:
        return _check_length(value, "Subject", 3, 200)

    @field_validator("message")
    @classmethod
    def check_message(cls, value: str) -> str:
        return _check_length(value, "Message", 10, 2000)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = normalize_phone(value.strip())
        if not PHONE_PATTERN.match(value):
            raise ValueError("Please enter a valid Indian phone number (e.g., +91 98765 43210)")
        return value


class MessageOut(CamelModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    phone: Optional[str] = None
    is_read: bool
    is_spam: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class MessageReceipt(CamelModel):
    id: str
    name: str
    email: str
    subject: str
    created_at: UtcDatetime


class ReadStatusUpdate(CamelModel):
    is_read: bool = True


class BulkDeleteRequest(BaseModel):
    # left optional so an empty or missing list reaches the service as InvalidArgument
    ids: Optional[List[str]] = None


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class MessageStats(BaseModel):
    total: int
    unread: int
    read: int
    spam: int


class MessagePage(BaseModel):
    items: List[MessageOut]
    pagination: Pagination
    stats: MessageStats
