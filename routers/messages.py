import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from models.contact import BulkDeleteRequest, MessageCreate, MessageOut, ReadStatusUpdate
from models.login import AdminSummary
from models.message import Message
from services.message_service import MessageService
from utils.deps import get_current_admin, get_message_service
from utils.email import notifications_enabled, send_new_message_notification
from utils.limiter import CONTACT_FORM_LIMIT, limiter

logger = logging.getLogger(__name__)

router = APIRouter()


def _dump(row: Message) -> dict:
    return MessageOut.model_validate(row).model_dump(by_alias=True, mode="json")


@router.post("", status_code=201)
@limiter.limit(CONTACT_FORM_LIMIT)
def submit_message(
    request: Request,
    body: MessageCreate,
    background_tasks: BackgroundTasks,
    service: MessageService = Depends(get_message_service),
):
    """Public contact form submission."""
    receipt = service.submit(
        name=body.name,
        email=body.email,
        subject=body.subject,
        message=body.message,
        phone=body.phone,
    )

    if notifications_enabled():
        background_tasks.add_task(
            send_new_message_notification,
            name=body.name,
            email=body.email,
            subject=body.subject,
            message=body.message,
        )

    return {
        "success": True,
        "message": "Your message has been sent successfully! We will get back to you soon.",
        "data": receipt.model_dump(by_alias=True, mode="json"),
    }


@router.get("")
def list_messages(
    status: Optional[str] = Query(None, description="read | unread | spam"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: MessageService = Depends(get_message_service),
    current: AdminSummary = Depends(get_current_admin),
):
    result = service.list_messages(status=status, search=search, page=page, limit=limit)
    return {
        "success": True,
        "data": [m.model_dump(by_alias=True, mode="json") for m in result.items],
        "pagination": result.pagination.model_dump(by_alias=True),
        "stats": result.stats.model_dump(),
    }


@router.get("/{message_id}")
def get_message(
    message_id: str,
    service: MessageService = Depends(get_message_service),
    current: AdminSummary = Depends(get_current_admin),
):
    return {"success": True, "data": _dump(service.get_by_id(message_id))}


@router.patch("/{message_id}/read")
def update_read_status(
    message_id: str,
    body: Optional[ReadStatusUpdate] = None,
    service: MessageService = Depends(get_message_service),
    current: AdminSummary = Depends(get_current_admin),
):
    is_read = body.is_read if body is not None else True
    row = service.set_read_status(message_id, is_read)
    return {
        "success": True,
        "message": f"Message marked as {'read' if row.is_read else 'unread'}",
        "data": _dump(row),
    }


@router.patch("/{message_id}/spam")
def mark_spam(
    message_id: str,
    service: MessageService = Depends(get_message_service),
    current: AdminSummary = Depends(get_current_admin),
):
    row = service.mark_spam(message_id)
    logger.info(f"Admin {current.email} marked message {message_id} as spam")
    return {"success": True, "message": "Message marked as spam", "data": _dump(row)}


@router.delete("/{message_id}")
def delete_message(
    message_id: str,
    service: MessageService = Depends(get_message_service),
    current: AdminSummary = Depends(get_current_admin),
):
    service.delete(message_id)
    return {"success": True, "message": "Message deleted successfully"}


@router.post("/bulk/delete")
def bulk_delete_messages(
    body: BulkDeleteRequest,
    service: MessageService = Depends(get_message_service),
    current: AdminSummary = Depends(get_current_admin),
):
    deleted_count = service.bulk_delete(body.ids)
    return {
        "success": True,
        "message": f"{deleted_count} message(s) deleted successfully",
        "deletedCount": deleted_count,
    }
