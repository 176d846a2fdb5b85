import os
import requests
import logging
from typing import Optional

from utils.config import settings

logger = logging.getLogger(__name__)

# Brevo (Sendinblue) Configuration (from environment variables)
BREVO_API_KEY = os.getenv("BREVO_API_KEY", "")
BREVO_FROM_EMAIL = os.getenv("BREVO_FROM_EMAIL", "")
BREVO_FROM_NAME = os.getenv("BREVO_FROM_NAME", "Contact Form")
BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


def notifications_enabled() -> bool:
    return bool(BREVO_API_KEY and BREVO_FROM_EMAIL and settings.contact_notify_email)


def send_email(
    to_email: str,
    subject: str,
    body: str,
    reply_to: Optional[dict] = None
) -> tuple[bool, Optional[str]]:
    """
    Send a single plain-text email using Brevo API.
    Returns (success: bool, error_message: Optional[str])
    """
    payload = {
        "sender": {
            "name": BREVO_FROM_NAME,
            "email": BREVO_FROM_EMAIL
        },
        "to": [
            {
                "email": to_email
            }
        ],
        "subject": subject,
        "textContent": body
    }

    if reply_to:
        payload["replyTo"] = reply_to

    headers = {
        "accept": "application/json",
        "api-key": BREVO_API_KEY,
        "content-type": "application/json"
    }

    try:
        response = requests.post(
            BREVO_API_URL,
            json=payload,
            headers=headers,
            timeout=10
        )
    except requests.exceptions.RequestException as e:
        error_msg = f"Network error sending to {to_email}: {str(e)}"
        logger.error(error_msg)
        return False, error_msg

    if response.status_code == 201:
        return True, None

    try:
        error_data = response.json() if response.content else {}
    except ValueError:
        error_data = {}
    error_msg = f"Brevo API error for {to_email}: {response.status_code} - {error_data.get('message', response.text)}"
    logger.error(error_msg)
    return False, error_msg


def send_new_message_notification(name: str, email: str, subject: str, message: str) -> tuple[bool, Optional[str]]:
    """
    Tell the site owner that a contact message arrived. Replying to the
    notification goes straight to the visitor.
    """
    email_subject = f"New contact message: {subject}"

    text_body = (
        f"From: {name} <{email}>\n"
        f"Subject: {subject}\n\n"
        f"{message}\n"
    )

    reply_to = {"email": email, "name": name}

    success, error = send_email(
        settings.contact_notify_email, email_subject, text_body, reply_to=reply_to
    )
    if not success:
        logger.warning(f"New message notification not delivered: {error}")
    return success, error
