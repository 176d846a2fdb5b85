import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from utils.config import settings

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        logger.warning("Stored password hash could not be parsed")
        return False


def _secret() -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET is not set in environment (.env)")
    return settings.jwt_secret


def create_access_token(data: dict, issued_at: Optional[datetime] = None) -> str:
    """
    Sign `data` into a JWT that expires JWT_EXPIRES_DAYS after `issued_at`
    (defaults to now).
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    payload = dict(data)
    payload["iat"] = issued_at
    payload["exp"] = issued_at + timedelta(days=settings.jwt_expires_days)
    return jwt.encode(payload, _secret(), algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Return the token payload, or None if it is malformed, forged or expired."""
    try:
        return jwt.decode(token, _secret(), algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid token: {e}")
        return None
