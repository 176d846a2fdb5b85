from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from db.init import get_db
from models.login import AdminSummary
from services.auth_service import AuthService
from services.message_service import MessageService
from utils.errors import NotFound, Unauthorized
from utils.security import decode_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    return MessageService(db)


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> AdminSummary:
    if credentials is None or not credentials.scheme.lower() == "bearer":
        raise Unauthorized("Not authorized, no token")
    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("id"):
        raise Unauthorized("Not authorized, token failed")
    try:
        return auth.resolve_current(payload["id"])
    except NotFound:
        raise Unauthorized("Not authorized, admin not found")
