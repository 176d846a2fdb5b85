import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from utils.config import settings

# Application limit is one budget per IP shared by every route (checked in
# SlowAPIMiddleware); @limiter.limit adds a stricter per-route limit on top.
limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[settings.general_rate_limit],
    enabled=settings.rate_limit_enabled,
)

CONTACT_FORM_LIMIT = settings.contact_rate_limit

logger = logging.getLogger(__name__)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    if request.url.path.rstrip("/") == "/api/messages" and request.method == "POST":
        message = "Too many contact form submissions. Please try again later."
    else:
        message = "Too many requests from this IP, please try again later."
    logger.warning(f"{request.method} {request.url.path} -> 429: {exc.detail}")
    return JSONResponse(status_code=429, content={"success": False, "message": message})
