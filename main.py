import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from db.init import init_db
from routers import auth, messages
from utils.config import settings
from utils.errors import AppError
from utils.limiter import limiter, rate_limit_exceeded_handler

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(title=settings.app_name)
app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,  # "*" by default
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.on_event("startup")
def startup():
    init_db()
    logger.info(f"{settings.app_name} started ({settings.environment})")


# ---- Error envelopes ----
@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        ctx_error = (err.get("ctx") or {}).get("error")
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        errors.append({
            "field": field,
            "message": str(ctx_error) if ctx_error else err.get("msg"),
        })
    logger.info(f"{request.method} {request.url.path} -> 400: {errors}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {message}")
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": message})


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Server error on {request.method} {request.url.path}")
    content = {"success": False, "message": "Internal server error"}
    if settings.is_development:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.get("/api/health")
def health_check():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

# Routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(messages.router, prefix="/api/messages", tags=["Messages"])
