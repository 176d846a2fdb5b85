import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "Contact Form Backend")
    environment: str = os.getenv("ENVIRONMENT", "development")
    database_url: Optional[str] = os.getenv("DATABASE_URL")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # auth
    jwt_secret: Optional[str] = os.getenv("JWT_SECRET")
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = int(os.getenv("JWT_EXPIRES_DAYS", "7"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # rate limiting / cors
    rate_limit_enabled: bool = _env_bool("RATE_LIMIT_ENABLED", True)
    general_rate_limit: str = os.getenv("GENERAL_RATE_LIMIT", "100/15 minutes")
    contact_rate_limit: str = os.getenv("CONTACT_RATE_LIMIT", "5/15 minutes")
    cors_origins: List[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # new message notification
    contact_notify_email: str = os.getenv("CONTACT_NOTIFY_EMAIL", "")

    # first admin, created on startup if missing
    admin_name: str = os.getenv("ADMIN_NAME", "Administrator")
    admin_email: str = os.getenv("ADMIN_EMAIL", "")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
