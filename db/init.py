# db/init.py
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import settings

logger = logging.getLogger(__name__)

# ---- Database engine & Session ----
DATABASE_URL = settings.database_url
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set in environment (.env)")


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    # in-memory databases live as long as their single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ---- Base for ORM models ----
Base = declarative_base()


# ---- DB session dependency ----
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---- Initialization & optional seeding ----
def init_db(seed: bool = True):
    """
    Imports all model modules to register tables, creates them,
    and (optionally) provisions the first admin from ADMIN_* settings.
    """
    # Import models so their metadata is registered on Base
    from models import admin, message  # noqa: F401

    Base.metadata.create_all(bind=engine)

    if seed:
        _seed_default_admin()


def _seed_default_admin():
    """
    Insert the admin described by ADMIN_NAME / ADMIN_EMAIL / ADMIN_PASSWORD
    if its email does not already exist.
    """
    if not settings.admin_email or not settings.admin_password:
        return

    from services.auth_service import AuthService
    from utils.errors import DuplicateEmail

    if len(settings.admin_password) < 6:
        logger.warning("ADMIN_PASSWORD must be at least 6 characters, skipping admin seed")
        return

    db = SessionLocal()
    try:
        AuthService(db).create_admin(
            name=settings.admin_name,
            email=settings.admin_email,
            password=settings.admin_password,
        )
        logger.info(f"Seeded admin account {settings.admin_email.lower()}")
    except DuplicateEmail:
        logger.info(f"Admin {settings.admin_email.lower()} already exists, skipping seed")
    finally:
        db.close()
