import logging
from typing import Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.admin import Admin
from models.login import AdminSummary
from utils.errors import DuplicateEmail, InvalidCredentials, NotFound
from utils.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


class AuthService:
    """Admin registration, login and token issuance over one DB session."""

    def __init__(self, db: Session):
        self.db = db

    def create_admin(self, name: str, email: str, password: str, role: str = "admin") -> Admin:
        email = email.strip().lower()
        if self.db.query(Admin).filter(Admin.email == email).first():
            raise DuplicateEmail()

        admin = Admin(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            role=role or "admin",
        )
        self.db.add(admin)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration for the same email
            self.db.rollback()
            raise DuplicateEmail()
        self.db.refresh(admin)
        return admin

    def register(self, name: str, email: str, password: str) -> Tuple[str, AdminSummary]:
        admin = self.create_admin(name, email, password)
        logger.info(f"Registered admin {admin.email}")
        return self.issue_token(admin), AdminSummary.model_validate(admin)

    def login(self, email: str, password: str) -> Tuple[str, AdminSummary]:
        admin = self.db.query(Admin).filter(Admin.email == email.strip().lower()).first()

        if not admin or not verify_password(password, admin.password_hash):
            logger.warning(f"Failed login attempt for {email}")
            raise InvalidCredentials()

        return self.issue_token(admin), AdminSummary.model_validate(admin)

    def resolve_current(self, admin_id: str) -> AdminSummary:
        admin = self.db.query(Admin).filter(Admin.id == admin_id).first()
        if not admin:
            raise NotFound("Admin not found")
        return AdminSummary.model_validate(admin)

    @staticmethod
    def issue_token(admin: Admin) -> str:
        return create_access_token({"id": admin.id, "role": admin.role})
