from fastapi import APIRouter, Depends

from models.login import AdminSummary, LoginRequest, RegisterRequest
from services.auth_service import AuthService
from utils.deps import get_auth_service, get_current_admin

router = APIRouter()


@router.post("/register", status_code=201)
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """Register a new admin and return a token for it."""
    token, admin = auth.register(body.name, body.email, body.password)
    return {
        "success": True,
        "message": "Admin registered successfully",
        "token": token,
        "admin": admin.model_dump(),
    }


@router.post("/login")
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    token, admin = auth.login(body.email, body.password)
    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "admin": admin.model_dump(),
    }


@router.get("/me")
def me(current: AdminSummary = Depends(get_current_admin)):
    return {"success": True, "admin": current.model_dump()}
