# itsm_portal/backend/app/api/v1/auth.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Identity, create_access_token, get_current_user
from ...db import get_db
from ...schemas.user import AdminLoginRequest, IdentityRead, LoginRequest, LoginResponse
from ...services import users as user_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _login_response(user) -> LoginResponse:
    token = create_access_token(
        Identity(user_id=user.id, username=user.username, is_admin=bool(user.is_admin))
    )
    return LoginResponse(
        id=user.id,
        username=user.username,
        employee_id=user.employee_id,
        is_admin=bool(user.is_admin),
        access_token=token,
    )


@router.post("/validate", response_model=LoginResponse)
def validate_employee(payload: LoginRequest, db: Session = Depends(get_db)):
    """Employee sign-in with employee id + username."""
    user = user_service.validate_user(db, payload.employee_id, payload.username)
    return _login_response(user)


@router.post("/admin", response_model=LoginResponse)
def admin_login(payload: AdminLoginRequest, db: Session = Depends(get_db)):
    user = user_service.authenticate_admin(db, payload.username, payload.password)
    return _login_response(user)


@router.get("/me", response_model=IdentityRead)
def whoami(current_user: Identity = Depends(get_current_user)):
    return IdentityRead(
        user_id=current_user.user_id,
        username=current_user.username,
        is_admin=current_user.is_admin,
    )
