# itsm_portal/backend/app/api/v1/users.py

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from ...auth import Identity, ensure_owner_access, get_current_user
from ...db import get_db
from ...schemas.base import MAX_DB_ID
from ...schemas.user import UserRead
from ...services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int = Path(ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_owner_access(current_user, user_id)
    return user_service.get_user(db, user_id)
