# itsm_portal/backend/app/services/users.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..auth import get_password_hash, verify_password
from ..errors import NotFoundError, ValidationError
from ..models.user import User

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def validate_user(db: Session, employee_id: str, username: str) -> User:
    """Employee sign-in: both the employee id and the username must match."""
    user = (
        db.query(User)
        .filter(User.employee_id == employee_id, User.username == username)
        .first()
    )
    if user is None:
        logger.info("[AUTH] failed employee login for %r", username)
        raise NotFoundError(
            "Invalid credentials. Please check your Employee ID and Username."
        )
    return user


def authenticate_admin(db: Session, username: str, password: str) -> User:
    user = get_user_by_username(db, username)
    if user is None or not user.is_admin or not verify_password(password, user.password_hash):
        logger.info("[AUTH] failed admin login for %r", username)
        raise NotFoundError("Invalid admin credentials")
    return user


def create_user(
    db: Session,
    *,
    username: str,
    employee_id: str,
    is_admin: bool = False,
    password: Optional[str] = None,
) -> User:
    username = (username or "").strip()
    employee_id = (employee_id or "").strip()
    if not username or not employee_id:
        raise ValidationError("Username and employee ID are required")

    clash = (
        db.query(User.id)
        .filter((User.username == username) | (User.employee_id == employee_id))
        .first()
    )
    if clash is not None:
        raise ValidationError("Username or employee ID already exists")

    user = User(
        username=username,
        employee_id=employee_id,
        is_admin=is_admin,
        password_hash=get_password_hash(password) if password else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("[AUTH] provisioned user %s (admin=%s)", username, is_admin)
    return user
