# itsm_portal/backend/app/auth.py
"""
Identity and authorization.

Identity is the (user id, username, admin flag) triple, issued by the login
endpoints as a signed JWT and presented back as a bearer token or the
access_token cookie. Nothing here touches the database: a valid signature is
what makes the claims trustworthy.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from . import config
from .errors import AccessDenied, Unauthenticated

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS_TOKEN_COOKIE = "access_token"


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str
    is_admin: bool = False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {
        "sub": str(identity.user_id),
        "username": identity.username,
        "is_admin": bool(identity.is_admin),
        "exp": expire,
    }
    return jwt.encode(claims, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        raise Unauthenticated("Invalid or expired access token")

    sub = payload.get("sub")
    username = payload.get("username")
    if sub is None or not username:
        raise Unauthenticated("Invalid or expired access token")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid or expired access token")

    return Identity(
        user_id=user_id,
        username=username,
        is_admin=payload.get("is_admin") is True,
    )


def _extract_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header:
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthenticated("Malformed Authorization header")
        return token.strip()
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


def get_current_user(request: Request) -> Identity:
    """FastAPI dependency: the caller's identity, or 401."""
    token = _extract_token(request)
    if not token:
        raise Unauthenticated()
    return decode_access_token(token)


def require_admin(current_user: Identity = Depends(get_current_user)) -> Identity:
    if not current_user.is_admin:
        logger.info("[AUTH] admin route refused for user %s", current_user.user_id)
        raise AccessDenied("Administrator access required")
    return current_user


def can_access_owner(identity: Identity, owner_id: int) -> bool:
    return identity.is_admin or identity.user_id == owner_id


def ensure_owner_access(identity: Optional[Identity], owner_id: int) -> None:
    """
    The gate for ticket-scoped operations: admins and the owner pass,
    any other authenticated caller gets AccessDenied.
    """
    if identity is None:
        raise Unauthenticated()
    if not can_access_owner(identity, owner_id):
        logger.info(
            "[AUTH] user %s denied access to resource owned by %s",
            identity.user_id,
            owner_id,
        )
        raise AccessDenied()


def ensure_ticket_access(identity: Optional[Identity], ticket) -> None:
    ensure_owner_access(identity, ticket.user_id)
