# itsm_portal/backend/app/schemas/user.py

from pydantic import Field

from .base import ApiModel, RequestModel


class LoginRequest(RequestModel):
    employee_id: str = Field(min_length=1, max_length=50)
    username: str = Field(min_length=1, max_length=50)


class AdminLoginRequest(RequestModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)


class UserRead(ApiModel):
    id: int
    username: str
    employee_id: str
    is_admin: bool


class LoginResponse(UserRead):
    access_token: str
    token_type: str = "bearer"


class IdentityRead(ApiModel):
    user_id: int
    username: str
    is_admin: bool
