from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from userhub.models.account import SECRET_FIELDS


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (userName, fullName, ...)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---- 요청 ----
class LoginRequest(CamelModel):
    user_name: Optional[str] = None
    email: Optional[str] = None
    password: str


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str


class UpdateAccountRequest(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


# ---- 응답 ----
class AccountOut(CamelModel):
    """Sanitized account: no password hash, no refresh token."""

    id: UUID
    user_name: str
    email: str
    full_name: str
    avatar_url: str
    cover_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenPairOut(CamelModel):
    access_token: str
    refresh_token: str


class LoginOut(TokenPairOut):
    user: AccountOut


class ApiResponse(CamelModel):
    status_code: int
    data: Any = None
    message: str = "Success"
    success: bool = True

    @classmethod
    def ok(cls, data: Any = None, message: str = "Success", status_code: int = 200) -> "ApiResponse":
        return cls(status_code=status_code, data=data, message=message, success=status_code < 400)


def sanitize(account) -> AccountOut:
    """Account row -> client view; secret columns are never copied."""
    return AccountOut.model_validate(
        {name: getattr(account, name) for name in AccountOut.model_fields if name not in SECRET_FIELDS}
    )
