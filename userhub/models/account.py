from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(SQLModel, table=True):
    """
    사용자 계정.
    - refresh_token: the one refresh credential currently honoured (NULL = logged out)
    - password_hash / refresh_token never leave the service layer
    """
    __tablename__ = "account"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_name: str = Field(index=True, unique=True, nullable=False)
    email: str = Field(index=True, unique=True, nullable=False)
    full_name: str = Field(index=True, nullable=False)
    password_hash: str = Field(nullable=False)
    avatar_url: str = Field(nullable=False)
    cover_url: str = Field(default="", nullable=False)
    refresh_token: Optional[str] = Field(default=None)

    # timezone-aware UTC on both sides of the wire
    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False)
    )


# Columns that may never be serialized to a client.
SECRET_FIELDS = frozenset({"password_hash", "refresh_token"})
