"""
Identity Entity

One record per registered user; holds the credential and session state.
"""

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel


def utc_now() -> datetime:
    return datetime.now(UTC)


class Identity(SQLModel, table=True):
    """
    Identity entity - a registered user and their credential state.

    Business Rules:
    - Username and email are unique and stored lowercase
    - Password stored as bcrypt hash, never returned to callers
    - At most one active refresh token (single session per identity)
    - At most one pending reset code; a new request replaces the old one
    - Changing the password clears the active refresh token
    """

    __tablename__ = "identities"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=64)
    email: str = Field(unique=True, index=True, max_length=255)
    full_name: str = Field(max_length=255)

    # URLs handed over by the media store
    avatar: Optional[str] = Field(default=None, max_length=1024)
    cover_image: Optional[str] = Field(default=None, max_length=1024)

    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Session slot (single active session)
    active_refresh_token: Optional[str] = Field(default=None, max_length=2048)

    # Password reset (one pending code at most)
    reset_code: Optional[str] = Field(default=None, index=True, max_length=6)
    reset_code_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (Index("idx_identity_reset_code_expires_at", "reset_code_expires_at"),)
