"""
Authentication Use Case DTOs (Data Transfer Objects)

Command and Response classes for the auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import Optional
from pydantic import BaseModel

from src.domain.entities import PublicIdentityView


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """
    Register command - represents validated registration intent

    Created by API layer after request validation passes.
    Contains only business-relevant data (no HTTP concerns).
    """

    username: str
    email: str
    full_name: str
    password: str
    avatar: Optional[str] = None
    cover_image: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class LoginResponse(BaseModel):
    """Response for login: public identity plus a fresh token pair"""

    identity: PublicIdentityView
    access_token: str
    refresh_token: str
