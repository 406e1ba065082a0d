"""
PublicIdentityView

Projection of an Identity that is safe to hand to callers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .identity import Identity


class PublicIdentityView(BaseModel):
    """Identity without password hash, refresh token or reset code"""

    id: str
    username: str
    email: str
    full_name: str
    avatar: Optional[str] = None
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


def to_public_view(identity: Identity) -> PublicIdentityView:
    """The only conversion from Identity to what leaves the core"""
    return PublicIdentityView(
        id=str(identity.id),
        username=identity.username,
        email=identity.email,
        full_name=identity.full_name,
        avatar=identity.avatar,
        cover_image=identity.cover_image,
        created_at=identity.created_at,
        updated_at=identity.updated_at,
    )
