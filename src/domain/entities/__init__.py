"""
Sentinel IAM Domain Entities

Identity record, its public projection and the shared enums.
"""

from .enums import AuthErrorCode, TokenKind
from .identity import Identity
from .public_identity import PublicIdentityView, to_public_view

__all__ = [
    # Enums
    "AuthErrorCode",
    "TokenKind",
    # Entities
    "Identity",
    # Views
    "PublicIdentityView",
    "to_public_view",
]
