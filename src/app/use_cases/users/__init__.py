"""
User Management Use Cases

Profile-level operations on an identity.
"""

from .update_account_use_case import UpdateAccountUseCase

__all__ = [
    "UpdateAccountUseCase",
]
