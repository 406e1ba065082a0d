"""
Use Cases

Organized into domain folders:
- auth/: Credential and session lifecycle
- users/: Profile management
"""

from .auth import AuthService, LoginResponse, RegisterCommand
from .users import UpdateAccountUseCase

__all__ = [
    # Auth
    "AuthService",
    "RegisterCommand",
    "LoginResponse",
    # Users
    "UpdateAccountUseCase",
]
