"""
Authentication Use Cases

All credential and session lifecycle business logic.
"""

from .auth_service import AuthService
from .dtos import LoginResponse, RegisterCommand

__all__ = [
    # Use Cases
    "AuthService",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Responses
    "LoginResponse",
]
