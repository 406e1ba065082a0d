"""
Sentinel IAM Domain Enums

All enumeration types used across the credential lifecycle.
"""

from enum import StrEnum


class TokenKind(StrEnum):
    """Kind of signed token; each kind has its own secret and TTL"""

    access = "access"
    refresh = "refresh"


class AuthErrorCode(StrEnum):
    """Error codes returned by the credential lifecycle use cases"""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_TOKEN = "INVALID_TOKEN"
    REFRESH_TOKEN_REUSE_DETECTED = "REFRESH_TOKEN_REUSE_DETECTED"
    INVALID_OR_EXPIRED_CODE = "INVALID_OR_EXPIRED_CODE"
    INVALID_OLD_PASSWORD = "INVALID_OLD_PASSWORD"
    DELIVERY_FAILED = "DELIVERY_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INTERNAL = "INTERNAL"
