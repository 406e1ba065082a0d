"""
Credential Verifier

bcrypt hashing and verification of passwords, plus the password policy.
"""

import bcrypt
from functools import lru_cache
from typing import Optional

from src.domain.entities import AuthErrorCode
from src.domain.result import Error, Result, Return

MIN_PASSWORD_LENGTH = 8
# bcrypt only reads the first 72 bytes of input
MAX_PASSWORD_BYTES = 72


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> bytes:
    return bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(rounds))


class CredentialVerifier:
    """
    Hashes and compares passwords.

    Business Rules:
    - Salted bcrypt hash, one work factor for the whole process
    - Verification is constant-time (delegated to bcrypt)
    - Malformed stored hashes never raise, they simply do not verify
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password. Output differs on every call (random salt)"""
        return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, hashed: Optional[str]) -> bool:
        """Check a password against a stored hash"""
        if not plaintext or not hashed:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Invalid salt / over-long input
            return False

    def burn_verification(self) -> None:
        """Spend one verification's worth of time against a dummy hash"""
        bcrypt.checkpw(b"not_the_password", _dummy_hash(self.rounds))

    @staticmethod
    def validate_password(plaintext: str) -> Result[None]:
        """
        Validate password complexity.

        Returns:
            Result with None if valid, or VALIDATION_FAILED Error
        """
        if plaintext is None or len(plaintext) < MIN_PASSWORD_LENGTH:
            return Return.err(
                Error(
                    AuthErrorCode.VALIDATION_FAILED,
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                )
            )

        if len(plaintext.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return Return.err(
                Error(
                    AuthErrorCode.VALIDATION_FAILED,
                    f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
                )
            )

        return Return.ok(None)
