from abc import ABC, abstractmethod


class IEmailSender(ABC):
    """Outbound email transport - application layer port"""

    @abstractmethod
    async def send(self, to: str, subject: str, html_body: str) -> bool:
        """Hand a message over for delivery. True if it was accepted"""
        pass


def redact_email(email: str) -> str:
    """Redact an email address for logging"""
    if not email or "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"
