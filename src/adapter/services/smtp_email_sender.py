import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from src.app.services.email_sender import IEmailSender, redact_email

logger = logging.getLogger(__name__)


class SmtpEmailSender(IEmailSender):
    """
    SMTP implementation of the email port.

    Supports STARTTLS (port 587) or implicit SSL (port 465).
    When no host is configured (dev mode) the message is logged, not sent.
    """

    def __init__(
        self,
        *,
        host: Optional[str] = None,
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        from_email: Optional[str] = None,
        from_name: str = "Sentinel IAM",
        timeout: float = 30,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email or user
        self.from_name = from_name
        self.timeout = timeout

    @classmethod
    def from_application_config(cls, config) -> "SmtpEmailSender":
        return cls(
            host=config.SMTP_HOST or None,
            port=int(config.SMTP_PORT),
            user=config.SMTP_USER or None,
            password=config.SMTP_PASSWORD or None,
            use_tls=bool(config.SMTP_USE_TLS),
            from_email=config.SMTP_FROM_EMAIL or None,
            from_name=config.APP_NAME,
            timeout=float(config.SMTP_TIMEOUT_SECONDS),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.from_email)

    async def send(self, to: str, subject: str, html_body: str) -> bool:
        if not self.is_configured:
            logger.info(f"Email dev mode, not sending: to={redact_email(to)} subject={subject!r}")
            return True

        # smtplib is blocking; keep it off the event loop
        return await asyncio.to_thread(self._send_blocking, to, subject, html_body)

    def _send_blocking(self, to: str, subject: str, html_body: str) -> bool:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to
        msg.attach(MIMEText(html_body, "html"))

        context = ssl.create_default_context()
        try:
            if self.use_tls:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls(context=context)
                    if self.user and self.password:
                        server.login(self.user, self.password)
                    server.sendmail(self.from_email, to, msg.as_string())
            else:
                with smtplib.SMTP_SSL(
                    self.host, self.port, context=context, timeout=self.timeout
                ) as server:
                    if self.user and self.password:
                        server.login(self.user, self.password)
                    server.sendmail(self.from_email, to, msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed for {self.host}: {e.smtp_code}")
            return False
        except smtplib.SMTPRecipientsRefused:
            logger.error(f"SMTP recipient refused: {redact_email(to)}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP send to {redact_email(to)} failed: {type(e).__name__}: {e}")
            return False

        logger.info(f"Email sent: to={redact_email(to)} subject={subject!r}")
        return True
