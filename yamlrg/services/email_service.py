"""Outgoing email for member notifications.

Mail goes out through the configured provider first. When that provider
fails, any other provider that has credentials is tried before giving up.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import List, Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from yamlrg.config import Settings

logger = logging.getLogger(__name__)

SENDGRID = "sendgrid"
OFFICE365 = "office365"
PROVIDERS = (SENDGRID, OFFICE365)


class DeliveryError(Exception):
    """A single provider could not deliver a message"""


class EmailService:
    """Sends multipart (plain + HTML) mail through SendGrid or Office 365 SMTP"""

    def __init__(
        self,
        provider: str = SENDGRID,
        from_email: Optional[str] = None,
        from_name: str = "YAMLRG",
        sendgrid_api_key: Optional[str] = None,
        smtp_host: str = "smtp.office365.com",
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
    ):
        self.provider = provider.lower()
        self.from_email = from_email
        self.from_name = from_name
        self.sendgrid_api_key = sendgrid_api_key
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailService":
        return cls(
            provider=settings.email_provider,
            from_email=settings.email_from_address,
            from_name=settings.email_from_name,
            sendgrid_api_key=settings.sendgrid_api_key,
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
        )

    def is_configured(self, provider: str) -> bool:
        if not self.from_email:
            return False
        if provider == SENDGRID:
            return bool(self.sendgrid_api_key)
        if provider == OFFICE365:
            return bool(self.smtp_username and self.smtp_password)
        return False

    def delivery_order(self) -> List[str]:
        """Primary provider first, then every other configured provider"""
        primary = self.provider if self.provider in PROVIDERS else SENDGRID
        fallbacks = [p for p in PROVIDERS if p != primary and self.is_configured(p)]
        return [primary] + fallbacks

    # =========================================================================
    # Providers
    # =========================================================================

    def _send_with_sendgrid(self, to_email, subject, plain_content, html_content):
        mail = Mail(
            from_email=(self.from_email, self.from_name),
            to_emails=to_email,
            subject=subject,
            plain_text_content=plain_content,
            html_content=html_content,
        )
        try:
            response = SendGridAPIClient(self.sendgrid_api_key).send(mail)
        except Exception as exc:
            raise DeliveryError(str(exc)) from exc
        if not 200 <= response.status_code < 300:
            raise DeliveryError(f"SendGrid responded with {response.status_code}")

    def _send_with_office365(self, to_email, subject, plain_content, html_content):
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = to_email
        msg.attach(MIMEText(plain_content, "plain"))
        msg.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.sendmail(self.from_email, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(str(exc)) from exc

    # =========================================================================
    # Sending
    # =========================================================================

    def send_email(
        self,
        to_email: str,
        subject: str,
        plain_content: str,
        html_content: str,
    ) -> dict:
        """Deliver a message, trying providers in delivery order.

        Returns ``{"sent": True, "provider": ...}`` for the first provider
        that succeeds. Otherwise ``sent`` is False and ``error`` lists every
        provider's failure, primary first.
        """
        senders = {SENDGRID: self._send_with_sendgrid, OFFICE365: self._send_with_office365}
        errors = []

        for provider in self.delivery_order():
            if not self.is_configured(provider):
                errors.append(f"{provider}: not configured")
                continue
            try:
                senders[provider](to_email, subject, plain_content, html_content)
            except DeliveryError as exc:
                logger.error(f"Email to {to_email} via {provider} failed: {exc}")
                errors.append(f"{provider}: {exc}")
                continue
            logger.info(f"Email sent via {provider} to {to_email}")
            return {"sent": True, "provider": provider}

        return {"sent": False, "error": "; ".join(errors), "provider": self.delivery_order()[0]}
