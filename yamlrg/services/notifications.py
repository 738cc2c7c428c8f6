"""Welcome email dispatch for approved join requests"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

WELCOME_SUBJECT = "Welcome to YAMLRG!"


@dataclass
class DispatchResult:
    sent: bool
    error: Optional[str] = None
    provider: Optional[str] = None

    @property
    def warning(self) -> Optional[str]:
        if self.sent:
            return None
        return f"Welcome email was not sent: {self.error or 'unknown error'}"

    def to_dict(self) -> dict:
        return {"sent": self.sent, "error": self.error, "provider": self.provider}


class NotificationDispatcher:
    """Renders and sends the welcome email.

    Sending never raises: the approval it follows has already been committed,
    so any failure is returned to the caller as a warning instead.
    """

    def __init__(
        self,
        email_service,
        chat_url: str,
        profile_url: str,
        community_name: str = "YAMLRG",
    ):
        self.email_service = email_service
        self.chat_url = chat_url
        self.profile_url = profile_url
        self.community_name = community_name
        self.jinja = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "html.j2"]),
        )

    def render_welcome_email(self):
        context = {
            "community_name": self.community_name,
            "chat_url": self.chat_url,
            "profile_url": self.profile_url,
        }
        html_content = self.jinja.get_template("welcome_email.html.j2").render(**context)
        plain_content = self.jinja.get_template("welcome_email.txt.j2").render(**context)
        return WELCOME_SUBJECT, plain_content, html_content

    def send_approval_email(self, to_email: str) -> DispatchResult:
        try:
            subject, plain_content, html_content = self.render_welcome_email()
            result = self.email_service.send_email(to_email, subject, plain_content, html_content)
        except Exception as exc:
            logger.error(f"Welcome email to {to_email} failed: {exc}", exc_info=True)
            return DispatchResult(sent=False, error=str(exc))

        if not result.get("sent"):
            logger.warning(f"Welcome email to {to_email} not sent: {result.get('error')}")
        return DispatchResult(
            sent=bool(result.get("sent")),
            error=result.get("error"),
            provider=result.get("provider"),
        )
