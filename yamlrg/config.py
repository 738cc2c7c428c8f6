"""Application configuration loaded from the environment"""

import logging
from functools import lru_cache
from typing import FrozenSet, Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "dev-secret-change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "YAMLRG Members Portal API"
    debug: bool = False
    domain: str = "localhost"
    port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database
    database_path: str = "/app/data/yamlrg.json"

    # Security
    portal_secret_key: str = DEFAULT_SECRET_KEY
    access_token_expire_minutes: int = 60  # short-lived identity tokens

    # Comma separated, case-sensitive allow-list of admin emails
    admin_emails: str = ""

    # Google sign-in (OpenID Connect)
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None

    # Email
    email_provider: str = "sendgrid"  # "sendgrid" or "office365"
    email_from_address: Optional[str] = None
    email_from_name: str = "YAMLRG"
    sendgrid_api_key: Optional[str] = None
    smtp_host: str = "smtp.office365.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None

    # Welcome email content
    community_chat_url: str = "https://chat.whatsapp.com/DMqsymB8YmFD5za7R9IdwO"
    profile_url: str = "https://yamlrg.com/profile"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def admin_email_list(self) -> FrozenSet[str]:
        """Parsed admin allow-list. Entries are trimmed but case is preserved."""
        return frozenset(
            email.strip() for email in self.admin_emails.split(",") if email.strip()
        )

    @property
    def google_redirect_uri(self) -> str:
        if self.port in (80, 443):
            return f"https://{self.domain}/api/auth/callback"
        return f"http://{self.domain}:{self.port}/api/auth/callback"


def validate_production_settings(settings: Settings) -> list:
    """Validate that all required settings are configured for production"""
    errors = []

    if settings.portal_secret_key == DEFAULT_SECRET_KEY:
        errors.append("PORTAL_SECRET_KEY must be changed from default value")

    if not settings.admin_email_list:
        errors.append("ADMIN_EMAILS is empty; nobody can approve join requests")

    if not settings.google_client_id or not settings.google_client_secret:
        errors.append("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required for sign-in")

    if not settings.email_from_address:
        errors.append("EMAIL_FROM_ADDRESS is required to send welcome emails")

    if settings.email_provider == "sendgrid" and not settings.sendgrid_api_key:
        errors.append("SENDGRID_API_KEY is required when EMAIL_PROVIDER=sendgrid")

    return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    settings = Settings()

    if not settings.debug:
        for error in validate_production_settings(settings):
            logger.warning(f"Production config warning: {error}")

    return settings
