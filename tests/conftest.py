"""Shared test fixtures for the YAMLRG portal API.

Every test gets a fresh in-memory document store, a fixed admin allow-list
and a stub email sender, wired through the same ``build_services`` the
application uses. HTTP tests call the app in-process through ASGITransport.
"""

import os
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before the application module is imported
os.environ["PORTAL_SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["ADMIN_EMAILS"] = "admin@yamlrg.com"
os.environ["DATABASE_PATH"] = "/tmp/test_yamlrg.json"
os.environ["DEBUG"] = "true"

from yamlrg.auth.identity import Identity  # noqa: E402
from yamlrg.config import Settings  # noqa: E402
from yamlrg.dependencies import build_services  # noqa: E402
from yamlrg.services.database_service import DocumentStore  # noqa: E402
from tests.factories import ADMIN_EMAIL, auth_headers, sign_in  # noqa: E402

TEST_SECRET = "test-secret-key-for-testing-only"


class StubEmailService:
    """Records outgoing mail instead of calling a provider"""

    def __init__(self):
        self.sent: List[dict] = []
        self.fail_with: Optional[str] = None
        self.raise_with: Optional[Exception] = None

    def send_email(self, to_email, subject, plain_content, html_content) -> dict:
        if self.raise_with:
            raise self.raise_with
        if self.fail_with:
            return {"sent": False, "error": self.fail_with, "provider": "stub"}
        self.sent.append({
            "to": to_email,
            "subject": subject,
            "plain": plain_content,
            "html": html_content,
        })
        return {"sent": True, "provider": "stub"}


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        debug=True,
        portal_secret_key=TEST_SECRET,
        admin_emails=ADMIN_EMAIL,
        frontend_url="http://frontend.local:3000",
        community_chat_url="https://chat.example.com/yamlrg",
        profile_url="https://yamlrg.com/profile",
    )


@pytest.fixture
def store():
    store = DocumentStore(in_memory=True)
    yield store
    store.close()


@pytest.fixture
def email_service() -> StubEmailService:
    return StubEmailService()


@pytest.fixture
def services(settings, store, email_service):
    return build_services(settings, store=store, email_service=email_service)


# =============================================================================
# Identity Fixtures
# =============================================================================

@pytest.fixture
def admin(services) -> Identity:
    return sign_in(services, "admin-uid", ADMIN_EMAIL, "Admin")


@pytest.fixture
def member(services) -> Identity:
    return sign_in(services, "member-uid", "member@example.com", "Member")


@pytest.fixture
def admin_headers(services, admin) -> dict:
    return auth_headers(services, admin)


@pytest.fixture
def member_headers(services, member) -> dict:
    return auth_headers(services, member)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(settings, services):
    from yamlrg.main import create_app

    return create_app(settings, services)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client calling the app in-process"""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
