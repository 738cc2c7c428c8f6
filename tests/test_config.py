"""Settings tests"""

from yamlrg.config import DEFAULT_SECRET_KEY, Settings, validate_production_settings


def test_admin_email_list_is_trimmed_and_case_preserved():
    settings = Settings(admin_emails=" admin@yamlrg.com, ,Organiser@YAMLRG.com ")

    assert settings.admin_email_list == frozenset({"admin@yamlrg.com", "Organiser@YAMLRG.com"})


def test_empty_admin_list():
    assert Settings(admin_emails="").admin_email_list == frozenset()


def test_production_warnings():
    settings = Settings(
        portal_secret_key=DEFAULT_SECRET_KEY,
        admin_emails="",
        google_client_id=None,
        google_client_secret=None,
        email_from_address=None,
        sendgrid_api_key=None,
        email_provider="sendgrid",
    )

    warnings = validate_production_settings(settings)

    assert any("PORTAL_SECRET_KEY" in w for w in warnings)
    assert any("ADMIN_EMAILS" in w for w in warnings)
    assert any("SENDGRID_API_KEY" in w for w in warnings)


def test_fully_configured_settings_have_no_warnings():
    settings = Settings(
        portal_secret_key="a-real-secret",
        admin_emails="admin@yamlrg.com",
        google_client_id="client",
        google_client_secret="secret",
        email_from_address="hello@yamlrg.com",
        sendgrid_api_key="SG.key",
        email_provider="sendgrid",
    )

    assert validate_production_settings(settings) == []


def test_redirect_uri_follows_port():
    assert Settings(domain="yamlrg.com", port=443).google_redirect_uri == (
        "https://yamlrg.com/api/auth/callback"
    )
    assert Settings(domain="localhost", port=8000).google_redirect_uri == (
        "http://localhost:8000/api/auth/callback"
    )
