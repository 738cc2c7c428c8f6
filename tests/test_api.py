"""HTTP API tests

Exercise routing, bearer authentication and the mapping of service errors to
status codes. Lifecycle details are covered by the service tests.
"""

import base64
import json
from urllib.parse import parse_qs, urlparse

import pytest

from yamlrg.models.join_request import JoinRequestStatus
from tests.factories import (
    ADMIN_EMAIL,
    add_request,
    auth_headers,
    join_request_payload,
    seed_account,
    sign_in,
    workshop_payload,
)


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestSendApprovalEmail:
    """POST /api/send-approval-email"""

    URL = "/api/send-approval-email"

    @pytest.mark.asyncio
    async def test_missing_bearer_returns_401(self, test_client, email_service):
        response = await test_client.post(self.URL, json={"email": "new@example.com"})

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert email_service.sent == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Bearer not-a-jwt", "Basic abc", "Token xyz"])
    async def test_malformed_bearer_returns_401(self, test_client, header):
        response = await test_client.post(
            self.URL, json={"email": "new@example.com"}, headers={"Authorization": header}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin_returns_403(self, test_client, member_headers, email_service):
        response = await test_client.post(
            self.URL, json={"email": "new@example.com"}, headers=member_headers
        )

        assert response.status_code == 403
        assert email_service.sent == []

    @pytest.mark.asyncio
    async def test_provider_error_returns_400_with_detail(
        self, test_client, admin_headers, email_service
    ):
        email_service.fail_with = "The from address does not match a verified Sender Identity"

        response = await test_client.post(
            self.URL, json={"email": "new@example.com"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert "verified Sender Identity" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_unexpected_failure_returns_500(
        self, test_client, admin_headers, services, monkeypatch
    ):
        def explode(to_email):
            raise RuntimeError("template missing")

        monkeypatch.setattr(services.notifier, "send_approval_email", explode)

        response = await test_client.post(
            self.URL, json={"email": "new@example.com"}, headers=admin_headers
        )

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    @pytest.mark.asyncio
    async def test_admin_sends_email(self, test_client, admin_headers, email_service):
        response = await test_client.post(
            self.URL, json={"email": "new@example.com"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert email_service.sent[0]["to"] == "new@example.com"


class TestJoinRequestRoutes:
    @pytest.mark.asyncio
    async def test_public_submission(self, test_client):
        response = await test_client.post("/api/join-requests", json=join_request_payload())

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_invalid_submission_returns_400(self, test_client):
        response = await test_client.post(
            "/api/join-requests", json=join_request_payload(email="nope")
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_submission_returns_400(self, test_client):
        await test_client.post("/api/join-requests", json=join_request_payload())
        response = await test_client.post("/api/join-requests", json=join_request_payload())

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_listing_requires_admin(self, test_client, member_headers, admin_headers):
        await test_client.post("/api/join-requests", json=join_request_payload())

        forbidden = await test_client.get("/api/join-requests", headers=member_headers)
        allowed = await test_client.get("/api/join-requests", headers=admin_headers)

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert [r["email"] for r in allowed.json()] == ["a@x.com"]

    @pytest.mark.asyncio
    async def test_decision_reports_email_warning(
        self, test_client, admin_headers, email_service
    ):
        created = await test_client.post("/api/join-requests", json=join_request_payload())
        request_id = created.json()["id"]
        email_service.fail_with = "rate limited"

        response = await test_client.post(
            f"/api/join-requests/{request_id}/decision",
            json={"outcome": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["request"]["status"] == "approved"
        assert data["request"]["approvedBy"] == ADMIN_EMAIL
        assert "rate limited" in data["warning"]

    @pytest.mark.asyncio
    async def test_decision_on_missing_request(self, test_client, admin_headers):
        response = await test_client.post(
            "/api/join-requests/missing/decision",
            json={"outcome": "rejected"},
            headers=admin_headers,
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_revert(self, test_client, admin_headers):
        created = await test_client.post("/api/join-requests", json=join_request_payload())
        request_id = created.json()["id"]
        await test_client.post(
            f"/api/join-requests/{request_id}/decision",
            json={"outcome": "rejected"},
            headers=admin_headers,
        )

        response = await test_client.post(
            f"/api/join-requests/{request_id}/revert", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "pending"


class TestSignIn:
    """OAuth callback and session reconciliation"""

    @pytest.fixture
    def google_claims(self, services, monkeypatch):
        claims = {
            "sub": "google-123",
            "email": "a@x.com",
            "email_verified": True,
            "name": "A",
            "picture": None,
        }

        async def authenticate(code):
            return claims

        monkeypatch.setattr(services.google_auth, "authenticate", authenticate)
        return claims

    @pytest.mark.asyncio
    async def test_approved_member_gets_token(self, test_client, services, google_claims):
        add_request(services, "a@x.com", JoinRequestStatus.APPROVED, "2024-01-01T00:00:00+00:00")

        response = await test_client.get("/api/auth/callback", params={"code": "abc"})

        assert response.status_code == 307
        location = urlparse(response.headers["location"])
        assert location.path == "/profile"
        token = parse_qs(location.query)["token"][0]
        assert services.identity_provider.verify_token(token).uid == "google-123"
        assert services.accounts.get_account("google-123").is_approved is True

    @pytest.mark.asyncio
    async def test_pending_member_is_sent_to_success_page(
        self, test_client, services, google_claims
    ):
        add_request(services, "a@x.com", JoinRequestStatus.PENDING, "2024-01-01T00:00:00+00:00")

        response = await test_client.get("/api/auth/callback", params={"code": "abc"})

        assert response.headers["location"] == "http://frontend.local:3000/join/success"
        assert services.accounts.get_account("google-123") is None

    @pytest.mark.asyncio
    async def test_unknown_person_is_sent_to_join_form(self, test_client, google_claims):
        response = await test_client.get("/api/auth/callback", params={"code": "abc"})

        assert response.headers["location"] == "http://frontend.local:3000/join"
        assert "token" not in response.headers["location"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("verified", [False, None])
    async def test_unverified_email_gets_no_token(
        self, test_client, services, google_claims, verified
    ):
        google_claims["email_verified"] = verified
        google_claims["email"] = ADMIN_EMAIL
        add_request(services, ADMIN_EMAIL, JoinRequestStatus.APPROVED, "2024-01-01T00:00:00+00:00")

        response = await test_client.get("/api/auth/callback", params={"code": "abc"})

        assert response.status_code == 401
        assert "location" not in response.headers
        assert services.accounts.get_account("google-123") is None
        assert services.identity_provider.get_identity("google-123") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("claim, expected", [(True, True), ("true", True), (False, False)])
    async def test_authenticate_reads_email_verified(self, services, monkeypatch, claim, expected):
        payload = {"sub": "google-123", "email": "a@x.com", "email_verified": claim}
        body = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")

        async def exchange(code):
            return {"id_token": f"header.{body}.signature"}

        monkeypatch.setattr(services.google_auth, "exchange_code_for_token", exchange)

        claims = await services.google_auth.authenticate("abc")

        assert claims["email_verified"] is expected

    @pytest.mark.asyncio
    async def test_callback_without_code(self, test_client):
        response = await test_client.get("/api/auth/callback")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_login_without_google_credentials(self, test_client):
        response = await test_client.get("/api/auth/login")
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_session_creates_account(self, test_client, services):
        add_request(services, "a@x.com", JoinRequestStatus.APPROVED, "2024-01-01T00:00:00+00:00")
        identity = sign_in(services, "uid-a", "a@x.com")
        headers = auth_headers(services, identity)

        session = await test_client.post("/api/auth/session", headers=headers)
        me = await test_client.get("/api/users/me", headers=headers)

        assert session.json()["outcome"] == "created"
        assert session.json()["signedIn"] is True
        assert me.status_code == 200
        assert me.json()["isApproved"] is True

    @pytest.mark.asyncio
    async def test_session_without_request(self, test_client, member_headers):
        response = await test_client.post("/api/auth/session", headers=member_headers)

        assert response.json() == {
            "outcome": "no_request_notice",
            "signedIn": False,
            "user": None,
        }


class TestUserRoutes:
    @pytest.mark.asyncio
    async def test_me_without_account(self, test_client, member_headers):
        response = await test_client.get("/api/users/me", headers=member_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_member_patch_cannot_self_approve(
        self, test_client, services, member, member_headers
    ):
        seed_account(services, member.uid, member.email)

        response = await test_client.patch(
            f"/api/users/{member.uid}",
            json={"displayName": "Renamed", "isApproved": True, "approvedBy": member.email},
            headers=member_headers,
        )

        assert response.status_code == 200
        assert response.json()["displayName"] == "Renamed"
        assert response.json()["isApproved"] is False
        assert services.accounts.get_account(member.uid).is_approved is False

    @pytest.mark.asyncio
    async def test_patch_with_nulls(self, test_client, services, member, member_headers):
        seed_account(services, member.uid, member.email)

        response = await test_client.patch(
            f"/api/users/{member.uid}",
            json={"displayName": None, "status": None, "showInMembers": None},
            headers=member_headers,
        )
        me = await test_client.get("/api/users/me", headers=member_headers)

        assert response.status_code == 200
        assert response.json()["displayName"] is None
        assert response.json()["showInMembers"] is False
        assert response.json()["status"]["isHiring"] is False
        assert me.status_code == 200

    @pytest.mark.asyncio
    async def test_approval_routes_require_admin(
        self, test_client, services, member, member_headers, admin_headers
    ):
        seed_account(services, member.uid, member.email)

        forbidden = await test_client.post(
            f"/api/users/{member.uid}/approval", headers=member_headers
        )
        approved = await test_client.post(
            f"/api/users/{member.uid}/approval", headers=admin_headers
        )
        removed = await test_client.delete(
            f"/api/users/{member.uid}/approval", headers=admin_headers
        )

        assert forbidden.status_code == 403
        assert approved.json()["isApproved"] is True
        assert removed.json()["isApproved"] is False
        assert removed.json()["approvedBy"] is None

    @pytest.mark.asyncio
    async def test_job_posting_flow(
        self, test_client, services, member, member_headers, admin_headers
    ):
        seed_account(services, member.uid, member.email)
        job = {"title": "ML Engineer", "company": "Acme", "link": "https://acme.example.com/1"}

        refused = await test_client.post(
            f"/api/users/{member.uid}/jobs", json=job, headers=member_headers
        )
        await test_client.post(f"/api/users/{member.uid}/approval", headers=admin_headers)
        posted = await test_client.post(
            f"/api/users/{member.uid}/jobs", json=job, headers=member_headers
        )
        jobs = await test_client.get("/api/jobs", headers=member_headers)

        assert refused.status_code == 403
        assert posted.status_code == 201
        assert [j["title"] for j in jobs.json()] == ["ML Engineer"]

    @pytest.mark.asyncio
    async def test_admin_overview(self, test_client, services, admin, admin_headers):
        seed_account(services, admin.uid, admin.email)
        seed_account(services, "u1", "u1@example.com")

        response = await test_client.get(
            "/api/users", params={"sort_by": "name"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert [a["uid"] for a in response.json()["admins"]] == [admin.uid]
        assert [a["uid"] for a in response.json()["members"]] == ["u1"]

    @pytest.mark.asyncio
    async def test_delete_me_revokes_token(self, test_client, services, member, member_headers):
        seed_account(services, member.uid, member.email)

        deleted = await test_client.delete("/api/users/me", headers=member_headers)
        after = await test_client.get("/api/users/me", headers=member_headers)

        assert deleted.status_code == 200
        assert after.status_code == 401


class TestMemberRoutes:
    @pytest.mark.asyncio
    async def test_directory_filters(self, test_client, services, admin, admin_headers):
        seed_account(services, admin.uid, admin.email, display_name="Admin")
        seed_account(
            services, "u1", "hiring@example.com",
            display_name="Hiring Person", is_approved=True, show_in_members=True,
            status={"isHiring": True},
        )
        seed_account(
            services, "u2", "quiet@example.com",
            display_name="Quiet Person", is_approved=True, show_in_members=True,
        )

        everyone = await test_client.get("/api/members", headers=admin_headers)
        hiring = await test_client.get(
            "/api/members", params={"flags": "isHiring"}, headers=admin_headers
        )
        search = await test_client.get(
            "/api/members", params={"search": "quiet"}, headers=admin_headers
        )

        assert {m["uid"] for m in everyone.json()} == {admin.uid, "u1", "u2"}
        assert [m["uid"] for m in hiring.json()] == ["u1"]
        assert [m["uid"] for m in search.json()] == ["u2"]

    @pytest.mark.asyncio
    async def test_growth(self, test_client, services, admin, admin_headers):
        seed_account(services, admin.uid, admin.email, joined_at="2024-01-01T00:00:00+00:00")

        response = await test_client.get("/api/members/growth", headers=admin_headers)

        assert response.json() == [{"date": "2024-01-01", "count": 1}]

    @pytest.mark.asyncio
    async def test_directory_requires_sign_in(self, test_client):
        response = await test_client.get("/api/members")
        assert response.status_code == 401


class TestWorkshopRoutes:
    @pytest.mark.asyncio
    async def test_workshops_are_public(self, test_client):
        response = await test_client.get("/api/workshops")

        assert response.status_code == 200
        assert response.json() == {
            "workshops": [],
            "upcoming": [],
            "past": [],
            "canManage": False,
        }

    @pytest.mark.asyncio
    async def test_admin_viewer_can_manage(self, test_client, admin_headers, member_headers):
        admin_view = await test_client.get("/api/workshops", headers=admin_headers)
        member_view = await test_client.get("/api/workshops", headers=member_headers)

        assert admin_view.json()["canManage"] is True
        assert member_view.json()["canManage"] is False

    @pytest.mark.asyncio
    async def test_only_admins_create(self, test_client, member_headers, admin_headers):
        forbidden = await test_client.post(
            "/api/workshops", json=workshop_payload(), headers=member_headers
        )
        created = await test_client.post(
            "/api/workshops", json=workshop_payload(), headers=admin_headers
        )

        assert forbidden.status_code == 403
        assert created.status_code == 201
        workshop_id = created.json()["id"]

        fetched = await test_client.get(f"/api/workshops/{workshop_id}")
        assert fetched.json()["resources"] == ["https://arxiv.org/abs/1706.03762"]

    @pytest.mark.asyncio
    async def test_patch_with_nulls(self, test_client, admin_headers):
        created = await test_client.post(
            "/api/workshops", json=workshop_payload(), headers=admin_headers
        )
        workshop_id = created.json()["id"]

        cleared = await test_client.patch(
            f"/api/workshops/{workshop_id}", json={"description": None}, headers=admin_headers
        )
        untyped = await test_client.patch(
            f"/api/workshops/{workshop_id}", json={"type": None}, headers=admin_headers
        )
        listing = await test_client.get("/api/workshops")

        assert cleared.status_code == 200
        assert cleared.json()["description"] == ""
        assert untyped.status_code == 400
        assert listing.status_code == 200
        assert listing.json()["workshops"][0]["type"] == "paper"

    @pytest.mark.asyncio
    async def test_non_iso_date_rejected(self, test_client, admin_headers):
        response = await test_client.post(
            "/api/workshops", json=workshop_payload(date="Jan 5 2030"), headers=admin_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_workshop(self, test_client):
        response = await test_client.get("/api/workshops/nope")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_presentation_request_flow(self, test_client, member_headers, admin_headers):
        submitted = await test_client.post(
            "/api/presentation-requests",
            json={"title": "My paper", "description": "", "type": "paper"},
            headers=member_headers,
        )
        request_id = submitted.json()["id"]

        forbidden = await test_client.get("/api/presentation-requests", headers=member_headers)
        done = await test_client.put(
            f"/api/presentation-requests/{request_id}/status",
            json={"status": "done"},
            headers=admin_headers,
        )

        assert submitted.status_code == 201
        assert forbidden.status_code == 403
        assert done.json()["status"] == "done"
        assert done.json()["completedBy"] == ADMIN_EMAIL
