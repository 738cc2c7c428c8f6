"""Service wiring shared by the application and its route handlers"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from yamlrg.auth.google import GoogleAuthService
from yamlrg.auth.identity import IdentityProvider
from yamlrg.config import Settings
from yamlrg.services.accounts import AccountService
from yamlrg.services.database_service import DocumentStore
from yamlrg.services.email_service import EmailService
from yamlrg.services.join_requests import JoinRequestService
from yamlrg.services.notifications import NotificationDispatcher
from yamlrg.services.policy import AuthorizationPolicy
from yamlrg.services.repositories import (
    JoinRequestRepository,
    PresentationRequestRepository,
    UserAccountRepository,
    WorkshopRepository,
)
from yamlrg.services.workshops import WorkshopService


@dataclass
class Services:
    settings: Settings
    store: DocumentStore
    policy: AuthorizationPolicy
    identity_provider: IdentityProvider
    google_auth: GoogleAuthService
    notifier: NotificationDispatcher
    join_requests: JoinRequestService
    accounts: AccountService
    workshops: WorkshopService


def build_services(
    settings: Settings,
    store: Optional[DocumentStore] = None,
    email_service=None,
) -> Services:
    """Wire every service from settings. Tests pass an in-memory store and a stub sender."""
    store = store or DocumentStore(settings.database_path)
    # Allow-list is read once here, never at decision time
    policy = AuthorizationPolicy(settings.admin_email_list)

    identity_provider = IdentityProvider(
        store,
        settings.portal_secret_key,
        settings.access_token_expire_minutes,
    )
    notifier = NotificationDispatcher(
        email_service or EmailService.from_settings(settings),
        chat_url=settings.community_chat_url,
        profile_url=settings.profile_url,
    )
    users = UserAccountRepository(store)

    return Services(
        settings=settings,
        store=store,
        policy=policy,
        identity_provider=identity_provider,
        google_auth=GoogleAuthService(
            settings.google_client_id,
            settings.google_client_secret,
            settings.google_redirect_uri,
        ),
        notifier=notifier,
        join_requests=JoinRequestService(
            JoinRequestRepository(store), users, policy, notifier
        ),
        accounts=AccountService(users, policy, identity_provider),
        workshops=WorkshopService(
            WorkshopRepository(store), PresentationRequestRepository(store), policy
        ),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
