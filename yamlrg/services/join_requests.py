"""Join request lifecycle.

A request moves ``pending -> approved`` or ``pending -> rejected`` by admin
decision. Admins may revert any request back to ``pending``; there is no
terminal state. The first sign-in of an identity is reconciled against the
requests filed under its email to decide whether an account is created.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from yamlrg.auth.identity import Identity
from yamlrg.errors import NotFound, ValidationError
from yamlrg.models.join_request import JoinRequest, JoinRequestStatus
from yamlrg.models.user import UserAccount, UserStatus
from yamlrg.services.database_service import timestamp
from yamlrg.services.notifications import DispatchResult, NotificationDispatcher
from yamlrg.services.policy import AuthorizationPolicy
from yamlrg.services.repositories import JoinRequestRepository, UserAccountRepository
from yamlrg.services.validators import (
    MAX_INTERESTS_LENGTH,
    limit_length,
    require_email,
    require_text,
    require_url,
)

logger = logging.getLogger(__name__)

DECISION_OUTCOMES = (JoinRequestStatus.APPROVED, JoinRequestStatus.REJECTED)


class ReconcileResult(str, Enum):
    CREATED = "created"
    PENDING_NOTICE = "pending_notice"
    NO_REQUEST_NOTICE = "no_request_notice"
    EXISTS = "exists"


@dataclass
class DecisionOutcome:
    request: JoinRequest
    notification: Optional[DispatchResult] = None

    @property
    def warning(self) -> Optional[str]:
        return self.notification.warning if self.notification else None


class JoinRequestService:
    """Submission, admin decisions and first-login reconciliation"""

    def __init__(
        self,
        requests: JoinRequestRepository,
        users: UserAccountRepository,
        policy: AuthorizationPolicy,
        notifier: NotificationDispatcher,
    ):
        self.requests = requests
        self.users = users
        self.policy = policy
        self.notifier = notifier

    def submit(self, email: str, name: str, interests: str, linkedin_url: str) -> str:
        """File a new pending request and return its id"""
        operation = "join_request.submit"
        email = require_email(email, operation)
        name = require_text(name, "name", operation)
        interests = limit_length((interests or "").strip(), "interests", MAX_INTERESTS_LENGTH, operation)
        linkedin_url = require_url(linkedin_url, "linkedinUrl", operation)

        open_requests = [
            r for r in self.requests.find_by_email(email)
            if r.status in (JoinRequestStatus.PENDING, JoinRequestStatus.APPROVED)
        ]
        if open_requests:
            raise ValidationError(
                "A join request for this email is already on file",
                operation=operation,
                actor=email,
                target=open_requests[0].id,
            )

        request = JoinRequest(
            email=email,
            name=name,
            interests=interests,
            linkedin_url=linkedin_url,
            status=JoinRequestStatus.PENDING,
            created_at=timestamp(),
        )
        request_id = self.requests.add(request)
        logger.info(f"Join request {request_id} submitted for {email}")
        return request_id

    def list_requests(self, actor_email: str) -> List[JoinRequest]:
        self.policy.require(
            self.policy.can_mutate_join_request(actor_email), actor_email, "join_request.list"
        )
        return self.requests.list_all()

    def _get_or_fail(self, request_id: str, operation: str, actor_email: str) -> JoinRequest:
        request = self.requests.get(request_id)
        if request is None:
            raise NotFound(
                "Join request not found",
                operation=operation,
                actor=actor_email,
                target=request_id,
            )
        return request

    def decide(self, request_id: str, actor_email: str, outcome: str) -> DecisionOutcome:
        """Approve or reject a request. Approval triggers the welcome email."""
        operation = "join_request.decide"
        self.policy.require(
            self.policy.can_mutate_join_request(actor_email), actor_email, operation, request_id
        )

        try:
            outcome = JoinRequestStatus(outcome)
        except ValueError:
            outcome = None
        if outcome not in DECISION_OUTCOMES:
            raise ValidationError(
                "outcome must be 'approved' or 'rejected'",
                operation=operation,
                actor=actor_email,
                target=request_id,
            )

        self._get_or_fail(request_id, operation, actor_email)
        updated = self.requests.update(request_id, {
            "status": outcome.value,
            "approvedAt": timestamp(),
            "approvedBy": actor_email,
        })
        logger.info(f"Join request {request_id} {outcome.value} by {actor_email}")

        result = DecisionOutcome(request=updated)
        if outcome == JoinRequestStatus.APPROVED:
            result.notification = self.notifier.send_approval_email(updated.email)
            if result.warning:
                logger.warning(f"Join request {request_id} approved but {result.warning}")
        return result

    def revert(self, request_id: str, actor_email: str) -> JoinRequest:
        """Put a decided request back into the pending queue"""
        operation = "join_request.revert"
        self.policy.require(
            self.policy.can_mutate_join_request(actor_email), actor_email, operation, request_id
        )
        self._get_or_fail(request_id, operation, actor_email)

        # Same write shape as a decision
        updated = self.requests.update(request_id, {
            "status": JoinRequestStatus.PENDING.value,
            "approvedAt": timestamp(),
            "approvedBy": actor_email,
        })
        logger.info(f"Join request {request_id} reverted to pending by {actor_email}")
        return updated

    def resend_welcome_email(self, request_id: str, actor_email: str) -> DispatchResult:
        operation = "join_request.resend_welcome_email"
        self.policy.require(
            self.policy.can_mutate_join_request(actor_email), actor_email, operation, request_id
        )
        request = self._get_or_fail(request_id, operation, actor_email)
        if request.status != JoinRequestStatus.APPROVED:
            raise ValidationError(
                "Welcome emails can only be sent for approved requests",
                operation=operation,
                actor=actor_email,
                target=request_id,
            )
        return self.notifier.send_approval_email(request.email)

    def reconcile_on_first_login(
        self, identity: Identity
    ) -> Tuple[ReconcileResult, Optional[UserAccount]]:
        """Materialize an account for an identity with an approved request.

        No-op for identities that already have an account. Otherwise the
        caller must sign the identity out unless the result is ``created``.
        """
        existing = self.users.get(identity.uid)
        if existing is not None:
            return ReconcileResult.EXISTS, existing

        if not identity.email:
            logger.info(f"Identity {identity.uid} has no email, cannot reconcile")
            return ReconcileResult.NO_REQUEST_NOTICE, None

        requests = self.requests.find_by_email(identity.email)
        approved = [r for r in requests if r.status == JoinRequestStatus.APPROVED]

        if approved:
            request = approved[0]
            account = UserAccount(
                uid=identity.uid,
                email=identity.email,
                display_name=request.name or identity.display_name,
                photo_url=identity.photo_url,
                is_approved=True,
                is_admin=self.policy.is_admin(identity.email),
                show_in_members=False,
                profile_completed=False,
                linkedin_url=request.linkedin_url or "",
                status=UserStatus(),
                joined_at=request.created_at,
                approved_at=request.approved_at,
                approved_by=request.approved_by,
                job_listings=[],
            )
            created = self.users.create(account)
            logger.info(f"Account {identity.uid} created from join request {request.id}")
            return ReconcileResult.CREATED, created

        if requests:
            logger.info(f"Sign-in by {identity.email} refused: request under review")
            return ReconcileResult.PENDING_NOTICE, None

        logger.info(f"Sign-in by {identity.email} refused: no join request")
        return ReconcileResult.NO_REQUEST_NOTICE, None
