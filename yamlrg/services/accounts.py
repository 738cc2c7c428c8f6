"""User account lifecycle: approval, profile, visibility, jobs and deletion"""

import logging
from typing import Dict, List

from yamlrg.auth.identity import Identity, IdentityProvider
from yamlrg.errors import DownstreamFailure, NotFound, ValidationError
from yamlrg.models.user import JobListing, UserAccount
from yamlrg.services import views
from yamlrg.services.database_service import timestamp
from yamlrg.services.policy import AuthorizationPolicy
from yamlrg.services.repositories import UserAccountRepository
from yamlrg.services.validators import optional_url, require_text, require_url

logger = logging.getLogger(__name__)

# Never writable through a profile update, whoever the actor is.
# Job listings go through add_job_listing/remove_job_listing.
PROTECTED_FIELDS = ("uid", "id", "email", "isAdmin", "jobListings")

ADMIN_SORT_OPTIONS = ("name", "approval", "date")

# Flags that keep their stored value when a payload sends null
NON_NULLABLE_FLAGS = ("showInMembers", "profileCompleted", "isApproved")


class AccountService:
    """Operations on persisted user accounts"""

    def __init__(
        self,
        users: UserAccountRepository,
        policy: AuthorizationPolicy,
        identity_provider: IdentityProvider,
    ):
        self.users = users
        self.policy = policy
        self.identity_provider = identity_provider

    def get_account(self, uid: str):
        return self.users.get(uid)

    def _get_or_fail(self, uid: str, operation: str, actor: Identity) -> UserAccount:
        account = self.users.get(uid)
        if account is None:
            raise NotFound("User not found", operation=operation, actor=actor.email, target=uid)
        return account

    def _require_self_or_admin(self, uid: str, actor: Identity, operation: str):
        self.policy.require(
            actor.uid == uid or self.policy.is_admin(actor.email),
            actor.email,
            operation,
            uid,
            message="You can only change your own account",
        )

    # =========================================================================
    # Directory
    # =========================================================================

    def directory(self, viewer: Identity) -> List[UserAccount]:
        """Members the viewer is allowed to see.

        Viewers that are neither admins nor approved only see the admins.
        Everyone else sees members who opted in plus the admins.
        """
        admins = self.users.list_by_emails(self.policy.admin_emails)

        viewer_account = self.users.get(viewer.uid)
        viewer_approved = viewer_account is not None and viewer_account.is_approved
        if not self.policy.is_admin(viewer.email) and not viewer_approved:
            return admins

        members: Dict[str, UserAccount] = {}
        for account in self.users.list_visible() + admins:
            members[account.uid] = account
        return list(members.values())

    def admin_overview(self, actor: Identity, sort_by: str = "approval") -> dict:
        """Every account, admins first, for the admin dashboard"""
        operation = "user.admin_overview"
        self.policy.require_admin(actor.email, operation)
        if sort_by not in ADMIN_SORT_OPTIONS:
            raise ValidationError(
                f"sort_by must be one of {', '.join(ADMIN_SORT_OPTIONS)}",
                operation=operation,
                actor=actor.email,
            )

        accounts = self.users.list_all()
        admins = [a for a in accounts if self.policy.is_admin(a.email)]
        members = [a for a in accounts if not self.policy.is_admin(a.email)]
        admins.sort(key=views.display_name_key)
        return {"admins": admins, "members": views.sort_accounts(members, sort_by)}

    # =========================================================================
    # Approval
    # =========================================================================

    def approve(self, uid: str, actor_email: str) -> UserAccount:
        operation = "user.approve"
        self.policy.require(
            self.policy.can_write_approval_fields(actor_email), actor_email, operation, uid
        )
        updated = self.users.update(uid, {
            "isApproved": True,
            "approvedAt": timestamp(),
            "approvedBy": actor_email,
        })
        logger.info(f"User {uid} approved by {actor_email}")
        return updated

    def remove_approval(self, uid: str, actor_email: str) -> UserAccount:
        operation = "user.remove_approval"
        self.policy.require(
            self.policy.can_write_approval_fields(actor_email), actor_email, operation, uid
        )
        # showInMembers and profileCompleted are left alone
        updated = self.users.update(uid, {
            "isApproved": False,
            "approvedAt": None,
            "approvedBy": None,
        })
        logger.info(f"User {uid} approval removed by {actor_email}")
        return updated

    # =========================================================================
    # Profile
    # =========================================================================

    def update_profile(self, uid: str, actor: Identity, updates: dict) -> UserAccount:
        """Self-service profile update; admins may update anyone"""
        operation = "user.update_profile"
        self._require_self_or_admin(uid, actor, operation)
        account = self._get_or_fail(uid, operation, actor)

        safe_updates = {
            k: v for k, v in updates.items()
            if k not in PROTECTED_FIELDS and not (k in NON_NULLABLE_FLAGS and v is None)
        }
        safe_updates = self.policy.strip_approval_fields(actor.email, safe_updates)

        if "linkedinUrl" in safe_updates:
            safe_updates["linkedinUrl"] = optional_url(
                safe_updates["linkedinUrl"], "linkedinUrl", operation
            )
        if "status" in safe_updates:
            flags = account.status.to_document()
            flags.update({k: v for k, v in (safe_updates["status"] or {}).items() if v is not None})
            safe_updates["status"] = flags

        safe_updates["lastUpdate"] = timestamp()
        updated = self.users.update(uid, safe_updates)
        logger.info(f"User {uid} profile updated by {actor.email}: {sorted(safe_updates)}")
        return updated

    def set_visibility(self, uid: str, actor: Identity, show: bool) -> UserAccount:
        operation = "user.set_visibility"
        self._require_self_or_admin(uid, actor, operation)
        updated = self.users.update(uid, {"showInMembers": show})
        logger.info(f"User {uid} visibility set to {show} by {actor.email}")
        return updated

    def set_profile_completed(self, uid: str, actor: Identity, completed: bool) -> UserAccount:
        operation = "user.set_profile_completed"
        self._require_self_or_admin(uid, actor, operation)
        updated = self.users.update(uid, {"profileCompleted": completed})
        logger.info(f"User {uid} profileCompleted set to {completed} by {actor.email}")
        return updated

    # =========================================================================
    # Job listings
    # =========================================================================

    def add_job_listing(
        self, uid: str, actor: Identity, title: str, company: str, link: str
    ) -> JobListing:
        operation = "user.add_job_listing"
        self._require_self_or_admin(uid, actor, operation)
        account = self._get_or_fail(uid, operation, actor)
        self.policy.require(
            account.is_approved or self.policy.is_admin(actor.email),
            actor.email,
            operation,
            uid,
            message="You must be an approved member to post jobs",
        )

        job = JobListing(
            title=require_text(title, "title", operation),
            company=require_text(company, "company", operation),
            link=require_url(link, "link", operation),
            posted_at=timestamp(),
        )
        listings = [j.to_document() for j in account.job_listings] + [job.to_document()]
        self.users.update(uid, {"jobListings": listings})
        logger.info(f"Job '{job.title}' posted on {uid} by {actor.email}")
        return job

    def remove_job_listing(self, uid: str, actor: Identity, index: int) -> JobListing:
        operation = "user.remove_job_listing"
        self._require_self_or_admin(uid, actor, operation)
        account = self._get_or_fail(uid, operation, actor)

        if index < 0 or index >= len(account.job_listings):
            raise NotFound(
                "Job listing not found",
                operation=operation,
                actor=actor.email,
                target=f"{uid}/jobListings/{index}",
            )

        listings = list(account.job_listings)
        removed = listings.pop(index)
        self.users.update(uid, {"jobListings": [j.to_document() for j in listings]})
        logger.info(f"Job '{removed.title}' removed from {uid} by {actor.email}")
        return removed

    def list_jobs(self) -> List[dict]:
        return views.flatten_jobs(self.users.list_all())

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete_account(self, uid: str, actor: Identity):
        """Delete the profile document, then the identity credential.

        A failure in the second step is not rolled back: the profile stays
        deleted and the orphaned identity is logged for manual cleanup.
        """
        operation = "user.delete_account"
        self.policy.require(
            actor.uid == uid,
            actor.email,
            operation,
            uid,
            message="You can only delete your own account",
        )

        self.users.delete(uid)
        logger.info(f"User document {uid} deleted")

        try:
            self.identity_provider.delete_identity(uid)
        except Exception as exc:
            logger.error(
                f"Identity {uid} orphaned: profile deleted but credential removal failed: {exc}",
                exc_info=True,
            )
            raise DownstreamFailure(
                "Your profile was deleted but your sign-in could not be removed",
                operation=operation,
                actor=actor.email,
                target=uid,
            ) from exc
