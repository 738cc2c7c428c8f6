"""Authorization policy.

Every decision is taken against the admin allow-list injected at startup.
The ``isAdmin`` flag stored on user documents is informational only: a
member can write their own document, so it can never be trusted here.
"""

import logging
from typing import FrozenSet, Iterable, Optional

from yamlrg.errors import Unauthorized
from yamlrg.models.user import APPROVAL_FIELDS

logger = logging.getLogger(__name__)


class AuthorizationPolicy:
    """Pure allow-list predicates, no side effects"""

    def __init__(self, admin_emails: Iterable[str]):
        self._admin_emails: FrozenSet[str] = frozenset(admin_emails)

    @property
    def admin_emails(self) -> FrozenSet[str]:
        return self._admin_emails

    def is_admin(self, email: Optional[str]) -> bool:
        """Exact, case-sensitive allow-list membership"""
        return bool(email) and email in self._admin_emails

    def can_write_approval_fields(self, actor_email: Optional[str]) -> bool:
        return self.is_admin(actor_email)

    def can_mutate_join_request(self, actor_email: Optional[str]) -> bool:
        return self.is_admin(actor_email)

    def can_manage_workshop_or_presentation(self, actor_email: Optional[str]) -> bool:
        return self.is_admin(actor_email)

    def strip_approval_fields(self, actor_email: Optional[str], updates: dict) -> dict:
        """Drop approval fields from a non-admin update payload"""
        if self.can_write_approval_fields(actor_email):
            return dict(updates)

        stripped = {k: v for k, v in updates.items() if k not in APPROVAL_FIELDS}
        dropped = sorted(set(updates) - set(stripped))
        if dropped:
            logger.info(f"Dropped approval fields {dropped} from update by {actor_email}")
        return stripped

    def require(
        self,
        allowed: bool,
        actor: Optional[str],
        operation: str,
        target: Optional[str] = None,
        message: str = "Admin access required",
    ):
        """Raise Unauthorized unless a predicate held"""
        if not allowed:
            logger.warning(f"Unauthorized {operation} by {actor} on {target}")
            raise Unauthorized(message, operation=operation, actor=actor, target=target)

    def require_admin(
        self,
        actor_email: Optional[str],
        operation: str,
        target: Optional[str] = None,
    ):
        self.require(self.is_admin(actor_email), actor_email, operation, target)
