"""Workshop catalogue and presentation requests"""

import logging
from typing import List, Optional

from yamlrg.auth.identity import Identity
from yamlrg.errors import NotFound, ValidationError
from yamlrg.models.workshop import PresentationRequest, Workshop
from yamlrg.services.database_service import timestamp
from yamlrg.services.policy import AuthorizationPolicy
from yamlrg.services.repositories import PresentationRequestRepository, WorkshopRepository
from yamlrg.services.validators import optional_url, require_iso_date, require_text

logger = logging.getLogger(__name__)


def clean_resources(resources: Optional[List[str]]) -> List[str]:
    return [r.strip() for r in (resources or []) if r and r.strip()]


class WorkshopService:
    def __init__(
        self,
        workshops: WorkshopRepository,
        presentations: PresentationRequestRepository,
        policy: AuthorizationPolicy,
    ):
        self.workshops = workshops
        self.presentations = presentations
        self.policy = policy

    def _require_manager(self, actor_email: str, operation: str, target: Optional[str] = None):
        self.policy.require(
            self.policy.can_manage_workshop_or_presentation(actor_email),
            actor_email,
            operation,
            target,
        )

    # =========================================================================
    # Workshops
    # =========================================================================

    def list_workshops(self) -> List[Workshop]:
        return self.workshops.list_all()

    def get_workshop(self, workshop_id: str) -> Workshop:
        workshop = self.workshops.get(workshop_id)
        if workshop is None:
            raise NotFound("Workshop not found", operation="workshop.get", target=workshop_id)
        return workshop

    def create_workshop(self, actor_email: str, fields: dict) -> Workshop:
        operation = "workshop.create"
        self._require_manager(actor_email, operation)

        workshop = Workshop(
            title=require_text(fields.get("title"), "title", operation),
            presenter_name=require_text(fields.get("presenterName"), "presenterName", operation),
            presenter_linked_in=optional_url(
                fields.get("presenterLinkedIn"), "presenterLinkedIn", operation
            ),
            date=require_iso_date(fields.get("date"), "date", operation),
            description=fields.get("description") or "",
            youtube_url=optional_url(fields.get("youtubeUrl"), "youtubeUrl", operation),
            resources=clean_resources(fields.get("resources")),
            type=fields.get("type") or "paper",
        )
        workshop.id = self.workshops.add(workshop)
        logger.info(f"Workshop {workshop.id} '{workshop.title}' created by {actor_email}")
        return workshop

    def update_workshop(self, workshop_id: str, actor_email: str, updates: dict) -> Workshop:
        operation = "workshop.update"
        self._require_manager(actor_email, operation, workshop_id)
        if self.workshops.get(workshop_id) is None:
            raise NotFound(
                "Workshop not found", operation=operation, actor=actor_email, target=workshop_id
            )

        updates = dict(updates)
        for field in ("title", "presenterName"):
            if field in updates:
                updates[field] = require_text(updates[field], field, operation)
        if "date" in updates:
            updates["date"] = require_iso_date(updates["date"], "date", operation)
        if "description" in updates:
            updates["description"] = updates["description"] or ""
        if "type" in updates and updates["type"] is None:
            raise ValidationError(
                "type cannot be cleared", operation=operation, actor=actor_email, target=workshop_id
            )
        for field in ("presenterLinkedIn", "youtubeUrl"):
            if field in updates:
                updates[field] = optional_url(updates[field], field, operation)
        if "resources" in updates:
            updates["resources"] = clean_resources(updates["resources"])

        updated = self.workshops.update(workshop_id, updates)
        logger.info(f"Workshop {workshop_id} updated by {actor_email}: {sorted(updates)}")
        return updated

    def delete_workshop(self, workshop_id: str, actor_email: str):
        operation = "workshop.delete"
        self._require_manager(actor_email, operation, workshop_id)
        if not self.workshops.delete(workshop_id):
            raise NotFound(
                "Workshop not found", operation=operation, actor=actor_email, target=workshop_id
            )
        logger.info(f"Workshop {workshop_id} deleted by {actor_email}")

    # =========================================================================
    # Presentation requests
    # =========================================================================

    def submit_presentation_request(
        self,
        identity: Identity,
        title: str,
        description: str,
        type: str,
        proposed_date: Optional[str] = None,
    ) -> PresentationRequest:
        operation = "presentation_request.submit"
        request = PresentationRequest(
            user_id=identity.uid,
            user_name=identity.display_name or "",
            user_email=identity.email or "",
            title=require_text(title, "title", operation),
            description=description or "",
            type=type,
            proposed_date=proposed_date or None,
            status="pending",
            created_at=timestamp(),
        )
        request.id = self.presentations.add(request)
        logger.info(f"Presentation request {request.id} submitted by {identity.email}")
        return request

    def list_presentation_requests(self, actor_email: str) -> List[PresentationRequest]:
        self._require_manager(actor_email, "presentation_request.list")
        return self.presentations.list_all()

    def set_presentation_status(
        self, request_id: str, actor_email: str, status: str
    ) -> PresentationRequest:
        operation = "presentation_request.set_status"
        self._require_manager(actor_email, operation, request_id)
        if status not in ("pending", "done"):
            raise ValidationError(
                "status must be 'pending' or 'done'",
                operation=operation,
                actor=actor_email,
                target=request_id,
            )
        if self.presentations.get(request_id) is None:
            raise NotFound(
                "Presentation request not found",
                operation=operation,
                actor=actor_email,
                target=request_id,
            )

        if status == "done":
            fields = {"status": "done", "completedAt": timestamp(), "completedBy": actor_email}
        else:
            fields = {"status": "pending", "completedAt": None, "completedBy": None}
        updated = self.presentations.update(request_id, fields)
        logger.info(f"Presentation request {request_id} marked {status} by {actor_email}")
        return updated
