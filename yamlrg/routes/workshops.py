"""Workshop and presentation request routes"""

from typing import Optional

from fastapi import APIRouter, Depends

from yamlrg.auth.dependencies import get_current_identity, get_optional_identity
from yamlrg.auth.identity import Identity
from yamlrg.dependencies import Services, get_services
from yamlrg.models.workshop import (
    PresentationRequestCreate,
    PresentationStatusUpdate,
    WorkshopCreate,
    WorkshopUpdate,
)
from yamlrg.services import views

router = APIRouter()


# =============================================================================
# Workshops
# =============================================================================

@router.get("/workshops")
async def list_workshops(
    viewer: Optional[Identity] = Depends(get_optional_identity),
    services: Services = Depends(get_services),
):
    """All workshops, newest first, plus the upcoming/past split"""
    workshops = services.workshops.list_workshops()
    upcoming, past = views.split_workshops(workshops)
    return {
        "workshops": [w.to_response() for w in workshops],
        "upcoming": [w.to_response() for w in upcoming],
        "past": [w.to_response() for w in past],
        "canManage": services.policy.can_manage_workshop_or_presentation(
            viewer.email if viewer else None
        ),
    }


@router.get("/workshops/{workshop_id}")
async def get_workshop(workshop_id: str, services: Services = Depends(get_services)):
    return services.workshops.get_workshop(workshop_id).to_response()


@router.post("/workshops", status_code=201)
async def create_workshop(
    body: WorkshopCreate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    workshop = services.workshops.create_workshop(identity.email, body.to_document())
    return workshop.to_response()


@router.patch("/workshops/{workshop_id}")
async def update_workshop(
    workshop_id: str,
    body: WorkshopUpdate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    updates = body.model_dump(by_alias=True, exclude_unset=True)
    workshop = services.workshops.update_workshop(workshop_id, identity.email, updates)
    return workshop.to_response()


@router.delete("/workshops/{workshop_id}")
async def delete_workshop(
    workshop_id: str,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    services.workshops.delete_workshop(workshop_id, identity.email)
    return {"message": "Workshop deleted"}


# =============================================================================
# Presentation requests
# =============================================================================

@router.post("/presentation-requests", status_code=201)
async def submit_presentation_request(
    body: PresentationRequestCreate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    request = services.workshops.submit_presentation_request(
        identity,
        title=body.title,
        description=body.description,
        type=body.type,
        proposed_date=body.proposed_date,
    )
    return request.to_response()


@router.get("/presentation-requests")
async def list_presentation_requests(
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    requests = services.workshops.list_presentation_requests(identity.email)
    return [r.to_response() for r in requests]


@router.put("/presentation-requests/{request_id}/status")
async def set_presentation_status(
    request_id: str,
    body: PresentationStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    request = services.workshops.set_presentation_status(request_id, identity.email, body.status)
    return request.to_response()
