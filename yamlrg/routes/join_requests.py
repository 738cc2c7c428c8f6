"""Join request routes"""

import logging

from fastapi import APIRouter, Depends

from yamlrg.auth.dependencies import get_current_identity
from yamlrg.auth.identity import Identity
from yamlrg.dependencies import Services, get_services
from yamlrg.models.join_request import DecisionRequest, JoinRequestCreate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", status_code=201)
async def submit_join_request(
    body: JoinRequestCreate,
    services: Services = Depends(get_services),
):
    """Public join form"""
    request_id = services.join_requests.submit(
        email=body.email,
        name=body.name,
        interests=body.interests,
        linkedin_url=body.linkedin_url,
    )
    return {"id": request_id, "status": "pending"}


@router.get("")
async def list_join_requests(
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    requests = services.join_requests.list_requests(identity.email)
    return [r.to_response() for r in requests]


@router.post("/{request_id}/decision")
async def decide_join_request(
    request_id: str,
    body: DecisionRequest,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    """Approve or reject. A failed welcome email is reported as a warning."""
    outcome = services.join_requests.decide(request_id, identity.email, body.outcome)
    return {
        "request": outcome.request.to_response(),
        "notification": outcome.notification.to_dict() if outcome.notification else None,
        "warning": outcome.warning,
    }


@router.post("/{request_id}/revert")
async def revert_join_request(
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    request = services.join_requests.revert(request_id, identity.email)
    return request.to_response()


@router.post("/{request_id}/welcome-email")
async def resend_welcome_email(
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    result = services.join_requests.resend_welcome_email(request_id, identity.email)
    return {**result.to_dict(), "warning": result.warning}
