"""Approval email endpoint used by the admin dashboard"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr

from yamlrg.auth.dependencies import get_current_identity
from yamlrg.auth.identity import Identity
from yamlrg.dependencies import Services, get_services

logger = logging.getLogger(__name__)
router = APIRouter()


class ApprovalEmailRequest(BaseModel):
    email: EmailStr


@router.post("/send-approval-email")
async def send_approval_email(
    body: ApprovalEmailRequest,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    """Send the welcome email. Bearer token required, admin allow-list enforced."""
    services.policy.require_admin(identity.email, "notification.send_approval_email", body.email)

    result = services.notifier.send_approval_email(body.email)
    if not result.sent:
        raise HTTPException(status_code=400, detail=result.error or "Email provider error")

    logger.info(f"Approval email sent to {body.email} by {identity.email}")
    return {"success": True, "data": result.to_dict()}
