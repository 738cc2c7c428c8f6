"""User account routes"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from yamlrg.auth.dependencies import get_current_identity
from yamlrg.auth.identity import Identity
from yamlrg.dependencies import Services, get_services
from yamlrg.models.user import (
    JobListingCreate,
    ProfileCompletedUpdate,
    UserProfileUpdate,
    VisibilityUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me")
async def get_my_account(
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    """Current user's profile document"""
    account = services.accounts.get_account(identity.uid)
    if account is None:
        raise HTTPException(status_code=404, detail="User not found")
    return account.to_document()


@router.delete("/me")
async def delete_my_account(
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    services.accounts.delete_account(identity.uid, identity)
    return {"message": "Account deleted"}


@router.get("")
async def admin_overview(
    sort_by: str = Query("approval", description="name, approval or date"),
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    overview = services.accounts.admin_overview(identity, sort_by)
    return {
        "admins": [a.to_document() for a in overview["admins"]],
        "members": [a.to_document() for a in overview["members"]],
    }


@router.patch("/{uid}")
async def update_profile(
    uid: str,
    body: UserProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    updates = body.to_updates()
    if not updates:
        raise HTTPException(status_code=400, detail="No updates provided")
    return services.accounts.update_profile(uid, identity, updates).to_document()


@router.post("/{uid}/approval")
async def approve_user(
    uid: str,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    return services.accounts.approve(uid, identity.email).to_document()


@router.delete("/{uid}/approval")
async def remove_user_approval(
    uid: str,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    return services.accounts.remove_approval(uid, identity.email).to_document()


@router.put("/{uid}/visibility")
async def set_visibility(
    uid: str,
    body: VisibilityUpdate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    return services.accounts.set_visibility(uid, identity, body.show_in_members).to_document()


@router.put("/{uid}/profile-completed")
async def set_profile_completed(
    uid: str,
    body: ProfileCompletedUpdate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    account = services.accounts.set_profile_completed(uid, identity, body.profile_completed)
    return account.to_document()


@router.post("/{uid}/jobs", status_code=201)
async def post_job(
    uid: str,
    body: JobListingCreate,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    job = services.accounts.add_job_listing(uid, identity, body.title, body.company, body.link)
    return job.to_document()


@router.delete("/{uid}/jobs/{index}")
async def remove_job(
    uid: str,
    index: int,
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    removed = services.accounts.remove_job_listing(uid, identity, index)
    return removed.to_document()
