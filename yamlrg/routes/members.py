"""Member directory and job board routes"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from yamlrg.auth.dependencies import get_current_identity
from yamlrg.auth.identity import Identity
from yamlrg.dependencies import Services, get_services
from yamlrg.services import views

router = APIRouter()


@router.get("/members")
async def list_members(
    search: Optional[str] = Query(None, description="Match on name or email"),
    flags: List[str] = Query([], description="Status flags that must all be set"),
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    members = views.filter_members(services.accounts.directory(identity), search, flags)
    return [m.to_document() for m in members]


@router.get("/members/growth")
async def membership_growth(
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    return views.membership_growth(services.accounts.directory(identity))


@router.get("/jobs")
async def list_jobs(
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    return services.accounts.list_jobs()
