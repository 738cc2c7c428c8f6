"""Authentication routes"""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse

from yamlrg.auth.dependencies import get_current_identity
from yamlrg.auth.identity import Identity
from yamlrg.dependencies import Services, get_services
from yamlrg.services.join_requests import ReconcileResult

logger = logging.getLogger(__name__)
router = APIRouter()


def _with_query(url: str, params: dict) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(params)}"


@router.get("/login")
async def login(
    redirect_url: str = Query(None, description="URL to redirect after login"),
    services: Services = Depends(get_services),
):
    """
    Initiate Google login flow.
    Redirects user to the Google account picker.
    """
    state = redirect_url or f"{services.settings.frontend_url}/profile"

    try:
        auth_url = services.google_auth.get_authorization_url(state=state)
        return RedirectResponse(url=auth_url)
    except ValueError as e:
        logger.error(f"Login failed: {e}")
        raise HTTPException(
            status_code=500,
            detail="Authentication not configured. Please set Google credentials."
        )


@router.get("/callback")
async def auth_callback(
    code: str = Query(None, description="Authorization code from Google"),
    state: str = Query(None, description="Original redirect URL"),
    error: str = Query(None),
    services: Services = Depends(get_services),
):
    """
    OAuth callback from Google.

    Registers the identity, then reconciles it against join requests. Only
    identities with an account (existing or just created) receive a token;
    everyone else is sent to the join pages.
    """
    if error:
        logger.error(f"Auth error: {error}")
        raise HTTPException(status_code=400, detail=error)

    if not code:
        logger.error("No authorization code received from Google")
        raise HTTPException(status_code=400, detail="No authorization code received")

    try:
        claims = await services.google_auth.authenticate(code)
    except Exception as e:
        logger.error(f"Authentication failed: {e}", exc_info=True)
        raise HTTPException(status_code=401, detail="Authentication failed")

    # Only verified emails are matched against join requests and the admin list
    if not claims.get("email") or not claims.get("email_verified"):
        logger.warning(f"Sign-in refused for {claims.get('sub')}: email missing or unverified")
        raise HTTPException(status_code=401, detail="Google account email is not verified")

    identity = services.identity_provider.register(
        uid=claims["sub"],
        email=claims.get("email"),
        display_name=claims.get("name"),
        photo_url=claims.get("picture"),
    )
    result, _ = services.join_requests.reconcile_on_first_login(identity)

    frontend = services.settings.frontend_url
    if result == ReconcileResult.PENDING_NOTICE:
        return RedirectResponse(url=f"{frontend}/join/success")
    if result == ReconcileResult.NO_REQUEST_NOTICE:
        return RedirectResponse(url=f"{frontend}/join")

    access_token = services.identity_provider.create_access_token(identity)
    final_url = _with_query(state or f"{frontend}/profile", {"token": access_token})
    logger.info(f"Auth success for {identity.uid} ({result.value}), redirecting to frontend")
    return RedirectResponse(url=final_url)


@router.post("/session")
async def establish_session(
    identity: Identity = Depends(get_current_identity),
    services: Services = Depends(get_services),
):
    """Reconcile an already-issued token and report whether the session may continue"""
    result, account = services.join_requests.reconcile_on_first_login(identity)
    return {
        "outcome": result.value,
        "signedIn": result in (ReconcileResult.CREATED, ReconcileResult.EXISTS),
        "user": account.to_document() if account else None,
    }


@router.post("/logout")
async def logout():
    """
    Logout user.
    Tokens are stateless; the client discards its token.
    """
    return {"message": "Logged out successfully"}
