"""FastAPI dependencies resolving the bearer identity"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from yamlrg.auth.identity import Identity

logger = logging.getLogger(__name__)

# Optional so a missing header yields our own 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)


def _identity_provider(request: Request):
    return request.app.state.services.identity_provider


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """Resolve the identity behind the bearer token"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = _identity_provider(request).verify_token(credentials.credentials)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug(f"Bearer auth: {identity.email}")
    return identity


async def get_optional_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Identity]:
    """Identity if authenticated, None otherwise"""
    if not credentials:
        return None
    return _identity_provider(request).verify_token(credentials.credentials)
