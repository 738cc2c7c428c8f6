"""Google sign-in (OpenID Connect authorization code flow)"""

import base64
import json
import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)


class GoogleAuthService:
    """Google OAuth 2.0 / OpenID Connect client"""

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    # Scopes for authentication
    SCOPES = ["openid", "profile", "email"]

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: str,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def get_authorization_url(self, state: str = None) -> str:
        """Get URL to redirect user for authentication"""
        if not self.client_id:
            raise ValueError("Google client ID not configured")

        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.SCOPES),
            "prompt": "select_account",  # Always show account picker
        }

        if state:
            params["state"] = state

        return f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

    async def exchange_code_for_token(self, code: str) -> dict:
        """Exchange authorization code for tokens"""
        if not self.client_id or not self.client_secret:
            raise ValueError("Google credentials not configured")

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }

        async with httpx.AsyncClient() as client:
            response = await client.post(self.TOKEN_URL, data=data)

            if response.status_code != 200:
                logger.error(f"Token exchange failed: {response.text}")
                raise ValueError(f"Token exchange failed: {response.status_code}")

            return response.json()

    def decode_id_token(self, id_token: str) -> dict:
        """Decode the ID token payload.

        The token comes straight from Google's token endpoint over TLS, so
        the payload is read without re-verifying the signature.
        """
        parts = id_token.split(".")
        if len(parts) != 3:
            raise ValueError("Invalid ID token format")

        payload = parts[1]
        padding = 4 - len(payload) % 4
        if padding != 4:
            payload += "=" * padding

        try:
            return json.loads(base64.urlsafe_b64decode(payload))
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to decode ID token: {e}")
            raise ValueError("Failed to decode ID token")

    async def authenticate(self, code: str) -> dict:
        """
        Complete authentication flow:
        1. Exchange code for tokens
        2. Decode ID token to get user info
        3. Return identity claims
        """
        token_response = await self.exchange_code_for_token(code)

        id_token = token_response.get("id_token")
        if not id_token:
            raise ValueError("No ID token in response")

        claims = self.decode_id_token(id_token)
        if not claims.get("sub"):
            raise ValueError("ID token has no subject")

        logger.info(f"Google auth: sub={claims.get('sub')}, email={claims.get('email')}")

        return {
            "sub": claims["sub"],
            "email": claims.get("email"),
            "email_verified": claims.get("email_verified") in (True, "true"),
            "name": claims.get("name"),
            "picture": claims.get("picture"),
        }
