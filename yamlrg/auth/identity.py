"""Identity registry and bearer token handling"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from yamlrg.errors import NotFound
from yamlrg.services.database_service import DocumentStore, timestamp

logger = logging.getLogger(__name__)

# JWT Configuration
ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    """Authenticated subject: stable uid plus profile claims"""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class IdentityProvider:
    """Registers signed-in identities and issues/verifies short-lived tokens.

    A token is only valid while its identity is registered, so deleting an
    identity revokes every token issued for it.
    """

    collection = DocumentStore.IDENTITIES

    def __init__(self, store: DocumentStore, secret_key: str, expire_minutes: int = 60):
        self.store = store
        self.secret_key = secret_key
        self.expire_minutes = expire_minutes

    def register(
        self,
        uid: str,
        email: Optional[str],
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> Identity:
        """Create or refresh an identity after a successful sign-in"""
        self.store.put(
            self.collection,
            uid,
            {
                "uid": uid,
                "email": email,
                "displayName": display_name,
                "photoURL": photo_url,
                "lastLoginAt": timestamp(),
            },
            merge=True,
        )
        logger.info(f"Identity registered: {uid}")
        return Identity(uid=uid, email=email, display_name=display_name, photo_url=photo_url)

    def get_identity(self, uid: str) -> Optional[Identity]:
        doc = self.store.get(self.collection, uid)
        if doc is None:
            return None
        return Identity(
            uid=uid,
            email=doc.get("email"),
            display_name=doc.get("displayName"),
            photo_url=doc.get("photoURL"),
        )

    def create_access_token(
        self, identity: Identity, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT access token for an identity"""
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=self.expire_minutes)
        )
        to_encode = {
            "sub": identity.uid,
            "email": identity.email,
            "name": identity.display_name,
            "picture": identity.photo_url,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> Optional[Identity]:
        """Verify a bearer token and return its identity, or None"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            return None

        uid = payload.get("sub")
        if not uid:
            return None

        if self.get_identity(uid) is None:
            logger.warning(f"Token presented for unknown identity {uid}")
            return None

        return Identity(
            uid=uid,
            email=payload.get("email"),
            display_name=payload.get("name"),
            photo_url=payload.get("picture"),
        )

    def delete_identity(self, uid: str):
        """Remove the credential for an identity"""
        if not self.store.delete(self.collection, uid):
            raise NotFound("Identity not found", operation="identity.delete", target=uid)
        logger.info(f"Identity deleted: {uid}")
