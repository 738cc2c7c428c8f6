"""Authentication module"""

from yamlrg.auth.dependencies import get_current_identity, get_optional_identity
from yamlrg.auth.google import GoogleAuthService
from yamlrg.auth.identity import Identity, IdentityProvider

__all__ = [
    "GoogleAuthService",
    "Identity",
    "IdentityProvider",
    "get_current_identity",
    "get_optional_identity",
]
