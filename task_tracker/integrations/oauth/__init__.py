"""Third-party identity providers (OAuth 2.0)."""

from .base import IdentityProvider, ProviderError, ProviderIdentity
from .google import GoogleOAuthProvider

__all__ = ["IdentityProvider", "ProviderError", "ProviderIdentity", "GoogleOAuthProvider"]
