"""Abstract interface for the OpenID Connect protocol client.

The strategy never talks HTTP to the token endpoint or verifies signatures
itself; it delegates to an :class:`OIDCClient`. Implementations answer with
the variants from :mod:`oidcauth.client.results`.

See Also:
    :class:`~oidcauth.client.httpx_client.HttpxOIDCClient` -- the default
    implementation built on httpx and PyJWT.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from oidcauth.client.results import Result


class OIDCClient(ABC):
    """Protocol client for one or more registered providers."""

    @abstractmethod
    def authorization_uri(self, provider: str, params: dict[str, Any]) -> Result:
        """Build the provider's authorization URL.

        Args:
            provider: Registered provider key.
            params: Per-request parameters; always ``redirect_uri``, and
                ``state`` when the framework issued a CSRF token.

        Returns:
            ``Success(url)`` or one of the error variants.
        """
        ...

    @abstractmethod
    def fetch_tokens(self, provider: str, params: dict[str, Any]) -> Result:
        """Exchange an authorization code (``params["code"]``) for tokens."""
        ...

    @abstractmethod
    def verify(self, provider: str, id_token: Optional[str]) -> Result:
        """Verify an ID token and return its claims as ``Success(claims)``."""
        ...

    @abstractmethod
    def discovery_document(self, provider: str) -> dict[str, Any]:
        """Return the provider's discovery document.

        Raises:
            ClientError: If the document cannot be fetched or is invalid.
        """
        ...
