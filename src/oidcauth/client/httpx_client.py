"""Default OIDC client -- httpx for HTTP, PyJWT for ID-token verification.

:class:`HttpxOIDCClient` resolves each provider key against a
:class:`~oidcauth.registry.ProviderRegistry`, fetches the provider's
discovery document (cached per provider), and implements the three client
calls the strategy relies on:

1. :meth:`~HttpxOIDCClient.authorization_uri` -- ``authorization_endpoint``
   plus ``client_id``, ``response_type``, ``scope`` and the per-request
   parameters.
2. :meth:`~HttpxOIDCClient.fetch_tokens` -- ``authorization_code`` grant
   against ``token_endpoint``.
3. :meth:`~HttpxOIDCClient.verify` -- signature and ``aud``/``iss``/``exp``
   checks with keys from ``jwks_uri``.

Failures are answered with the result variants rather than raised; only
:meth:`~HttpxOIDCClient.discovery_document` raises, because the user-info
step treats a missing document as fatal.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
import jwt
from jwt import PyJWKClient

from oidcauth.client.base import OIDCClient
from oidcauth.client.results import (
    ErrorWithCodeAndMessage,
    ErrorWithMessage,
    Result,
    Success,
)
from oidcauth.config import resolve_credential
from oidcauth.exceptions import ClientError, SettingsError
from oidcauth.models import ProviderConfig
from oidcauth.registry import ProviderRegistry

logger = logging.getLogger(__name__)

_REQUIRED_DISCOVERY_FIELDS = ("authorization_endpoint", "token_endpoint")


class HttpxOIDCClient(OIDCClient):
    """OIDC client backed by httpx and PyJWT.

    Args:
        registry: Source of provider configuration.
        timeout: Timeout in seconds applied to every HTTP call.
        leeway: Clock skew in seconds tolerated when checking ``exp``.
        redirect_uri: Redirect URI sent with the token request when neither
            the call nor the provider supplies one. Must equal the URI used
            in the authorization request.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        timeout: float = 30.0,
        leeway: int = 0,
        redirect_uri: Optional[str] = None,
    ) -> None:
        self._registry = registry
        self._redirect_uri = redirect_uri
        self._timeout = timeout
        self._leeway = leeway
        self._documents: dict[str, dict[str, Any]] = {}
        self._jwks_clients: dict[str, PyJWKClient] = {}

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discovery_document(self, provider: str) -> dict[str, Any]:
        """Fetch (once) and return the discovery document for *provider*.

        Raises:
            ClientError: If the provider is unknown, the document cannot be
                fetched, or it lacks ``authorization_endpoint`` /
                ``token_endpoint``.
        """
        cached = self._documents.get(provider)
        if cached is not None:
            return cached

        config = self._registry.get(provider)
        if config is None:
            raise ClientError(f"Unknown OIDC provider '{provider}'")

        logger.debug("Fetching discovery document for '%s'", provider)
        try:
            response = httpx.get(
                config.discovery_document_uri,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            document: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise ClientError(
                f"OpenID discovery failed with status {exc.response.status_code}: "
                f"{exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ClientError(f"OpenID discovery failed: {exc}") from exc
        except ValueError as exc:
            raise ClientError(f"OpenID discovery returned invalid JSON: {exc}") from exc

        for field in _REQUIRED_DISCOVERY_FIELDS:
            if field not in document:
                raise ClientError(f"OpenID discovery document missing '{field}'")

        self._documents[provider] = document
        return document

    # ------------------------------------------------------------------
    # Client calls
    # ------------------------------------------------------------------

    def authorization_uri(self, provider: str, params: dict[str, Any]) -> Result:
        config = self._registry.get(provider)
        if config is None:
            return ErrorWithCodeAndMessage("unknown_provider", f"Unknown OIDC provider '{provider}'")
        try:
            document = self.discovery_document(provider)
        except ClientError as exc:
            return ErrorWithMessage(str(exc))

        query: dict[str, Any] = {
            "client_id": config.client_id,
            "response_type": config.response_type,
            "scope": config.scope,
        }
        query.update({k: v for k, v in params.items() if v is not None})
        return Success(f"{document['authorization_endpoint']}?{urlencode(query)}")

    def fetch_tokens(self, provider: str, params: dict[str, Any]) -> Result:
        config = self._registry.get(provider)
        if config is None:
            return ErrorWithCodeAndMessage("unknown_provider", f"Unknown OIDC provider '{provider}'")
        try:
            document = self.discovery_document(provider)
            data = self._token_request_data(config, params)
        except (ClientError, SettingsError) as exc:
            return ErrorWithMessage(str(exc))

        logger.debug("Exchanging authorization code with '%s'", provider)
        try:
            response = httpx.post(
                document["token_endpoint"],
                data=data,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            token_data = response.json()
        except httpx.HTTPStatusError as exc:
            return _token_error(exc.response)
        except httpx.HTTPError as exc:
            return ErrorWithMessage(f"Token exchange failed: {exc}")
        except ValueError as exc:
            return ErrorWithMessage(f"Token endpoint returned invalid JSON: {exc}")

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            return ErrorWithMessage("Token response missing 'access_token' field")
        return Success(token_data)

    def verify(self, provider: str, id_token: Optional[str]) -> Result:
        if not id_token:
            return ErrorWithMessage("Token response missing 'id_token' field")
        config = self._registry.get(provider)
        if config is None:
            return ErrorWithCodeAndMessage("unknown_provider", f"Unknown OIDC provider '{provider}'")
        try:
            document = self.discovery_document(provider)
        except ClientError as exc:
            return ErrorWithMessage(str(exc))

        jwks_uri = document.get("jwks_uri")
        if not jwks_uri:
            return ErrorWithMessage("OpenID discovery document missing 'jwks_uri'")
        algorithms = document.get("id_token_signing_alg_values_supported") or ["RS256"]

        try:
            signing_key = self._jwks_client(jwks_uri).get_signing_key_from_jwt(id_token)
            claims = jwt.decode(
                id_token,
                key=signing_key.key,
                algorithms=algorithms,
                audience=config.client_id,
                issuer=document.get("issuer"),
                leeway=self._leeway,
            )
        except jwt.ExpiredSignatureError as exc:
            return ErrorWithCodeAndMessage("token_expired", str(exc))
        except jwt.PyJWTError as exc:
            return ErrorWithCodeAndMessage("invalid_token", str(exc))
        return Success(claims)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _jwks_client(self, jwks_uri: str) -> PyJWKClient:
        client = self._jwks_clients.get(jwks_uri)
        if client is None:
            client = PyJWKClient(jwks_uri, timeout=int(self._timeout))
            self._jwks_clients[jwks_uri] = client
        return client

    def _token_request_data(
        self, config: ProviderConfig, params: dict[str, Any]
    ) -> dict[str, str]:
        data: dict[str, str] = {
            "grant_type": "authorization_code",
            "code": str(params["code"]),
            "client_id": config.client_id,
        }
        redirect_uri = (
            params.get("redirect_uri") or config.redirect_uri or self._redirect_uri
        )
        if redirect_uri:
            data["redirect_uri"] = redirect_uri
        if config.client_secret_source:
            data["client_secret"] = resolve_credential(config.client_secret_source)
        return data


def _token_error(response: httpx.Response) -> Result:
    """Translate a non-2xx token endpoint answer into an error variant.

    RFC 6749 error bodies (``{"error": ..., "error_description": ...}``)
    keep the error code; anything else becomes a bare message.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return ErrorWithCodeAndMessage(
            str(body["error"]),
            body.get("error_description") or response.text,
        )
    return ErrorWithMessage(
        f"Token exchange failed with status {response.status_code}: {response.text}"
    )
