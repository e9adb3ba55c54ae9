"""OpenID Connect strategy -- authorization redirect and callback pipeline.

This module provides :class:`OpenIDConnectStrategy`, the ``oidc`` strategy.
The provider is chosen per request by the ``oidc_provider`` parameter (or the
configured default provider) and looked up in a
:class:`~oidcauth.registry.ProviderRegistry`.

**Request phase** -- :meth:`~OpenIDConnectStrategy.handle_request` asks the
OIDC client for the provider's authorization URL, passing the redirect URI
and the CSRF ``state`` token when the framework issued one.

**Callback phase** -- :meth:`~OpenIDConnectStrategy.handle_callback` runs a
short-circuiting pipeline:

1. Require the ``code`` parameter.
2. Resolve options (provider overrides over strategy defaults).
3. Exchange the code for tokens.
4. Verify the ID token.
5. Fetch user info when ``fetch_userinfo`` is on.

Failures in steps 1-4 are recorded on the request context as
``(key, message)`` pairs and stop the pipeline. A failed user-info fetch
raises :class:`~oidcauth.exceptions.UserInfoError`.

See Also:
    :mod:`oidcauth.plugins.openid_connect.identity` for the projections
    behind :meth:`~OpenIDConnectStrategy.uid`,
    :meth:`~OpenIDConnectStrategy.info`,
    :meth:`~OpenIDConnectStrategy.credentials` and
    :meth:`~OpenIDConnectStrategy.extra`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from oidcauth.auth.base import AuthStrategy, RequestContext
from oidcauth.client.base import OIDCClient
from oidcauth.client.results import (
    ErrorWithCodeAndMessage,
    ErrorWithMessage,
    Success,
    classify,
)
from oidcauth.exceptions import (
    ConfigurationError,
    MissingParameterError,
    StrategyError,
    UnknownResponseError,
    UpstreamError,
    UserInfoError,
)
from oidcauth.models import (
    Credentials,
    Extra,
    Info,
    ProviderConfig,
    StrategyDefaults,
    StrategyOptions,
)
from oidcauth.plugins.openid_connect import identity
from oidcauth.registry import ProviderRegistry

logger = logging.getLogger(__name__)

PROVIDER_PARAM = "oidc_provider"
"""Request parameter naming the provider to authenticate against."""


class OpenIDConnectStrategy(AuthStrategy):
    """Authenticate through any registered OpenID Connect provider.

    Args:
        registry: Provider configuration lookup.
        client: Protocol client that builds authorization URLs, exchanges
            codes and verifies ID tokens.
        defaults: Fallbacks for provider fields left unset.
        default_provider: Provider used when a request names none.
        timeout: Timeout in seconds for the user-info request.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        client: OIDCClient,
        defaults: Optional[StrategyDefaults] = None,
        default_provider: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self._registry = registry
        self._client = client
        self._defaults = defaults if defaults is not None else StrategyDefaults()
        self._default_provider = default_provider
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "oidc"

    # ------------------------------------------------------------------
    # Request phase
    # ------------------------------------------------------------------

    def handle_request(self, context: RequestContext) -> RequestContext:
        """Redirect to the provider, or record a configuration failure."""
        try:
            url = self.authorization_url(context)
        except StrategyError as exc:
            return context.set_errors([exc.to_failure()])
        return context.redirect(url)

    def authorization_url(self, context: RequestContext) -> str:
        """Build the authorization URL for the provider named by *context*.

        The redirect URI is the provider's ``redirect_uri`` override when set,
        else the framework's callback URL. ``state`` is only sent when the
        context carries a CSRF token.

        Raises:
            ConfigurationError: If the provider is unknown or the client
                cannot produce a URL.
        """
        provider = self._provider_key(context)
        config = self._registry.get(provider) if provider else None
        if config is None:
            logger.warning("No configuration for OIDC provider %r", provider)
            raise ConfigurationError()

        params: dict[str, Any] = {
            "redirect_uri": config.redirect_uri or context.callback_url,
        }
        if context.state_param:
            params["state"] = context.state_param

        result = classify(self._client.authorization_uri(provider, params))
        if isinstance(result, Success) and isinstance(result.value, str):
            return result.value
        logger.warning("Authorization URL for '%s' not built: %r", provider, result)
        raise ConfigurationError()

    # ------------------------------------------------------------------
    # Callback phase
    # ------------------------------------------------------------------

    def handle_callback(self, context: RequestContext) -> RequestContext:
        """Run the callback pipeline, filling ``context.bundle``.

        Raises:
            UserInfoError: If user info is enabled and cannot be fetched.
        """
        bundle = context.bundle
        try:
            code = self._require_param(context.params, "code")
            provider = self._provider_key(context)
            if provider is None:
                raise MissingParameterError(PROVIDER_PARAM)

            bundle.opts = self.resolve_options(provider)
            bundle.tokens = self._exchange_code(provider, code)
            bundle.claims = self._verify_id_token(provider, bundle.tokens.get("id_token"))
            if bundle.opts.fetch_userinfo:
                bundle.user_info = self._fetch_user_info(provider, bundle.tokens)
        except StrategyError as exc:
            logger.warning("OIDC callback failed (%s): %s", exc.error_key, exc)
            context.set_errors([exc.to_failure()])
        return context

    def handle_cleanup(self, context: RequestContext) -> RequestContext:
        identity.cleanup(context.bundle)
        return context

    def resolve_options(self, provider: str) -> StrategyOptions:
        """Merge the provider's overrides over the strategy defaults."""
        config = self._registry.get(provider)
        defaults = self._defaults
        if config is None:
            return StrategyOptions(
                provider=provider,
                fetch_userinfo=defaults.fetch_userinfo,
                uid_field=defaults.uid_field,
                userinfo_uid_field=defaults.userinfo_uid_field,
            )
        return StrategyOptions(
            provider=provider,
            fetch_userinfo=(
                config.fetch_userinfo
                if config.fetch_userinfo is not None
                else defaults.fetch_userinfo
            ),
            uid_field=config.uid_field or defaults.uid_field,
            userinfo_uid_field=config.userinfo_uid_field or defaults.userinfo_uid_field,
            redirect_uri=config.redirect_uri,
        )

    def validate_config(self, config: ProviderConfig) -> list[str]:
        """Return human-readable problems with a provider configuration."""
        errors: list[str] = []
        if not config.discovery_document_uri.startswith(("https://", "http://")):
            errors.append("OpenID Connect requires an http(s) 'discovery_document_uri'")
        if not config.client_id:
            errors.append("OpenID Connect requires a non-empty 'client_id'")
        if "code" not in config.response_type.split():
            errors.append("Only the authorization-code flow is supported (response_type 'code')")
        if "openid" not in config.scope.split():
            errors.append("'scope' must include 'openid'")
        return errors

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def uid(self, context: RequestContext) -> Any:
        return identity.uid(context.bundle)

    def info(self, context: RequestContext) -> Info:
        return identity.info(context.bundle)

    def credentials(self, context: RequestContext) -> Credentials:
        return identity.credentials(context.bundle)

    def extra(self, context: RequestContext) -> Extra:
        return identity.extra(context.bundle)

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _provider_key(self, context: RequestContext) -> Optional[str]:
        return context.params.get(PROVIDER_PARAM) or self._default_provider

    @staticmethod
    def _require_param(params: Mapping[str, Any], field: str) -> Any:
        value = params.get(field)
        if value is None or value == "":
            raise MissingParameterError(field)
        return value

    def _exchange_code(self, provider: str, code: Any) -> dict[str, Any]:
        logger.debug("Exchanging authorization code for '%s'", provider)
        response = self._client.fetch_tokens(provider, {"code": code})
        tokens = _unwrap(response)
        if not isinstance(tokens, Mapping):
            raise UnknownResponseError(response)
        return dict(tokens)

    def _verify_id_token(self, provider: str, id_token: Any) -> dict[str, Any]:
        logger.debug("Verifying ID token for '%s'", provider)
        response = self._client.verify(provider, id_token)
        claims = _unwrap(response)
        if not isinstance(claims, Mapping):
            raise UnknownResponseError(response)
        return dict(claims)

    def _fetch_user_info(self, provider: str, tokens: Mapping[str, Any]) -> dict[str, Any]:
        document = self._client.discovery_document(provider)
        endpoint = document.get("userinfo_endpoint")
        if not endpoint:
            raise UserInfoError(f"Provider '{provider}' does not advertise a userinfo_endpoint")

        logger.debug("Fetching user info for '%s'", provider)
        try:
            response = httpx.get(
                endpoint,
                headers={
                    "Authorization": f"Bearer {tokens.get('access_token')}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
            user_info = response.json()
        except httpx.HTTPError as exc:
            raise UserInfoError(f"User info fetch failed: {exc}") from exc
        except ValueError as exc:
            raise UserInfoError(f"User info response is not JSON: {exc}") from exc

        if not isinstance(user_info, dict):
            raise UserInfoError("User info response is not a JSON object")
        return user_info


def _unwrap(response: Any) -> Any:
    """Return the payload of a successful client answer or raise its failure."""
    result = classify(response)
    if isinstance(result, Success):
        return result.value
    if isinstance(result, ErrorWithCodeAndMessage):
        raise UpstreamError(result.message, error_key=str(result.code))
    if isinstance(result, ErrorWithMessage):
        raise UpstreamError(result.message)
    raise UnknownResponseError(result.raw)
