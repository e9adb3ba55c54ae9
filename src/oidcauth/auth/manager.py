"""Strategy manager -- registry and dispatcher for auth strategies.

The :class:`StrategyManager` plays the part of the generic authentication
framework around a strategy. It maps strategy names to
:class:`~oidcauth.auth.base.AuthStrategy` instances, builds the per-request
:class:`~oidcauth.auth.base.RequestContext` (including the computed callback
URL), checks the CSRF state on callback, and assembles the final
:class:`~oidcauth.models.Auth` identity record from the strategy's
projections.

For most use cases, call :func:`create_default_manager` to get a manager
wired with the OpenID Connect strategy and the default httpx client.

See Also:
    :class:`~oidcauth.auth.base.AuthStrategy` -- the strategy interface.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from oidcauth.auth.base import AuthStrategy, RequestContext
from oidcauth.exceptions import AuthError
from oidcauth.models import Auth, AuthFailure, Settings

logger = logging.getLogger(__name__)

CSRF_FAILURE = AuthFailure(key="csrf_attack", message="Cross-Site Request Forgery attack")


class StrategyManager:
    """Registry and dispatcher for authentication strategies.

    Args:
        settings: Settings used to compute callback URLs. Defaults apply when
            omitted.

    Example::

        manager = StrategyManager(settings)
        manager.register(OpenIDConnectStrategy(registry, client))
        context = manager.build_context({"oidc_provider": "corp"}, strategy="oidc")
        manager.request("oidc", context)
        print(context.redirect_url)
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings if settings is not None else Settings()
        self._strategies: dict[str, AuthStrategy] = {}

    def register(self, strategy: AuthStrategy) -> None:
        """Register *strategy* under its :attr:`~AuthStrategy.name`.

        A strategy already registered under the same name is replaced.
        """
        self._strategies[strategy.name] = strategy

    def get_strategy(self, name: str) -> AuthStrategy:
        """Return the strategy registered as *name*.

        Raises:
            AuthError: If no strategy is registered under *name*.
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            available = ", ".join(sorted(self._strategies)) or "(none)"
            raise AuthError(
                f"No auth strategy registered as '{name}'. "
                f"Available strategies: {available}"
            )
        return strategy

    def list_strategies(self) -> list[str]:
        return sorted(self._strategies.keys())

    def callback_url(self, strategy: str) -> str:
        """Compute the default callback URL for *strategy*."""
        base = self._settings.base_url.rstrip("/")
        path = self._settings.callback_path.format(strategy=strategy)
        if not path.startswith("/"):
            path = "/" + path
        return base + path

    def build_context(
        self,
        params: dict[str, Any] | None = None,
        state_param: Optional[str] = None,
        strategy: str = "oidc",
    ) -> RequestContext:
        """Create a request context carrying the computed callback URL."""
        return RequestContext(
            params=params,
            state_param=state_param,
            callback_url=self.callback_url(strategy),
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def request(self, name: str, context: RequestContext) -> RequestContext:
        """Run the request phase of strategy *name*."""
        return self.get_strategy(name).handle_request(context)

    def callback(self, name: str, context: RequestContext) -> RequestContext:
        """Run the callback phase of strategy *name*.

        When the context carries a CSRF state token, the callback's ``state``
        parameter must match it; otherwise a ``csrf_attack`` failure is
        recorded and the strategy is not invoked.
        """
        strategy = self.get_strategy(name)
        if context.state_param and context.params.get("state") != context.state_param:
            logger.warning("State mismatch on %s callback", name)
            return context.set_errors([CSRF_FAILURE])
        return strategy.handle_callback(context)

    def cleanup(self, name: str, context: RequestContext) -> RequestContext:
        return self.get_strategy(name).handle_cleanup(context)

    def build_auth(self, name: str, context: RequestContext) -> Auth:
        """Assemble the identity record from strategy *name*'s projections."""
        strategy = self.get_strategy(name)
        uid = strategy.uid(context)
        credentials = strategy.credentials(context)
        return Auth(
            uid=str(uid) if uid is not None else None,
            provider=credentials.other.get("provider") or name,
            strategy=name,
            info=strategy.info(context),
            credentials=credentials,
            extra=strategy.extra(context),
        )


def create_default_manager(settings: Optional[Settings] = None) -> StrategyManager:
    """Create a :class:`StrategyManager` with the OpenID Connect strategy.

    The strategy is wired to a
    :class:`~oidcauth.registry.StaticProviderRegistry` over
    ``settings.providers`` and a
    :class:`~oidcauth.client.httpx_client.HttpxOIDCClient`.
    """
    from oidcauth.client.httpx_client import HttpxOIDCClient
    from oidcauth.plugins.openid_connect import OpenIDConnectStrategy
    from oidcauth.registry import registry_from_settings

    settings = settings if settings is not None else Settings()
    registry = registry_from_settings(settings)
    manager = StrategyManager(settings)
    client = HttpxOIDCClient(
        registry,
        timeout=settings.http_timeout,
        leeway=settings.jwt_leeway,
        redirect_uri=manager.callback_url("oidc"),
    )
    manager.register(
        OpenIDConnectStrategy(
            registry,
            client,
            defaults=settings.defaults,
            default_provider=settings.default_provider,
            timeout=settings.http_timeout,
        )
    )
    return manager
