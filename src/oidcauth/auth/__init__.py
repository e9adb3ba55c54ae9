"""Pluggable authentication framework for oidcauth.

The framework hands each incoming request to a named *strategy*. The main
entry points are:

- :class:`AuthStrategy` -- abstract base class for implementing strategies.
- :class:`RequestContext` -- per-request state passed to a strategy,
  including the error side channel.
- :class:`StrategyManager` -- registry that maps strategy names to instances,
  runs the request/callback/cleanup phases, and assembles the identity
  record.
- :func:`create_default_manager` -- factory returning a manager wired with
  the OpenID Connect strategy.

Typical usage::

    from oidcauth.auth import create_default_manager
    from oidcauth.config import resolve_settings

    manager = create_default_manager(resolve_settings())
    context = manager.build_context({"code": code, "oidc_provider": "corp"})
    manager.callback("oidc", context)
    auth = manager.build_auth("oidc", context)
"""

from oidcauth.auth.base import AuthStrategy, RequestContext
from oidcauth.auth.manager import StrategyManager, create_default_manager

__all__ = [
    "AuthStrategy",
    "RequestContext",
    "StrategyManager",
    "create_default_manager",
]
