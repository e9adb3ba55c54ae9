"""Abstract base class for authentication strategies.

This module defines the two foundational types of the auth framework:

- :class:`RequestContext` -- the per-request object the framework hands to a
  strategy. It carries the request parameters, the CSRF state token, the
  computed callback URL, the error side channel, the redirect target and
  the :class:`~oidcauth.models.SessionBundle`.
- :class:`AuthStrategy` -- the abstract base class every strategy extends.

A strategy takes part in two phases. In the *request* phase
:meth:`~AuthStrategy.handle_request` points the user agent at the provider.
In the *callback* phase :meth:`~AuthStrategy.handle_callback` fills the
bundle, after which the framework asks :meth:`~AuthStrategy.uid`,
:meth:`~AuthStrategy.info`, :meth:`~AuthStrategy.credentials` and
:meth:`~AuthStrategy.extra` for the identity record, then calls
:meth:`~AuthStrategy.handle_cleanup`.

See Also:
    :mod:`oidcauth.auth.manager` for strategy registration and dispatch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Optional

from oidcauth.models import AuthFailure, Credentials, Extra, Info, SessionBundle


class RequestContext:
    """State of one authentication request as seen by a strategy.

    Args:
        params: Query/body parameters of the incoming request.
        state_param: CSRF state token issued by the framework, if any.
        callback_url: The framework's computed callback URL for the strategy.
        bundle: Session bundle; a fresh one is created when omitted.

    Example::

        context = RequestContext(params={"code": "abc", "oidc_provider": "corp"})
        strategy.handle_callback(context)
        if context.failed:
            print(context.errors)
    """

    def __init__(
        self,
        params: dict[str, Any] | None = None,
        state_param: Optional[str] = None,
        callback_url: Optional[str] = None,
        bundle: Optional[SessionBundle] = None,
    ):
        self.params = dict(params or {})
        self.state_param = state_param
        self.callback_url = callback_url
        self.bundle = bundle if bundle is not None else SessionBundle()
        self.errors: list[AuthFailure] = []
        self.redirect_url: Optional[str] = None

    @property
    def failed(self) -> bool:
        """Whether any failure has been recorded."""
        return bool(self.errors)

    def set_errors(self, errors: Iterable[AuthFailure]) -> RequestContext:
        """Record failures on the error side channel and return the context."""
        self.errors.extend(errors)
        return self

    def redirect(self, url: str) -> RequestContext:
        """Instruct the framework to redirect the user agent to *url*."""
        self.redirect_url = url
        return self


class AuthStrategy(ABC):
    """Abstract base class for authentication strategies.

    Every concrete strategy must provide:

    1. A :attr:`name` property returning a unique identifier (e.g. ``"oidc"``).
    2. :meth:`handle_request` and :meth:`handle_callback`.

    The projection methods default to empty records so a strategy only
    overrides what it can supply.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique strategy identifier used for registration."""
        ...

    @abstractmethod
    def handle_request(self, context: RequestContext) -> RequestContext:
        """Start the flow: set a redirect or record errors on *context*."""
        ...

    @abstractmethod
    def handle_callback(self, context: RequestContext) -> RequestContext:
        """Process the provider's callback, filling ``context.bundle``.

        Failures are recorded with :meth:`RequestContext.set_errors` rather
        than raised.
        """
        ...

    def handle_cleanup(self, context: RequestContext) -> RequestContext:
        """Drop per-request state once the identity record has been built."""
        return context

    def uid(self, context: RequestContext) -> Any:
        return None

    def info(self, context: RequestContext) -> Info:
        return Info()

    def credentials(self, context: RequestContext) -> Credentials:
        return Credentials()

    def extra(self, context: RequestContext) -> Extra:
        return Extra()
