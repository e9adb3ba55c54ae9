"""Exception hierarchy for oidcauth.

All exceptions inherit from :class:`OIDCAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oidcauth.exit_codes`.
The CLI entry point catches ``OIDCAuthError`` and exits with that code.

Strategy errors are different: they are raised *inside* a strategy's
callback pipeline and converted at the strategy boundary into
``(key, message)`` pairs recorded on the request context. They never escape
``handle_request`` or ``handle_callback``.

Subclass hierarchy::

    OIDCAuthError (exit 1)
    +-- SettingsError            (exit 1)
    +-- AuthError                (exit 3)
    +-- ClientError              (exit 6)
    |   +-- UserInfoError        (exit 6)
    +-- StrategyError            (exit 3)
        +-- ConfigurationError
        +-- MissingParameterError
        +-- UpstreamError
        +-- UnknownResponseError
"""

from __future__ import annotations

from typing import Any

from oidcauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
)
from oidcauth.models import AuthFailure


class OIDCAuthError(Exception):
    """Base exception for all oidcauth errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class SettingsError(OIDCAuthError):
    """Raised for settings problems (invalid file, bad credential source)."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(OIDCAuthError):
    """Raised when the framework cannot dispatch an authentication request."""

    exit_code = EXIT_AUTH_FAILURE


class ClientError(OIDCAuthError):
    """Raised when the OIDC client cannot talk to the identity provider."""

    exit_code = EXIT_CONNECTION_ERROR


class UserInfoError(ClientError):
    """Raised when the userinfo endpoint cannot be resolved or fetched.

    Not part of the recorded-failure taxonomy: a failed user-info fetch
    propagates out of the callback pipeline.
    """


class StrategyError(OIDCAuthError):
    """A failure recorded through the request context rather than raised.

    Attributes:
        error_key: First element of the recorded ``(key, message)`` pair.
        detail: Second element. Usually a string, but may be any value.
    """

    exit_code = EXIT_AUTH_FAILURE
    error_key: str = "error"

    def __init__(self, detail: Any, error_key: str | None = None):
        super().__init__(str(detail))
        self.detail = detail
        if error_key is not None:
            self.error_key = error_key

    def to_failure(self) -> AuthFailure:
        """Return the ``(key, message)`` pair to record on the context."""
        return AuthFailure(key=self.error_key, message=self.detail)


class ConfigurationError(StrategyError):
    """The authorization URL could not be built for the requested provider."""

    def __init__(self) -> None:
        super().__init__("Authorization URL could not be constructed")


class MissingParameterError(StrategyError):
    """The callback request carried no authorization code."""

    def __init__(self, field: str = "code") -> None:
        super().__init__(f"Query string does not contain field '{field}'")


class UpstreamError(StrategyError):
    """Token exchange or ID-token verification returned an error.

    A bare error is recorded under the ``"error"`` key; a typed error keeps
    the provider's error code as the key.
    """


class UnknownResponseError(StrategyError):
    """The OIDC client answered with a shape the pipeline does not know."""

    error_key = "unknown_error"

    def __init__(self, value: Any) -> None:
        super().__init__(value)
