"""Result variants returned by :class:`~oidcauth.client.base.OIDCClient` calls.

Token exchange, ID-token verification and authorization-URL construction all
answer with one of three known shapes:

- :class:`Success` -- carries the payload (token map, claims map or URL).
- :class:`ErrorWithMessage` -- a bare failure with a message.
- :class:`ErrorWithCodeAndMessage` -- a failure with the provider's error
  code (``invalid_grant``, ``token_expired``, ...).

Clients are third-party code as far as the strategy is concerned, so
:func:`classify` wraps anything else in :class:`Unrecognized` instead of
letting it crash the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    value: Any


@dataclass(frozen=True)
class ErrorWithMessage:
    message: Any


@dataclass(frozen=True)
class ErrorWithCodeAndMessage:
    code: str
    message: Any


@dataclass(frozen=True)
class Unrecognized:
    """Any client answer that matches none of the known variants."""

    raw: Any


Result = Union[Success, ErrorWithMessage, ErrorWithCodeAndMessage]
Classified = Union[Success, ErrorWithMessage, ErrorWithCodeAndMessage, Unrecognized]


def classify(value: Any) -> Classified:
    """Return *value* unchanged if it is a known variant, else :class:`Unrecognized`."""
    if isinstance(value, (Success, ErrorWithMessage, ErrorWithCodeAndMessage)):
        return value
    return Unrecognized(value)
