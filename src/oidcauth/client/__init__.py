"""OpenID Connect protocol client.

Exports the :class:`OIDCClient` interface the strategy depends on, the result
variants it answers with, and :class:`HttpxOIDCClient`, the default
implementation.
"""

from oidcauth.client.base import OIDCClient
from oidcauth.client.httpx_client import HttpxOIDCClient
from oidcauth.client.results import (
    ErrorWithCodeAndMessage,
    ErrorWithMessage,
    Result,
    Success,
    Unrecognized,
    classify,
)

__all__ = [
    "OIDCClient",
    "HttpxOIDCClient",
    "Result",
    "Success",
    "ErrorWithMessage",
    "ErrorWithCodeAndMessage",
    "Unrecognized",
    "classify",
]
