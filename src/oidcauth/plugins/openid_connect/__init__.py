"""OpenID Connect strategy.

Implements the ``oidc`` strategy: builds the provider's authorization URL,
then exchanges the callback code for tokens, verifies the ID token and
optionally fetches user info. The resulting session bundle is projected into
uid, profile info, credentials and raw extra data.

See Also:
    :class:`~oidcauth.plugins.openid_connect.plugin.OpenIDConnectStrategy`
    :mod:`oidcauth.plugins.openid_connect.identity` for the projections.
    :mod:`oidcauth.auth.base` for the strategy interface contract.
"""

from oidcauth.plugins.openid_connect.plugin import PROVIDER_PARAM, OpenIDConnectStrategy

__all__ = ["OpenIDConnectStrategy", "PROVIDER_PARAM"]
