"""Built-in authentication strategies.

- :mod:`oidcauth.plugins.openid_connect` -- OpenID Connect authorization-code
  flow against any registered provider.
"""
