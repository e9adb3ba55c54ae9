"""oidcauth -- OpenID Connect authorization-code login for a pluggable auth framework.

This package provides the ``oidc`` authentication strategy: it sends the user
agent to any configured OpenID Connect provider, then exchanges the returned
authorization code for tokens, verifies the ID token, optionally fetches the
user-info claims and exposes the result as a normalised identity record.

Typical workflow::

    oidcauth providers add corp --discovery https://id.example.com/.well-known/openid-configuration \\
        --client-id my-app
    oidcauth authorize corp --state xyz --open
    oidcauth callback corp --code <code> --state xyz

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware settings loading and saving.
    registry: Provider configuration lookup.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
