"""Canonical Pydantic models shared across all oidcauth modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Configuration models** -- serialised as JSON (or YAML) in the user's config
directory:
    :class:`ProviderConfig`, :class:`StrategyDefaults` and :class:`Settings`.

**Per-request state** -- built while a callback is processed:
    :class:`StrategyOptions`, :class:`SessionBundle` and :class:`AuthFailure`.

**Identity record** -- the provider-agnostic output handed back to the
application:
    :class:`Info`, :class:`Credentials`, :class:`Extra` and :class:`Auth`.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Provider configuration ---


class ProviderConfig(BaseModel):
    """Static configuration for one OpenID Connect provider.

    Behavioural fields (``fetch_userinfo``, ``uid_field``,
    ``userinfo_uid_field``) are optional; when unset the strategy falls back
    to :class:`StrategyDefaults`.

    Example::

        ProviderConfig(
            discovery_document_uri="https://login.example.com/.well-known/openid-configuration",
            client_id="my-app",
            client_secret_source="env:EXAMPLE_CLIENT_SECRET",
            fetch_userinfo=False,
            uid_field="email",
        )
    """

    model_config = ConfigDict(extra="allow")

    discovery_document_uri: str = Field(
        description="URL of the provider's /.well-known/openid-configuration"
    )
    client_id: str
    client_secret_source: Optional[str] = Field(
        default=None,
        description="Credential source for the client secret: env:VAR or file:/path",
    )
    response_type: str = "code"
    scope: str = "openid email profile"
    redirect_uri: Optional[str] = Field(
        default=None,
        description="Overrides the framework's computed callback URL",
    )
    fetch_userinfo: Optional[bool] = None
    uid_field: Optional[str] = Field(
        default=None, description="Claim used as uid when fetch_userinfo is off"
    )
    userinfo_uid_field: Optional[str] = Field(
        default=None, description="User-info key used as uid when fetch_userinfo is on"
    )


class StrategyDefaults(BaseModel):
    """Provider-wide defaults merged under each :class:`ProviderConfig`."""

    fetch_userinfo: bool = True
    uid_field: str = "sub"
    userinfo_uid_field: str = "sub"


class Settings(BaseModel):
    """Process-wide configuration persisted at ``~/.config/oidcauth/config.json``.

    Loaded by :func:`~oidcauth.config.load_settings` and resolved against
    environment variables and CLI flags by
    :func:`~oidcauth.config.resolve_settings`.
    """

    base_url: str = Field(
        default="http://localhost:4000",
        description="Public base URL used to compute callback URLs",
    )
    callback_path: str = Field(
        default="/auth/{strategy}/callback",
        description="Callback path template; {strategy} is substituted",
    )
    default_provider: Optional[str] = Field(
        default=None,
        description="Provider used when a request carries no oidc_provider param",
    )
    defaults: StrategyDefaults = Field(default_factory=StrategyDefaults)
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    http_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    jwt_leeway: int = Field(
        default=0, description="Clock skew tolerated when checking exp/iat, in seconds"
    )


# --- Per-request state ---


class StrategyOptions(BaseModel):
    """Options resolved for one callback, stored on the bundle as ``opts``.

    Every field is optional so partially populated options stay
    representable; projections treat a missing ``fetch_userinfo`` as false.
    """

    provider: Optional[str] = None
    fetch_userinfo: Optional[bool] = None
    uid_field: Optional[str] = None
    userinfo_uid_field: Optional[str] = None
    redirect_uri: Optional[str] = None


class SessionBundle(BaseModel):
    """Mutable state accumulated across the callback pipeline.

    Owned by a single :class:`~oidcauth.auth.base.RequestContext`; never
    shared between requests. All fields stay ``None`` until the step that
    produces them succeeds.
    """

    opts: Optional[StrategyOptions] = None
    tokens: Optional[dict[str, Any]] = None
    claims: Optional[dict[str, Any]] = None
    user_info: Optional[dict[str, Any]] = None


class AuthFailure(BaseModel):
    """One ``(key, message)`` error pair recorded on a request context.

    ``message`` is usually a string; for unrecognised client responses it is
    the raw value that could not be classified.
    """

    key: str
    message: Any = None

    def as_tuple(self) -> tuple[str, Any]:
        return (self.key, self.message)


# --- Identity record ---


class Info(BaseModel):
    """Profile information about the authenticated subject."""

    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    nickname: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    phone: Optional[str] = None
    birthday: Optional[str] = None
    urls: dict[str, str] = Field(default_factory=dict)


class Credentials(BaseModel):
    """Token material obtained from the provider."""

    token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    secret: Optional[str] = None
    expires: bool = False
    expires_at: Optional[int] = None
    scopes: list[str] = Field(default_factory=list)
    other: dict[str, Any] = Field(default_factory=dict)


class Extra(BaseModel):
    """Raw diagnostic data passed through untouched."""

    raw_info: dict[str, Any] = Field(default_factory=dict)


class Auth(BaseModel):
    """The provider-agnostic identity record assembled after a callback."""

    uid: Optional[str] = None
    provider: Optional[str] = None
    strategy: str
    info: Info = Field(default_factory=Info)
    credentials: Credentials = Field(default_factory=Credentials)
    extra: Extra = Field(default_factory=Extra)
