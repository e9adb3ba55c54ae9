"""Provider commands -- view and edit OpenID Connect provider configurations.

Provides the ``oidcauth providers`` sub-command group. Provider entries live
in the settings file under ``providers`` and are keyed by the name passed as
the ``oidc_provider`` request parameter.

Typical workflow::

    oidcauth providers add corp --discovery https://id.example.com/.well-known/openid-configuration \\
        --client-id my-app --client-secret-source env:CORP_SECRET --default
    oidcauth providers list
    oidcauth providers show corp
    oidcauth providers remove corp
"""

from __future__ import annotations

from typing import Optional

import typer

from oidcauth.commands import context_settings, editable_settings
from oidcauth.exceptions import OIDCAuthError
from oidcauth.exit_codes import EXIT_INVALID_USAGE
from oidcauth.output import error, info, print_record, print_table, success, suggest


providers_app = typer.Typer(no_args_is_help=True)


@providers_app.command("list")
def providers_list(ctx: typer.Context) -> None:
    """List configured providers.

    The default provider is marked with ``*`` in the ``DEFAULT`` column.

    Example::

        oidcauth providers list
        oidcauth --json providers list
    """
    try:
        settings = context_settings(ctx)
    except OIDCAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not settings.providers:
        info("No providers configured.")
        suggest("Add one: oidcauth providers add NAME --discovery URL --client-id ID")
        return

    rows = []
    for name in sorted(settings.providers):
        config = settings.providers[name]
        rows.append([
            name,
            config.discovery_document_uri,
            config.client_id,
            "*" if name == settings.default_provider else "",
        ])
    print_table(["NAME", "DISCOVERY", "CLIENT ID", "DEFAULT"], rows, title="Providers")


@providers_app.command("show")
def providers_show(
    ctx: typer.Context,
    name: str = typer.Argument(help="Provider name."),
) -> None:
    """Show one provider's configuration.

    Raises:
        typer.Exit: With code 2 if no provider is configured as *name*.
    """
    try:
        settings = context_settings(ctx)
    except OIDCAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    config = settings.providers.get(name)
    if config is None:
        error(f"Unknown provider: {name}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    print_record(config.model_dump(mode="json", exclude_none=True))


@providers_app.command("add")
def providers_add(
    ctx: typer.Context,
    name: str = typer.Argument(help="Provider name."),
    discovery: str = typer.Option(
        ..., "--discovery", help="URL of the provider's OpenID discovery document."
    ),
    client_id: str = typer.Option(..., "--client-id", help="OAuth client identifier."),
    client_secret_source: Optional[str] = typer.Option(
        None,
        "--client-secret-source",
        help="Where to read the client secret: env:VAR or file:/path.",
    ),
    scope: str = typer.Option("openid email profile", "--scope", help="Requested scopes."),
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect-uri", help="Override the computed callback URL."
    ),
    fetch_userinfo: Optional[bool] = typer.Option(
        None,
        "--fetch-userinfo/--no-fetch-userinfo",
        help="Fetch user info after verifying the ID token.",
    ),
    uid_field: Optional[str] = typer.Option(
        None, "--uid-field", help="ID-token claim holding the uid."
    ),
    userinfo_uid_field: Optional[str] = typer.Option(
        None, "--userinfo-uid-field", help="User-info claim holding the uid."
    ),
    make_default: bool = typer.Option(
        False, "--default", help="Use this provider when a request names none."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Replace an existing entry."),
) -> None:
    """Add (or replace) a provider configuration.

    The entry is validated before it is saved: the discovery URI must be
    http(s), the scope must include ``openid`` and only the
    authorization-code response type is accepted.

    Raises:
        typer.Exit: With code 2 if the entry exists (without ``--force``) or
            fails validation.
    """
    from oidcauth.auth import create_default_manager
    from oidcauth.config import save_settings
    from oidcauth.models import ProviderConfig

    try:
        settings, path = editable_settings(ctx)
    except OIDCAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if name in settings.providers and not force:
        error(f"Provider '{name}' already exists. Use --force to replace it.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    config = ProviderConfig(
        discovery_document_uri=discovery,
        client_id=client_id,
        client_secret_source=client_secret_source,
        scope=scope,
        redirect_uri=redirect_uri,
        fetch_userinfo=fetch_userinfo,
        uid_field=uid_field,
        userinfo_uid_field=userinfo_uid_field,
    )
    strategy = create_default_manager(settings).get_strategy("oidc")
    problems = strategy.validate_config(config)
    if problems:
        for problem in problems:
            error(problem)
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    settings.providers[name] = config
    if make_default:
        settings.default_provider = name
    written = save_settings(settings, path)
    success(f"Provider '{name}' saved to {written}")
    suggest(f"Start a login: oidcauth authorize {name}")


@providers_app.command("remove")
def providers_remove(
    ctx: typer.Context,
    name: str = typer.Argument(help="Provider name."),
) -> None:
    """Remove a provider configuration.

    Clears ``default_provider`` as well when it pointed at *name*.

    Raises:
        typer.Exit: With code 2 if no provider is configured as *name*.
    """
    from oidcauth.config import save_settings

    try:
        settings, path = editable_settings(ctx)
    except OIDCAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if name not in settings.providers:
        error(f"Unknown provider: {name}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    del settings.providers[name]
    if settings.default_provider == name:
        settings.default_provider = None
    save_settings(settings, path)
    success(f"Provider '{name}' removed.")
