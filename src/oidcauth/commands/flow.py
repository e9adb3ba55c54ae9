"""Flow commands -- run the request and callback phases of a login.

``oidcauth authorize`` prints the provider's authorization URL (optionally
opening it in a browser). After signing in, the provider redirects to the
callback URL with ``code`` and ``state`` query parameters; pass them to
``oidcauth callback`` to exchange the code and print the identity record.

Typical workflow::

    oidcauth authorize corp --state 3f9a --open
    oidcauth callback corp --code SplxlOBeZQQYbYS6WxSbIA --state 3f9a --expected-state 3f9a
"""

from __future__ import annotations

import webbrowser
from typing import Optional

import typer

from oidcauth.auth.base import RequestContext
from oidcauth.commands import context_settings
from oidcauth.exceptions import OIDCAuthError
from oidcauth.exit_codes import EXIT_AUTH_FAILURE
from oidcauth.output import debug, error, info, print_data, print_record, warning


def _report_failures(context: RequestContext) -> None:
    for failure in context.errors:
        error(f"{failure.key}: {failure.message}")


def authorize_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Provider to authenticate against."),
    state: Optional[str] = typer.Option(
        None, "--state", help="CSRF state token to embed in the URL."
    ),
    open_browser: bool = typer.Option(
        False, "--open", help="Open the authorization URL in a browser."
    ),
) -> None:
    """Print the authorization URL for provider NAME.

    The URL is written to stdout so it can be captured by scripts. With
    ``--open`` it is also handed to the system browser.

    Raises:
        typer.Exit: With code 3 if the URL could not be constructed.

    Example::

        oidcauth authorize corp
        oidcauth authorize corp --state 3f9a --open
    """
    from oidcauth.auth import create_default_manager
    from oidcauth.plugins.openid_connect import PROVIDER_PARAM

    try:
        manager = create_default_manager(context_settings(ctx))
        context = manager.build_context({PROVIDER_PARAM: name}, state_param=state)
        manager.request("oidc", context)
    except OIDCAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if context.failed:
        _report_failures(context)
        raise typer.Exit(code=EXIT_AUTH_FAILURE)

    debug(f"Callback URL: {context.callback_url}")
    print_data(context.redirect_url)
    if open_browser:
        info("Opening browser...")
        webbrowser.open(context.redirect_url)


def callback_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Provider that issued the code."),
    code: str = typer.Option(..., "--code", help="Authorization code from the callback."),
    state: Optional[str] = typer.Option(
        None, "--state", help="State parameter returned on the callback."
    ),
    expected_state: Optional[str] = typer.Option(
        None, "--expected-state", help="State token issued by 'authorize'."
    ),
) -> None:
    """Exchange CODE for tokens and print the identity record.

    When ``--expected-state`` is given, ``--state`` must match it or the
    callback is rejected as a CSRF attempt.

    Raises:
        typer.Exit: With code 3 if a failure was recorded, or with the
            error's exit code for settings and connection errors.

    Example::

        oidcauth callback corp --code SplxlOBeZQQYbYS6WxSbIA
        oidcauth --json callback corp --code abc --state 3f9a --expected-state 3f9a
    """
    from oidcauth.auth import create_default_manager
    from oidcauth.plugins.openid_connect import PROVIDER_PARAM

    params = {"code": code, PROVIDER_PARAM: name}
    if state is not None:
        params["state"] = state
    if state is not None and expected_state is None:
        warning("--state given without --expected-state; the state is not checked.")

    try:
        manager = create_default_manager(context_settings(ctx))
        context = manager.build_context(params, state_param=expected_state)
        manager.callback("oidc", context)
        if context.failed:
            _report_failures(context)
            raise typer.Exit(code=EXIT_AUTH_FAILURE)
        auth = manager.build_auth("oidc", context)
        manager.cleanup("oidc", context)
    except OIDCAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_record(auth.model_dump(mode="json"))
