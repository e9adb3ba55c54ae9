"""Built-in CLI sub-commands for oidcauth.

This package groups the Typer sub-command modules that form the CLI's
command tree:

* :mod:`~oidcauth.commands.providers` -- list, inspect, add and remove
  provider configurations.
* :mod:`~oidcauth.commands.flow` -- drive the two phases of a login
  (``authorize`` and ``callback``).

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``providers``) or plain callback functions
registered directly on the root app.
"""

from __future__ import annotations

from pathlib import Path

import typer

from oidcauth.models import Settings


def context_settings(ctx: typer.Context) -> Settings:
    """Resolve settings using the root ``--config``/``--base-url`` overrides."""
    from oidcauth.config import resolve_settings

    obj = ctx.obj or {}
    return resolve_settings(obj.get("config"), obj.get("base_url"))


def editable_settings(ctx: typer.Context) -> tuple[Settings, Path]:
    """Load the settings file for modification, without environment overrides.

    A settings file that does not exist yet yields default settings so the
    first ``providers add`` can create it.
    """
    from oidcauth.config import load_settings, settings_path

    obj = ctx.obj or {}
    path = settings_path(obj.get("config"))
    settings = load_settings(path) if path.is_file() else Settings()
    return settings, path
