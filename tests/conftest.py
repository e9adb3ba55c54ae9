"""Shared test fixtures for oidcauth.

Provides reusable fixtures for isolated settings environments, a provider
registry with a ``test_provider`` entry, a mocked OIDC client, strategy and
request-context factories, output state management and the CLI runner.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from oidcauth.auth.base import RequestContext
from oidcauth.client.base import OIDCClient
from oidcauth.client.results import ErrorWithMessage, Success
from oidcauth.models import ProviderConfig, StrategyDefaults
from oidcauth.output import OutputFormat, OutputManager, reset_output, set_output
from oidcauth.plugins.openid_connect import OpenIDConnectStrategy
from oidcauth.registry import StaticProviderRegistry


REQUEST_URI = "https://oidc.local/request"
CALLBACK_URI = "https://oidc.local/callback"
VALID_TOKENS = {"access_token": "1234", "id_token": "4321"}
VALID_CLAIMS = {"uid": "1234"}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Drop handlers the CLI attached to the ``oidcauth`` logger.

    The Rich handler is bound to the stderr stream of the CliRunner
    invocation that installed it, which is closed once that test ends.
    """
    yield
    logger = logging.getLogger("oidcauth")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Settings isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate settings to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user settings, clears all OIDCAUTH_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "OIDCAUTH_CONFIG",
        "OIDCAUTH_BASE_URL",
        "OIDCAUTH_DEFAULT_PROVIDER",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Provider and client fixtures
# ---------------------------------------------------------------------------


def _make_provider(**overrides: Any) -> ProviderConfig:
    """Build a ProviderConfig with sensible defaults overridden by kwargs."""
    values: dict[str, Any] = {
        "discovery_document_uri": "https://oidc.local/.well-known/openid-configuration",
        "client_id": "test-client",
    }
    values.update(overrides)
    return ProviderConfig(**values)


def _authorization_uri(provider: str, params: dict[str, Any]) -> Any:
    """Echo the redirect URI (and state, when present) like a real provider URL."""
    if provider != "test_provider":
        return ErrorWithMessage(f"unknown provider {provider}")
    url = f"{REQUEST_URI}?redirect_uri={params['redirect_uri']}"
    if params.get("state") is not None:
        url += f"&state={params['state']}"
    return Success(url)


@pytest.fixture
def oidc_client() -> MagicMock:
    """A mocked OIDC client answering with valid tokens and claims."""
    client = MagicMock(spec=OIDCClient)
    client.authorization_uri.side_effect = _authorization_uri
    client.fetch_tokens.return_value = Success(dict(VALID_TOKENS))
    client.verify.return_value = Success(dict(VALID_CLAIMS))
    client.discovery_document.return_value = {
        "userinfo_endpoint": "https://oidc.test/userinfo",
    }
    return client


@pytest.fixture
def make_strategy(oidc_client: MagicMock) -> Callable[..., OpenIDConnectStrategy]:
    """Factory for strategies over a ``test_provider`` registry entry.

    Keyword arguments override fields of the ``test_provider`` config.
    """

    def _make(
        defaults: StrategyDefaults | None = None,
        default_provider: str | None = None,
        **provider_overrides: Any,
    ) -> OpenIDConnectStrategy:
        registry = StaticProviderRegistry(
            {"test_provider": _make_provider(**provider_overrides)}
        )
        return OpenIDConnectStrategy(
            registry,
            oidc_client,
            defaults=defaults,
            default_provider=default_provider,
        )

    return _make


@pytest.fixture
def strategy(make_strategy: Callable[..., OpenIDConnectStrategy]) -> OpenIDConnectStrategy:
    """Strategy with an unconfigured ``test_provider`` (all defaults)."""
    return make_strategy()


def _make_context(
    params: dict[str, Any] | None = None,
    state_param: str | None = None,
) -> RequestContext:
    """Build a request context whose callback URL is :data:`CALLBACK_URI`."""
    return RequestContext(params=params, state_param=state_param, callback_url=CALLBACK_URI)


@pytest.fixture
def make_context() -> Callable[..., RequestContext]:
    """Factory for request contexts with a fixed callback URL."""
    return _make_context


@pytest.fixture
def make_provider() -> Callable[..., ProviderConfig]:
    """Factory for provider configs with test defaults."""
    return _make_provider


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
