"""Tests for the exception hierarchy and exit-code mapping."""

from __future__ import annotations

import pytest

from oidcauth.exceptions import (
    AuthError,
    ClientError,
    ConfigurationError,
    MissingParameterError,
    OIDCAuthError,
    SettingsError,
    StrategyError,
    UnknownResponseError,
    UpstreamError,
    UserInfoError,
)
from oidcauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
)


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (OIDCAuthError("x"), EXIT_GENERIC_FAILURE),
        (SettingsError("x"), EXIT_GENERIC_FAILURE),
        (AuthError("x"), EXIT_AUTH_FAILURE),
        (ClientError("x"), EXIT_CONNECTION_ERROR),
        (UserInfoError("x"), EXIT_CONNECTION_ERROR),
        (ConfigurationError(), EXIT_AUTH_FAILURE),
    ],
)
def test_exit_codes(exc: OIDCAuthError, code: int) -> None:
    assert exc.exit_code == code


def test_exit_code_override() -> None:
    assert ClientError("x", exit_code=9).exit_code == 9


def test_user_info_error_is_not_recorded() -> None:
    assert not issubclass(UserInfoError, StrategyError)


class TestFailures:
    def test_configuration_error(self) -> None:
        assert ConfigurationError().to_failure().as_tuple() == (
            "error",
            "Authorization URL could not be constructed",
        )

    def test_missing_parameter(self) -> None:
        assert MissingParameterError().to_failure().as_tuple() == (
            "error",
            "Query string does not contain field 'code'",
        )
        assert str(MissingParameterError("oidc_provider")) == (
            "Query string does not contain field 'oidc_provider'"
        )

    def test_upstream_error_keeps_code(self) -> None:
        assert UpstreamError("reason").to_failure().as_tuple() == ("error", "reason")
        assert UpstreamError("Code expired", error_key="invalid_grant").to_failure().as_tuple() == (
            "invalid_grant",
            "Code expired",
        )

    def test_unknown_response_keeps_raw_value(self) -> None:
        raw = {"weird": ["shape"]}

        failure = UnknownResponseError(raw).to_failure()

        assert failure.key == "unknown_error"
        assert failure.message == raw
