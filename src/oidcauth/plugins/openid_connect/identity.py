"""Identity projections over a :class:`~oidcauth.models.SessionBundle`.

Pure functions: each reads a bundle snapshot and returns one view of the
authenticated subject. None of them mutates the bundle except
:func:`cleanup`, which exists to drop it.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from oidcauth.models import Credentials, Extra, Info, SessionBundle

logger = logging.getLogger(__name__)

# Standard OIDC claim names that differ from the Info field they feed.
_CLAIM_ALIASES = {
    "given_name": "first_name",
    "family_name": "last_name",
    "picture": "image",
    "phone_number": "phone",
    "birthdate": "birthday",
    "address": "location",
}
_URL_CLAIMS = ("profile", "website")
_INFO_FIELDS = frozenset(name for name in Info.model_fields if name != "urls")


def uid(bundle: SessionBundle) -> Any:
    """Return the subject identifier, or ``None`` when it cannot be found.

    With ``fetch_userinfo`` on, the uid comes from ``user_info`` under
    ``userinfo_uid_field``; otherwise from the ID-token claims under
    ``uid_field``.
    """
    opts = bundle.opts
    if opts is None:
        return None
    if opts.fetch_userinfo:
        return _lookup(bundle.user_info, opts.userinfo_uid_field)
    return _lookup(bundle.claims, opts.uid_field)


def info(bundle: SessionBundle) -> Info:
    """Map the recognised keys of ``user_info`` onto :class:`Info`.

    A direct field name wins over its OIDC alias. Unrecognised keys are
    dropped. Without user info every field is empty.
    """
    user_info = bundle.user_info or {}
    fields: dict[str, Any] = {}
    for key, value in user_info.items():
        target = _CLAIM_ALIASES.get(key, key)
        if target not in _INFO_FIELDS:
            continue
        if target != key and target in user_info:
            continue
        text = _as_text(value)
        if text is not None:
            fields[target] = text
    urls = {key: str(user_info[key]) for key in _URL_CLAIMS if user_info.get(key)}
    return Info(**fields, urls=urls)


def credentials(bundle: SessionBundle) -> Credentials:
    tokens = bundle.tokens or {}
    claims = bundle.claims or {}
    expires_at = _expires_at(claims.get("exp"))
    scope = tokens.get("scope")
    return Credentials(
        token=tokens.get("access_token"),
        refresh_token=tokens.get("refresh_token"),
        token_type=tokens.get("token_type"),
        expires=expires_at is not None,
        expires_at=expires_at,
        scopes=scope.split() if isinstance(scope, str) else [],
        other={
            "provider": bundle.opts.provider if bundle.opts is not None else None,
            "user_info": bundle.user_info,
        },
    )


def extra(bundle: SessionBundle) -> Extra:
    return Extra(
        raw_info={
            "tokens": bundle.tokens,
            "claims": bundle.claims,
            "opts": bundle.opts,
        }
    )


def cleanup(bundle: SessionBundle) -> SessionBundle:
    """Reset every bundle field to ``None``. Safe to call repeatedly."""
    bundle.opts = None
    bundle.claims = None
    bundle.tokens = None
    bundle.user_info = None
    return bundle


def _lookup(source: Optional[dict[str, Any]], field: Optional[str]) -> Any:
    if not source or not field:
        return None
    return source.get(field)


def _as_text(value: Any) -> Optional[str]:
    # address is a JSON object per OIDC Core 5.1.1
    if isinstance(value, dict):
        formatted = value.get("formatted")
        return str(formatted) if formatted is not None else None
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _expires_at(value: Any) -> Optional[int]:
    """Coerce an ``exp`` claim to an integer timestamp.

    Integers, floats and numeric strings (``"1234"``, ``"1234.0"``) are accepted
    and truncated to whole seconds. Anything else is treated as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            logger.warning("Ignoring malformed exp claim %r", value)
            return None
    logger.warning("Ignoring exp claim of unsupported type %s", type(value).__name__)
    return None
