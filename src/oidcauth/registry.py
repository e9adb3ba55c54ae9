"""Provider registry -- read-only lookup of provider configuration by key.

Components that need provider configuration receive a
:class:`ProviderRegistry` at construction time instead of reading a global
settings table. :class:`StaticProviderRegistry` is the in-memory
implementation built once at process start; tests substitute their own.

See Also:
    :func:`registry_from_settings` for building a registry from
    :class:`~oidcauth.models.Settings`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Optional

from oidcauth.models import ProviderConfig, Settings


class ProviderRegistry(ABC):
    """Read contract for provider configuration."""

    @abstractmethod
    def get(self, key: str) -> Optional[ProviderConfig]:
        """Return the configuration for *key*, or ``None`` if unknown."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all registered provider keys, sorted."""
        ...

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


class StaticProviderRegistry(ProviderRegistry):
    """Registry over a fixed mapping of provider key to configuration.

    The mapping is copied and exposed read-only, so the registry can be
    shared by concurrent requests.

    Example::

        registry = StaticProviderRegistry({"corp": ProviderConfig(...)})
        registry.get("corp")
    """

    def __init__(self, providers: Mapping[str, ProviderConfig] | None = None) -> None:
        self._providers: Mapping[str, ProviderConfig] = MappingProxyType(
            dict(providers or {})
        )

    def get(self, key: str) -> Optional[ProviderConfig]:
        return self._providers.get(key)

    def keys(self) -> list[str]:
        return sorted(self._providers)


def registry_from_settings(settings: Settings) -> StaticProviderRegistry:
    """Build a :class:`StaticProviderRegistry` from the ``providers`` table."""
    return StaticProviderRegistry(settings.providers)
