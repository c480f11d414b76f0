"""In-memory registry state collected across the rounds of one build."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Set

from .logging import get_logger


class RegistryAccumulator:
    """Owns every registry entry discovered during a build.

    One instance is created per build and handed to each processor call,
    then to the writer on the terminal round. Rounds run sequentially, so
    no locking is done.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, Set[str]] = {}
        self._services: Dict[str, str] = {}
        self.logger = get_logger("registry")

    def record_factory(self, key: str, implementation: str) -> None:
        """Add ``implementation`` under ``key`` in the grouped registry."""
        self._factories.setdefault(key, set()).add(implementation)

    def record_service(self, contract: str, implementation: str) -> None:
        """Register ``implementation`` as the provider of ``contract``.

        Only one provider is kept per contract: a later record replaces the
        earlier one. It is unresolved whether that single-provider collapse
        is intended or whether every provider should be kept as the grouped
        registry does; the current behaviour is preserved as-is.
        """
        previous = self._services.get(contract)
        if previous is not None and previous != implementation:
            self.logger.debug(
                "Provider %s replaces %s for %s", implementation, previous, contract
            )
        self._services[contract] = implementation

    @property
    def factories(self) -> Mapping[str, frozenset[str]]:
        return MappingProxyType(
            {key: frozenset(values) for key, values in self._factories.items()}
        )

    @property
    def services(self) -> Mapping[str, str]:
        return MappingProxyType(self._services)

    def is_empty(self) -> bool:
        return not self._factories and not self._services


__all__ = ["RegistryAccumulator"]
