"""Transitive marker resolution through composed (meta-annotated) markers."""

from __future__ import annotations

from typing import FrozenSet, Optional, Sequence, Tuple

from .markers import BUILTIN_NAMESPACES, in_builtin_namespace
from .models import Declaration, MarkerUsage, SymbolTable


class MarkerResolver:
    """Answers whether a declaration carries a marker, directly or through composition.

    Composed markers are followed by looking up each marker's own declaration
    in the symbol table and searching its usages. Markers in a built-in
    namespace are never entered. A visited set of marker names is threaded
    down each path so self-referential marker graphs terminate.
    """

    def __init__(
        self,
        symbols: SymbolTable,
        builtin_namespaces: Sequence[str] = BUILTIN_NAMESPACES,
    ) -> None:
        self._symbols = symbols
        self._builtin_namespaces = tuple(builtin_namespaces)

    def resolves(self, declaration: Declaration, target: str) -> bool:
        """Return True when ``declaration`` carries ``target`` directly or transitively."""
        return self.trace(declaration, target) is not None

    def trace(self, declaration: Declaration, target: str) -> Optional[Tuple[str, ...]]:
        """Return the marker chain leading to ``target``, or None when there is none.

        The first element is the usage found directly on ``declaration``; the
        last element is always ``target``.
        """
        return self._search(declaration.annotations, target, frozenset())

    def _search(
        self,
        usages: Sequence[MarkerUsage],
        target: str,
        visited: FrozenSet[str],
    ) -> Optional[Tuple[str, ...]]:
        for usage in usages:
            if usage.name == target:
                return (usage.name,)
            if usage.name in visited:
                continue
            if in_builtin_namespace(usage.name, self._builtin_namespaces):
                continue
            marker = self._symbols.get(usage.name)
            if marker is None:
                continue
            found = self._search(marker.annotations, target, visited | {usage.name})
            if found is not None:
                return (usage.name,) + found
        return None


__all__ = ["MarkerResolver"]
