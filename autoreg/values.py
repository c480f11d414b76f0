"""Effective marker values with fallback to declared defaults."""

from __future__ import annotations

from typing import Dict, List, Tuple

from .errors import MissingPropertyValue, UnresolvableMarkerProperty
from .models import MarkerUsage, SymbolTable, TypeRef, Value


class ValueExtractor:
    """Reads marker values, supplying defaults declared on the marker type."""

    def __init__(self, symbols: SymbolTable) -> None:
        self._symbols = symbols

    def effective_values(self, usage: MarkerUsage) -> Dict[str, Value]:
        """Return property -> value for ``usage`` in the marker's declaration order.

        Explicit values win over defaults. A property with neither is a
        marker usage error and raises :class:`MissingPropertyValue`. When the
        marker type is not known to the build the explicit values are
        returned unchanged.
        """
        marker = self._symbols.get(usage.name)
        if marker is None:
            return dict(usage.values)

        values: Dict[str, Value] = {}
        for prop in marker.properties:
            explicit = usage.explicit(prop.name)
            if explicit is not None:
                values[prop.name] = explicit
            elif prop.has_default:
                values[prop.name] = prop.default  # type: ignore[assignment]
            else:
                raise MissingPropertyValue(usage.name, prop.name)
        return values

    def value_of(self, usage: MarkerUsage, prop: str) -> Value:
        """Return the effective value of ``prop`` on ``usage``."""
        values = self.effective_values(usage)
        if prop not in values:
            raise UnresolvableMarkerProperty(usage.name, prop)
        return values[prop]

    def type_refs(self, usage: MarkerUsage, prop: str) -> Tuple[str, ...]:
        """Return the class literals held by ``prop``, flattening arrays, without duplicates."""
        names: List[str] = []
        for ref in _flatten(self.value_of(usage, prop)):
            if ref.name not in names:
                names.append(ref.name)
        return tuple(names)


def _flatten(value: Value) -> List[TypeRef]:
    if isinstance(value, TypeRef):
        return [value]
    if isinstance(value, tuple):
        refs: List[TypeRef] = []
        for item in value:
            refs.extend(_flatten(item))
        return refs
    return []


__all__ = ["ValueExtractor"]
