"""YAML declaration manifests for types the build sees but does not compile."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from ..config import ConfigError
from ..models import Declaration, DeclarationKind, MarkerProperty, MarkerUsage, TypeRef, Value

_CATALOG_PACKAGE = "autoreg.catalog"
_CATALOG_FILES = ("spring.yml",)


def load_declarations(path: Path) -> List[Declaration]:
    """Parse a declaration manifest file.

    The file holds a ``declarations`` list; each entry has ``name``,
    optional ``kind``, ``supertypes``, ``annotations`` (``name`` plus
    ``values``) and, for annotation kinds, ``properties`` (``name`` plus
    optional ``default``). Class literals are written as ``{type: a.b.C}``.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read declaration manifest {path}: {exc}") from exc
    return parse_declarations(text, origin=str(path))


def load_catalog() -> List[Declaration]:
    """Return the bundled library declarations."""
    declarations: List[Declaration] = []
    package = resources.files(_CATALOG_PACKAGE)
    for filename in _CATALOG_FILES:
        text = package.joinpath(filename).read_text(encoding="utf-8")
        declarations.extend(parse_declarations(text, origin=filename))
    return declarations


def parse_declarations(text: str, *, origin: str = "<manifest>") -> List[Declaration]:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {origin}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("declarations", []), list):
        raise ConfigError(f"{origin} must contain a 'declarations' list")

    declarations: List[Declaration] = []
    for entry in data.get("declarations", []):
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigError(f"{origin}: every declaration needs a name")
        try:
            kind = DeclarationKind.parse(str(entry.get("kind", "class")))
        except ValueError as exc:
            raise ConfigError(f"{origin}: unknown kind for {entry['name']}") from exc
        declarations.append(
            Declaration(
                name=str(entry["name"]),
                kind=kind,
                annotations=tuple(_usage(item, origin) for item in entry.get("annotations") or []),
                supertypes=tuple(str(item) for item in entry.get("supertypes") or []),
                properties=tuple(_property(item, origin) for item in entry.get("properties") or []),
                source=origin,
            )
        )
    return declarations


def _usage(item: Any, origin: str) -> MarkerUsage:
    if isinstance(item, str):
        return MarkerUsage(name=item)
    if not isinstance(item, dict) or not item.get("name"):
        raise ConfigError(f"{origin}: annotation entries need a name")
    values: Dict[str, Value] = {
        str(key): _value(raw) for key, raw in (item.get("values") or {}).items()
    }
    return MarkerUsage(name=str(item["name"]), values=values)


def _property(item: Any, origin: str) -> MarkerProperty:
    if isinstance(item, str):
        return MarkerProperty(name=item)
    if not isinstance(item, dict) or not item.get("name"):
        raise ConfigError(f"{origin}: property entries need a name")
    default = _value(item["default"]) if item.get("default") is not None else None
    return MarkerProperty(name=str(item["name"]), default=default)


def _value(raw: Any) -> Value:
    if isinstance(raw, dict) and "type" in raw:
        return TypeRef(str(raw["type"]))
    if isinstance(raw, list):
        items: Tuple[Value, ...] = tuple(_value(item) for item in raw)
        return items
    if isinstance(raw, (str, int, float, bool)):
        return raw
    return str(raw)


__all__ = ["load_catalog", "load_declarations", "parse_declarations"]
