"""Built-in processors and plugin lookup."""

from __future__ import annotations

from importlib import metadata
from typing import Dict, List, Sequence, Type

from ..logging import get_logger
from .base import ProcessingEnvironment, Processor, RoundEnvironment
from .factories import SpringFactoriesProcessor
from .services import AutoServiceProcessor

_ENTRY_POINT_GROUP = "autoreg.processors"

_BUILTINS: Dict[str, Type[Processor]] = {
    "factories": SpringFactoriesProcessor,
    "services": AutoServiceProcessor,
}

logger = get_logger("processors")


def available_processors() -> Dict[str, Type[Processor]]:
    """Map processor names to classes.

    Built-ins come first. Plugins registered under the ``autoreg.processors``
    entry-point group must point at a :class:`Processor` subclass and cannot
    shadow a name that is already taken.
    """
    registry = dict(_BUILTINS)
    for entry in metadata.entry_points().select(group=_ENTRY_POINT_GROUP):
        name = entry.name.lower()
        if name in registry:
            logger.warning("Ignoring processor plugin %r: name already registered", entry.name)
            continue
        loaded = entry.load()
        if not (isinstance(loaded, type) and issubclass(loaded, Processor)):
            raise TypeError(f"Processor plugin {entry.name!r} does not name a Processor subclass")
        registry[name] = loaded
    return registry


def discover_processors(enabled: Sequence[str] | None = None) -> List[Processor]:
    """Instantiate every known processor, or only ``enabled`` ones in the order given."""
    registry = available_processors()
    if enabled is None:
        names = list(registry)
    else:
        names = list(dict.fromkeys(name.lower() for name in enabled))
        unknown = [name for name in names if name not in registry]
        if unknown:
            raise ValueError(f"Unknown processors requested: {', '.join(sorted(unknown))}")
    return [registry[name]() for name in names]


__all__ = [
    "AutoServiceProcessor",
    "ProcessingEnvironment",
    "Processor",
    "RoundEnvironment",
    "SpringFactoriesProcessor",
    "available_processors",
    "discover_processors",
]
