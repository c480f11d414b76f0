"""Base classes for registry processors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Sequence, Tuple

from ..markers import BUILTIN_NAMESPACES, DEFAULT_FACTORY_MARKERS, SERVICE_MARKER, FactoryMarker
from ..models import Declaration, SymbolTable
from ..registry import RegistryAccumulator
from ..writer import Filer


@dataclass
class ProcessingEnvironment:
    """Collaborators shared by every processor for the lifetime of a build."""

    symbols: SymbolTable
    filer: Filer
    options: Dict[str, str] = field(default_factory=dict)
    factory_markers: Tuple[FactoryMarker, ...] = DEFAULT_FACTORY_MARKERS
    service_marker: str = SERVICE_MARKER
    builtin_namespaces: Tuple[str, ...] = BUILTIN_NAMESPACES

    @property
    def debug(self) -> bool:
        return self.options.get("debug", "false").strip().lower() in {"true", "yes", "1"}


@dataclass(frozen=True)
class RoundEnvironment:
    """Declarations newly visible in one round, and whether it is the last round."""

    declarations: Sequence[Declaration]
    processing_over: bool = False


class Processor(ABC):
    """Contract for processors that turn round declarations into registry entries."""

    supported_options: FrozenSet[str] = frozenset({"debug"})

    def init(self, env: ProcessingEnvironment) -> None:
        self.env = env

    @abstractmethod
    def process(self, round_env: RoundEnvironment, accumulator: RegistryAccumulator) -> None:
        """Inspect the round's declarations and record matches into ``accumulator``."""
