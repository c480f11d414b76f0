"""Processor that lists component-marked types in the grouped registry."""

from __future__ import annotations

from ..logging import get_logger
from ..registry import RegistryAccumulator
from ..resolver import MarkerResolver
from .base import ProcessingEnvironment, Processor, RoundEnvironment


class SpringFactoriesProcessor(Processor):
    """Registers classes and interfaces that resolve to a factory marker."""

    def __init__(self) -> None:
        self.logger = get_logger("processors.factories")

    def init(self, env: ProcessingEnvironment) -> None:
        super().init(env)
        self._resolver = MarkerResolver(env.symbols, env.builtin_namespaces)

    def process(self, round_env: RoundEnvironment, accumulator: RegistryAccumulator) -> None:
        for declaration in round_env.declarations:
            if not declaration.is_class_or_interface():
                continue
            for marker in self.env.factory_markers:
                chain = self._resolver.trace(declaration, marker.annotation)
                if chain is None:
                    continue
                accumulator.record_factory(marker.key, declaration.name)
                self.logger.debug(
                    "%s registered under %s via %s",
                    declaration.name,
                    marker.key,
                    " -> ".join(chain),
                )


__all__ = ["SpringFactoriesProcessor"]
