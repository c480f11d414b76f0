"""Round-by-round driving of processors, ending with the registry flush."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .errors import BuildFailure, IOWriteError
from .logging import get_logger
from .models import Declaration
from .processors import ProcessingEnvironment, Processor, RoundEnvironment
from .registry import RegistryAccumulator
from .writer import RegistryWriter


class BuildSession:
    """Runs processors over successive rounds of declarations for one build.

    The session owns the build's :class:`RegistryAccumulator`. Rounds run
    strictly one after another; the terminal round flushes the accumulator
    through the environment's filer and closes the session.
    """

    def __init__(
        self,
        env: ProcessingEnvironment,
        processors: Sequence[Processor],
        writer: RegistryWriter | None = None,
    ) -> None:
        self.env = env
        self.processors = list(processors)
        self.writer = writer or RegistryWriter()
        self.accumulator = RegistryAccumulator()
        self.logger = get_logger("rounds")
        self.round_number = 0
        self.written: List[str] = []
        self._closed = False
        self._check_options()
        for processor in self.processors:
            processor.init(env)

    @property
    def closed(self) -> bool:
        return self._closed

    def run_round(
        self, declarations: Sequence[Declaration], *, processing_over: bool = False
    ) -> List[str]:
        """Process one round; on the terminal round, flush and return the paths written."""
        if self._closed:
            raise BuildFailure("Build session already completed its terminal round")

        self.round_number += 1
        self.env.symbols.register(declarations)
        self.logger.debug(
            "Round %d: %d declaration(s)%s",
            self.round_number,
            len(declarations),
            " (terminal)" if processing_over else "",
        )

        round_env = RoundEnvironment(declarations=declarations, processing_over=processing_over)
        for processor in self.processors:
            processor.process(round_env, self.accumulator)

        if not processing_over:
            return []

        self._closed = True
        try:
            self.written = self.writer.flush(self.accumulator, self.env.filer)
        except IOWriteError as exc:
            raise BuildFailure(f"Failed to write registry files: {exc}") from exc
        return self.written

    def run(self, batches: Iterable[Sequence[Declaration]]) -> List[str]:
        """Run one round per batch followed by an empty terminal round."""
        for batch in batches:
            self.run_round(batch)
        return self.run_round([], processing_over=True)

    def _check_options(self) -> None:
        supported = set()
        for processor in self.processors:
            supported.update(processor.supported_options)
        for option in self.env.options:
            if option not in supported:
                self.logger.warning("Unrecognized processor option: %s", option)


__all__ = ["BuildSession"]
