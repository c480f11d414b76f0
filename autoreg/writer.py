"""Serialization of the accumulated registries into build output resources."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, ContextManager, Dict, Iterable, Iterator, List, Mapping

from .errors import IOWriteError
from .logging import get_logger
from .markers import FACTORIES_RESOURCE_LOCATION, service_resource_path
from .registry import RegistryAccumulator

_ENCODING = "utf-8"
_LINE_END = "\n"


class Filer(ABC):
    """Creates output resources at virtual paths under the build's output root."""

    @abstractmethod
    def create_resource(self, path: str) -> ContextManager[BinaryIO]:
        """Return a context manager yielding a writable binary stream for ``path``."""


class FileSystemFiler(Filer):
    """Writes resources beneath a directory on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @contextmanager
    def create_resource(self, path: str) -> Iterator[BinaryIO]:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("wb") as handle:
            yield handle


class MemoryFiler(Filer):
    """Keeps resources in memory; used for dry runs and tests."""

    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}

    @contextmanager
    def create_resource(self, path: str) -> Iterator[BinaryIO]:
        buffer = io.BytesIO()
        yield buffer
        self.files[path] = buffer.getvalue()

    def text(self, path: str) -> str:
        return self.files[path].decode(_ENCODING)


def render_factories(factories: Mapping[str, Iterable[str]]) -> str:
    """Render the grouped registry.

    Keys keep their insertion order; each key's implementations are sorted
    and written one per line, joined with ``,\\`` continuations.
    """
    lines: List[str] = []
    for key, implementations in factories.items():
        lines.append(f"{key}=\\")
        lines.append(f",\\{_LINE_END}".join(sorted(implementations)))
    return "".join(f"{line}{_LINE_END}" for line in lines)


def render_service(implementation: str) -> str:
    return f"{implementation}{_LINE_END}"


class RegistryWriter:
    """Flushes a :class:`RegistryAccumulator` through a :class:`Filer`."""

    def __init__(self) -> None:
        self.logger = get_logger("writer")

    def flush(self, accumulator: RegistryAccumulator, filer: Filer) -> List[str]:
        """Write every non-empty registry and return the virtual paths written.

        Nothing is written when the accumulator is empty. A storage failure
        stops the flush and raises :class:`IOWriteError`; files written
        before the failure are left in place.
        """
        if accumulator.is_empty():
            self.logger.debug("No registrations discovered; skipping registry output")
            return []

        written: List[str] = []
        factories = accumulator.factories
        if factories:
            self._write(filer, FACTORIES_RESOURCE_LOCATION, render_factories(factories))
            written.append(FACTORIES_RESOURCE_LOCATION)

        for contract, implementation in accumulator.services.items():
            path = service_resource_path(contract)
            self._write(filer, path, render_service(implementation))
            written.append(path)

        self.logger.info("Wrote %d registry file(s)", len(written))
        return written

    def _write(self, filer: Filer, path: str, content: str) -> None:
        try:
            with filer.create_resource(path) as handle:
                handle.write(content.encode(_ENCODING))
        except OSError as exc:
            raise IOWriteError(path, exc) from exc
        self.logger.debug("Wrote %s", path)


__all__ = [
    "FileSystemFiler",
    "Filer",
    "MemoryFiler",
    "RegistryWriter",
    "render_factories",
    "render_service",
]
