from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import pytest

from autoreg.frontend import load_catalog
from autoreg.models import Declaration, DeclarationKind, MarkerProperty, MarkerUsage, SymbolTable
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def symbols() -> SymbolTable:
    """A symbol table seeded with the bundled library catalogue."""
    return SymbolTable(load_catalog())


@pytest.fixture
def make_marker() -> Callable[..., Declaration]:
    """Build an annotation declaration from names and (name, default) pairs."""

    def _make(
        name: str,
        *,
        annotations: Iterable[str | MarkerUsage] = (),
        properties: Iterable[tuple[str, object]] = (),
    ) -> Declaration:
        return Declaration(
            name=name,
            kind=DeclarationKind.ANNOTATION,
            annotations=tuple(
                usage if isinstance(usage, MarkerUsage) else MarkerUsage(usage)
                for usage in annotations
            ),
            properties=tuple(MarkerProperty(prop, default) for prop, default in properties),  # type: ignore[arg-type]
        )

    return _make
