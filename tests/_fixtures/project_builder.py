"""Helper utilities for constructing temporary Java projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping


class ProjectBuilder:
    """Utility for writing source files into a throwaway project."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def java(self, files: Mapping[str, str], source_root: str = "src/main/java") -> None:
        """Write Java sources under ``source_root``."""
        self.write({f"{source_root}/{relative}": content for relative, content in files.items()})

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["ProjectBuilder"]
