"""Source tree scanning for Java compilation units."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".gradle",
    ".idea",
}

_SOURCE_SUFFIX = ".java"
# Module and package descriptors declare no registrable types.
_SKIPPED_FILES = {"module-info.java", "package-info.java"}


@dataclass(frozen=True)
class ExcludePattern:
    """One gitignore-style pattern; ``!`` re-includes, a trailing ``/`` matches directories."""

    glob: str
    directories_only: bool = False
    anchored: bool = False
    reinclude: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["ExcludePattern"]:
        text = line.strip()
        if not text or text.startswith("#"):
            return None
        reinclude = text.startswith("!")
        if reinclude:
            text = text[1:]
        glob = text.strip("/")
        if not glob:
            return None
        return cls(
            glob=glob,
            directories_only=text.endswith("/"),
            anchored=text.startswith("/") or "/" in glob,
            reinclude=reinclude,
        )

    def applies_to(self, rel_path: str, is_dir: bool) -> bool:
        if self.directories_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.glob)
        # Slash-free patterns match any single path segment.
        return any(fnmatchcase(segment, self.glob) for segment in rel_path.split("/"))


class ExcludeRules:
    """Ordered patterns; the last one that applies decides."""

    def __init__(self, patterns: Iterable[ExcludePattern] = ()) -> None:
        self.patterns = list(patterns)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ExcludeRules":
        return cls(pattern for pattern in map(ExcludePattern.parse, lines) if pattern)

    @classmethod
    def for_project(cls, root: Path, extra: Sequence[str] = ()) -> "ExcludeRules":
        gitignore = root / ".gitignore"
        lines = gitignore.read_text(encoding="utf-8").splitlines() if gitignore.is_file() else []
        return cls.from_lines([*lines, *extra])

    def excludes(self, rel_path: str, is_dir: bool) -> bool:
        excluded = False
        for pattern in self.patterns:
            if pattern.applies_to(rel_path, is_dir):
                excluded = not pattern.reinclude
        return excluded


@dataclass(frozen=True)
class SourceFile:
    """A Java source file and the source root it was found under."""

    source_root: str
    path: str
    text: str


class SourceScanner:
    """Collects ``.java`` files beneath the configured source roots."""

    def __init__(self, exclude_paths: Sequence[str] = ()) -> None:
        self.exclude_paths = list(exclude_paths)

    def scan(self, root: str | Path, source_roots: Sequence[str]) -> List[SourceFile]:
        """Return source files grouped by root, each root in order, files sorted by path."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        rules = ExcludeRules.for_project(root_path, self.exclude_paths)
        files: List[SourceFile] = []
        for source_root in source_roots:
            base = root_path / source_root
            if not base.is_dir():
                continue
            for path in sorted(self._iter_sources(root_path, base, rules)):
                files.append(
                    SourceFile(
                        source_root=source_root,
                        path=path.relative_to(root_path).as_posix(),
                        text=path.read_text(encoding="utf-8"),
                    )
                )
        return files

    @staticmethod
    def _iter_sources(root: Path, base: Path, rules: ExcludeRules) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(base):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"
            dirnames[:] = [
                name
                for name in dirnames
                if name not in _EXCLUDED_DIRS and not rules.excludes(f"{prefix}{name}", True)
            ]
            for filename in filenames:
                if not filename.endswith(_SOURCE_SUFFIX) or filename in _SKIPPED_FILES:
                    continue
                if not rules.excludes(f"{prefix}{filename}", False):
                    yield current_dir / filename


__all__ = ["ExcludePattern", "ExcludeRules", "SourceFile", "SourceScanner"]
