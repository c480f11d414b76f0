"""Exception types raised by the registry build."""

from __future__ import annotations


class AutoRegError(RuntimeError):
    """Base class for fatal registry build errors."""


class MissingPropertyValue(AutoRegError):
    """Raised when a marker property has neither an explicit value nor a default."""

    def __init__(self, marker: str, prop: str) -> None:
        super().__init__(
            f"Unset annotation value without default on @{marker}: {prop}()"
        )
        self.marker = marker
        self.prop = prop


class UnresolvableMarkerProperty(AutoRegError):
    """Raised when a property is requested that the marker does not declare."""

    def __init__(self, marker: str, prop: str) -> None:
        super().__init__(f"@{marker} does not define an element {prop}()")
        self.marker = marker
        self.prop = prop


class IOWriteError(AutoRegError):
    """Raised when a registry resource cannot be written."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Unable to write {path}{detail}")
        self.path = path


class BuildFailure(AutoRegError):
    """Raised when a build must stop; wraps the originating error as ``__cause__``."""


__all__ = [
    "AutoRegError",
    "BuildFailure",
    "IOWriteError",
    "MissingPropertyValue",
    "UnresolvableMarkerProperty",
]
