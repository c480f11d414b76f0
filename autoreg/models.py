"""Declaration model shared across autoreg components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union


class DeclarationKind(str, Enum):
    """Kinds of type declarations visible to the build."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    ANNOTATION = "annotation"

    @classmethod
    def parse(cls, value: str) -> "DeclarationKind":
        lowered = value.strip().lower()
        if lowered in {"@interface", "annotation_type"}:
            return cls.ANNOTATION
        return cls(lowered)


@dataclass(frozen=True)
class TypeRef:
    """A class literal (``Foo.class``) carried as a marker value."""

    name: str

    def __str__(self) -> str:
        return self.name


Value = Union[str, int, float, bool, TypeRef, Tuple["Value", ...]]


@dataclass(frozen=True)
class MarkerProperty:
    """A property declared on a marker type, with its optional default."""

    name: str
    default: Optional[Value] = None

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class MarkerUsage:
    """An occurrence of a marker on a declaration, with its explicit values."""

    name: str
    values: Mapping[str, Value] = field(default_factory=dict)

    def explicit(self, prop: str) -> Optional[Value]:
        return self.values.get(prop)


@dataclass(frozen=True)
class Declaration:
    """Immutable snapshot of a type declaration supplied to a round."""

    name: str
    kind: DeclarationKind = DeclarationKind.CLASS
    annotations: Tuple[MarkerUsage, ...] = ()
    supertypes: Tuple[str, ...] = ()
    properties: Tuple[MarkerProperty, ...] = ()
    source: Optional[str] = None

    def is_class_or_interface(self) -> bool:
        return self.kind in (DeclarationKind.CLASS, DeclarationKind.INTERFACE)

    def usages_of(self, marker: str) -> List[MarkerUsage]:
        return [usage for usage in self.annotations if usage.name == marker]


class SymbolTable:
    """Qualified-name index of every declaration the build can see.

    This is the stand-in for the host compiler's symbol model: it holds
    library stubs and the declarations presented by each round.
    """

    def __init__(self, declarations: Iterable[Declaration] = ()) -> None:
        self._declarations: Dict[str, Declaration] = {}
        self.register(declarations)

    def register(self, declarations: Iterable[Declaration]) -> None:
        for declaration in declarations:
            self._declarations[declaration.name] = declaration

    def get(self, name: str) -> Optional[Declaration]:
        return self._declarations.get(name)

    def names(self) -> List[str]:
        return list(self._declarations)

    def __contains__(self, name: object) -> bool:
        return name in self._declarations

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._declarations.values())

    def __len__(self) -> int:
        return len(self._declarations)


__all__ = [
    "Declaration",
    "DeclarationKind",
    "MarkerProperty",
    "MarkerUsage",
    "SymbolTable",
    "TypeRef",
    "Value",
]
