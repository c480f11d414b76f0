"""Tree-sitter powered reader that turns Java sources into declarations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import tree_sitter_java
from tree_sitter import Language, Node, Parser

from ..logging import get_logger
from ..models import Declaration, DeclarationKind, MarkerProperty, MarkerUsage, TypeRef, Value

JAVA_LANGUAGE = Language(tree_sitter_java.language())

_TYPE_DECLARATIONS = {
    "class_declaration": DeclarationKind.CLASS,
    "interface_declaration": DeclarationKind.INTERFACE,
    "enum_declaration": DeclarationKind.ENUM,
    "record_declaration": DeclarationKind.RECORD,
    "annotation_type_declaration": DeclarationKind.ANNOTATION,
}
_ANNOTATION_NODES = {"annotation", "marker_annotation"}
_NAME_NODES = {"identifier", "scoped_identifier"}
_COMMENT_NODES = {"comment", "line_comment", "block_comment"}
_INTEGER_NODES = {"decimal_integer_literal", "hex_integer_literal", "binary_integer_literal"}
_FLOAT_NODES = {"decimal_floating_point_literal"}

# Resolvable without an import; the rest of java.lang comes from the catalogue.
_JAVA_LANG_TYPES = frozenset(
    {
        "AutoCloseable",
        "Cloneable",
        "Comparable",
        "Enum",
        "Error",
        "Exception",
        "Iterable",
        "Number",
        "Object",
        "Record",
        "Runnable",
        "RuntimeException",
        "String",
        "Thread",
        "Throwable",
    }
)
_ANNOTATION_SUPERTYPE = "java.lang.annotation.Annotation"


@dataclass
class _RawAnnotation:
    name: str
    values: Dict[str, Value] = field(default_factory=dict)


@dataclass
class _RawType:
    name: str
    scope: str
    kind: DeclarationKind
    annotations: List[_RawAnnotation] = field(default_factory=list)
    supertypes: List[str] = field(default_factory=list)
    properties: List[MarkerProperty] = field(default_factory=list)


@dataclass
class CompilationUnit:
    """Names found in one source file before cross-file resolution."""

    path: str
    package: str = ""
    single_imports: Dict[str, str] = field(default_factory=dict)
    on_demand_imports: List[str] = field(default_factory=list)
    types: List[_RawType] = field(default_factory=list)

    def qualified_names(self) -> List[str]:
        return [raw.name for raw in self.types]


class JavaSourceReader:
    """Parses Java compilation units and resolves the type names they mention."""

    def __init__(self) -> None:
        self._parser = Parser(JAVA_LANGUAGE)
        self.logger = get_logger("frontend.java")

    def read_all(
        self, sources: Iterable[Tuple[str, str]], known: Iterable[str] = ()
    ) -> List[Declaration]:
        """Parse ``(path, text)`` pairs and return their resolved declarations."""
        units = [self.parse(text, path) for path, text in sources]
        return self.resolve(units, known)

    def parse(self, source: str, path: str = "<source>") -> CompilationUnit:
        source_bytes = source.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        if tree.root_node.has_error:
            self.logger.warning("Syntax errors in %s; declarations may be incomplete", path)

        unit = CompilationUnit(path=path)
        for child in tree.root_node.named_children:
            if child.type == "package_declaration":
                unit.package = self._first_name(child, source_bytes)
            elif child.type == "import_declaration":
                self._add_import(unit, child, source_bytes)
            elif child.type in _TYPE_DECLARATIONS:
                self._collect_type(unit, child, source_bytes, unit.package)
        return unit

    def resolve(self, units: Sequence[CompilationUnit], known: Iterable[str] = ()) -> List[Declaration]:
        """Qualify every type name in ``units`` against all types the build can see."""
        known_names: Set[str] = set(known)
        for unit in units:
            known_names.update(unit.qualified_names())

        declarations: List[Declaration] = []
        for unit in units:
            names = _NameResolver(unit, known_names)
            for raw in unit.types:
                declarations.append(
                    Declaration(
                        name=raw.name,
                        kind=raw.kind,
                        annotations=tuple(
                            MarkerUsage(
                                name=names.qualify(annotation.name, raw.scope),
                                values={
                                    key: names.qualify_value(value, raw.scope)
                                    for key, value in annotation.values.items()
                                },
                            )
                            for annotation in raw.annotations
                        ),
                        supertypes=tuple(names.qualify(name, raw.scope) for name in raw.supertypes),
                        properties=tuple(
                            MarkerProperty(
                                name=prop.name,
                                default=(
                                    names.qualify_value(prop.default, raw.name)
                                    if prop.default is not None
                                    else None
                                ),
                            )
                            for prop in raw.properties
                        ),
                        source=unit.path,
                    )
                )
        return declarations

    # Parsing helpers

    def _add_import(self, unit: CompilationUnit, node: Node, source_bytes: bytes) -> None:
        if any(child.type == "static" for child in node.children):
            return
        name = self._first_name(node, source_bytes)
        if not name:
            return
        if any(child.type == "asterisk" for child in node.children):
            unit.on_demand_imports.append(name)
        else:
            unit.single_imports[name.rsplit(".", 1)[-1]] = name

    def _collect_type(self, unit: CompilationUnit, node: Node, source_bytes: bytes, scope: str) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        simple = _node_text(name_node, source_bytes)
        qualified = f"{scope}.{simple}" if scope else simple
        kind = _TYPE_DECLARATIONS[node.type]

        raw = _RawType(name=qualified, scope=scope, kind=kind)
        raw.annotations = self._annotations(node, source_bytes)
        raw.supertypes = self._supertypes(node, source_bytes)
        if kind is DeclarationKind.ANNOTATION:
            raw.supertypes.append(_ANNOTATION_SUPERTYPE)
        unit.types.append(raw)

        body = node.child_by_field_name("body")
        if body is None:
            return
        if kind is DeclarationKind.ANNOTATION:
            raw.properties = self._properties(body, source_bytes)
        self._collect_members(unit, body, source_bytes, qualified)

    def _collect_members(self, unit: CompilationUnit, body: Node, source_bytes: bytes, scope: str) -> None:
        for member in body.named_children:
            if member.type in _TYPE_DECLARATIONS:
                self._collect_type(unit, member, source_bytes, scope)
            elif member.type == "enum_body_declarations":
                self._collect_members(unit, member, source_bytes, scope)

    def _annotations(self, node: Node, source_bytes: bytes) -> List[_RawAnnotation]:
        modifiers = next((child for child in node.named_children if child.type == "modifiers"), None)
        if modifiers is None:
            return []
        annotations: List[_RawAnnotation] = []
        for child in modifiers.named_children:
            if child.type not in _ANNOTATION_NODES:
                continue
            name_node = child.child_by_field_name("name") or next(
                (part for part in child.named_children if part.type in _NAME_NODES), None
            )
            if name_node is None:
                continue
            annotation = _RawAnnotation(name=_node_text(name_node, source_bytes))
            arguments = child.child_by_field_name("arguments")
            if arguments is not None:
                annotation.values = self._arguments(arguments, source_bytes)
            annotations.append(annotation)
        return annotations

    def _arguments(self, arguments: Node, source_bytes: bytes) -> Dict[str, Value]:
        children = [child for child in arguments.named_children if child.type not in _COMMENT_NODES]
        pairs = [child for child in children if child.type == "element_value_pair"]
        if not pairs:
            # Single-element shorthand: @Marker(x) means value = x.
            return {"value": self._element_value(children[0], source_bytes)} if children else {}

        values: Dict[str, Value] = {}
        for pair in pairs:
            parts = [part for part in pair.named_children if part.type not in _COMMENT_NODES]
            key_node = pair.child_by_field_name("key") or parts[0]
            value_node = pair.child_by_field_name("value") or parts[-1]
            values[_node_text(key_node, source_bytes)] = self._element_value(value_node, source_bytes)
        return values

    def _element_value(self, node: Node, source_bytes: bytes) -> Value:
        kind = node.type
        text = _node_text(node, source_bytes)
        if kind == "class_literal":
            return TypeRef(_type_name(node.named_children[0], source_bytes))
        if kind == "element_value_array_initializer":
            return tuple(
                self._element_value(child, source_bytes)
                for child in node.named_children
                if child.type not in _COMMENT_NODES
            )
        if kind == "string_literal":
            if text.startswith('"""'):
                return text[3:-3].strip()
            return text[1:-1]
        if kind == "character_literal":
            return text[1:-1]
        if kind == "true":
            return True
        if kind == "false":
            return False
        if kind in _INTEGER_NODES:
            try:
                return int(text.rstrip("lL").replace("_", ""), 0)
            except ValueError:
                return text
        if kind in _FLOAT_NODES:
            try:
                return float(text.rstrip("fFdD").replace("_", ""))
            except ValueError:
                return text
        return text

    def _supertypes(self, node: Node, source_bytes: bytes) -> List[str]:
        supertypes: List[str] = []
        for child in node.named_children:
            if child.type == "superclass":
                types = [part for part in child.named_children if part.type not in _ANNOTATION_NODES]
                if types:
                    supertypes.append(_type_name(types[0], source_bytes))
            elif child.type in {"super_interfaces", "extends_interfaces"}:
                type_list = next((part for part in child.named_children if part.type == "type_list"), None)
                if type_list is None:
                    continue
                supertypes.extend(
                    _type_name(part, source_bytes)
                    for part in type_list.named_children
                    if part.type not in _COMMENT_NODES
                )
        return supertypes

    def _properties(self, body: Node, source_bytes: bytes) -> List[MarkerProperty]:
        properties: List[MarkerProperty] = []
        for member in body.named_children:
            if member.type != "annotation_type_element_declaration":
                continue
            name_node = member.child_by_field_name("name")
            if name_node is None:
                continue
            properties.append(
                MarkerProperty(
                    name=_node_text(name_node, source_bytes),
                    default=self._default_value(member, source_bytes),
                )
            )
        return properties

    def _default_value(self, member: Node, source_bytes: bytes) -> Optional[Value]:
        seen_default = False
        for child in member.children:
            if child.type == "default":
                seen_default = True
            elif seen_default and child.is_named and child.type not in _COMMENT_NODES:
                return self._element_value(child, source_bytes)
        return None

    @staticmethod
    def _first_name(node: Node, source_bytes: bytes) -> str:
        for child in node.named_children:
            if child.type in _NAME_NODES:
                return _node_text(child, source_bytes)
        return ""


class _NameResolver:
    """Maps names as written in one compilation unit to qualified names."""

    def __init__(self, unit: CompilationUnit, known: Set[str]) -> None:
        self.package = unit.package
        self.single_imports = unit.single_imports
        self.on_demand_imports = unit.on_demand_imports
        self.known = known

    def qualify(self, name: str, scope: str) -> str:
        if not name:
            return name
        head, dot, rest = name.partition(".")
        resolved = self._simple(head, scope)
        if resolved is not None:
            return f"{resolved}.{rest}" if dot else resolved
        if dot:
            return name
        return f"{self.package}.{name}" if self.package else name

    def qualify_value(self, value: Value, scope: str) -> Value:
        if isinstance(value, TypeRef):
            return TypeRef(self.qualify(value.name, scope))
        if isinstance(value, tuple):
            return tuple(self.qualify_value(item, scope) for item in value)
        return value

    def _simple(self, simple: str, scope: str) -> Optional[str]:
        enclosing = scope
        while enclosing and enclosing != self.package:
            candidate = f"{enclosing}.{simple}"
            if candidate in self.known:
                return candidate
            enclosing = enclosing.rpartition(".")[0]

        if simple in self.single_imports:
            return self.single_imports[simple]

        same_package = f"{self.package}.{simple}" if self.package else simple
        if same_package in self.known:
            return same_package

        implicit = f"java.lang.{simple}"
        if implicit in self.known or simple in _JAVA_LANG_TYPES:
            return implicit

        for package in self.on_demand_imports:
            candidate = f"{package}.{simple}"
            if candidate in self.known:
                return candidate
        return None


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _type_name(node: Node, source_bytes: bytes) -> str:
    if node.type == "generic_type":
        base = next(
            (child for child in node.named_children if child.type != "type_arguments"), None
        )
        if base is not None:
            return _type_name(base, source_bytes)
    return "".join(_node_text(node, source_bytes).split())


__all__ = ["CompilationUnit", "JAVA_LANGUAGE", "JavaSourceReader"]
