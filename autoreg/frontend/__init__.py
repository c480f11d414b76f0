"""Readers that build declarations for the rounds: Java sources and YAML manifests."""

from .java import CompilationUnit, JavaSourceReader
from .manifest import load_catalog, load_declarations, parse_declarations

__all__ = [
    "CompilationUnit",
    "JavaSourceReader",
    "load_catalog",
    "load_declarations",
    "parse_declarations",
]
