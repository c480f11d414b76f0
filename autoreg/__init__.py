"""Build-time generator for spring.factories and META-INF/services registries."""

from .models import Declaration, DeclarationKind, MarkerProperty, MarkerUsage, SymbolTable, TypeRef
from .registry import RegistryAccumulator
from .resolver import MarkerResolver
from .rounds import BuildSession
from .validator import ContractCheck, ContractMismatch, ContractValidator
from .values import ValueExtractor
from .writer import RegistryWriter

__version__ = "0.1.0"

__all__ = [
    "BuildSession",
    "ContractCheck",
    "ContractMismatch",
    "ContractValidator",
    "Declaration",
    "DeclarationKind",
    "MarkerProperty",
    "MarkerResolver",
    "MarkerUsage",
    "RegistryAccumulator",
    "RegistryWriter",
    "SymbolTable",
    "TypeRef",
    "ValueExtractor",
]
