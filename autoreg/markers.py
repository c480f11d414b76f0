"""Well-known markers and the registry locations they map to."""

from __future__ import annotations

from dataclasses import dataclass

FACTORIES_RESOURCE_LOCATION = "META-INF/spring.factories"
SERVICES_RESOURCE_PREFIX = "META-INF/services/"

# Annotations under these namespaces are platform annotations, never composed by users.
BUILTIN_NAMESPACES: tuple[str, ...] = ("java.lang",)

SERVICE_MARKER = "com.codedream.auto.service.AutoService"
SERVICE_VALUE_PROPERTY = "value"


@dataclass(frozen=True)
class FactoryMarker:
    """A marker whose carriers are listed under ``key`` in the grouped registry."""

    annotation: str
    key: str


COMPONENT = FactoryMarker(
    annotation="org.springframework.stereotype.Component",
    key="org.springframework.boot.autoconfigure.EnableAutoConfiguration",
)

DEFAULT_FACTORY_MARKERS: tuple[FactoryMarker, ...] = (COMPONENT,)


def service_resource_path(contract: str) -> str:
    """Return the virtual path of the per-contract registry file."""
    return f"{SERVICES_RESOURCE_PREFIX}{contract}"


def in_builtin_namespace(name: str, namespaces: tuple[str, ...] = BUILTIN_NAMESPACES) -> bool:
    return any(name == ns or name.startswith(f"{ns}.") for ns in namespaces)


__all__ = [
    "BUILTIN_NAMESPACES",
    "COMPONENT",
    "DEFAULT_FACTORY_MARKERS",
    "FACTORIES_RESOURCE_LOCATION",
    "FactoryMarker",
    "SERVICES_RESOURCE_PREFIX",
    "SERVICE_MARKER",
    "SERVICE_VALUE_PROPERTY",
    "in_builtin_namespace",
    "service_resource_path",
]
