"""Configuration loading for autoreg (.autoreg.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .markers import (
    BUILTIN_NAMESPACES,
    DEFAULT_FACTORY_MARKERS,
    SERVICE_MARKER,
    FactoryMarker,
)

CONFIG_FILENAME = ".autoreg.yml"
DEFAULT_SOURCES = ("src/main/java",)
DEFAULT_OUTPUT_DIR = "target/classes"


class ConfigError(RuntimeError):
    """Raised when the configuration file or an option cannot be parsed."""


@dataclass
class MarkerConfig:
    """Which annotations feed which registry."""

    factories: List[FactoryMarker] = field(default_factory=lambda: list(DEFAULT_FACTORY_MARKERS))
    service: str = SERVICE_MARKER
    builtin_namespaces: List[str] = field(default_factory=lambda: list(BUILTIN_NAMESPACES))


@dataclass
class ProcessorConfig:
    """Processor enablement."""

    enabled: Optional[List[str]] = None


@dataclass
class AutoRegConfig:
    """Represents the settings defined in .autoreg.yml."""

    root: Path
    sources: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCES))
    output_dir: str = DEFAULT_OUTPUT_DIR
    classpath: List[Path] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    processors: ProcessorConfig = field(default_factory=ProcessorConfig)

    @property
    def output_root(self) -> Path:
        return self.root / self.output_dir


def load_config(config_path: Path) -> AutoRegConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return AutoRegConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = AutoRegConfig(root=root)

    sources = _as_str_list(data.get("sources"))
    if sources:
        config.sources = sources
    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = output_dir
    config.classpath = [root / entry for entry in _as_str_list(data.get("classpath"))]
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.options = parse_options(_as_dict(data.get("options")))

    marker_data = _as_dict(data.get("markers"))
    if marker_data:
        factories = _parse_factory_markers(marker_data.get("factories"))
        if factories:
            config.markers.factories = factories
        service = _as_str(marker_data.get("service"))
        if service:
            config.markers.service = service
        namespaces = _as_str_list(marker_data.get("builtin_namespaces"))
        if namespaces:
            config.markers.builtin_namespaces = namespaces

    processor_data = _as_dict(data.get("processors"))
    if processor_data and "enabled" in processor_data:
        config.processors.enabled = _as_str_list(processor_data.get("enabled"))

    return config


def parse_options(raw: Mapping[str, Any] | Sequence[str]) -> Dict[str, str]:
    """Normalise processor options from a mapping or ``key=value`` strings.

    A bare ``key`` is taken as ``key=true``.
    """
    options: Dict[str, str] = {}
    if isinstance(raw, Mapping):
        for key, value in raw.items():
            options[str(key).strip()] = _option_value(value)
        return options

    for item in raw:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not key:
            raise ConfigError(f"Invalid processor option: {item!r}")
        options[key] = value.strip() if sep else "true"
    return options


def _option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _parse_factory_markers(value: Any) -> List[FactoryMarker]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("markers.factories must be a list of {annotation, key} entries")
    markers: List[FactoryMarker] = []
    for entry in value:
        entry_data = _as_dict(entry)
        annotation = _as_str(entry_data.get("annotation"))
        key = _as_str(entry_data.get("key"))
        if not annotation or not key:
            raise ConfigError("Each markers.factories entry needs 'annotation' and 'key'")
        markers.append(FactoryMarker(annotation=annotation, key=key))
    return markers


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AutoRegConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "MarkerConfig",
    "ProcessorConfig",
    "load_config",
    "parse_options",
]
