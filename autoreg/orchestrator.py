"""Pipeline orchestration for registry builds."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .config import AutoRegConfig, load_config
from .errors import AutoRegError
from .frontend import JavaSourceReader, load_catalog, load_declarations
from .logging import debug_logging, get_logger
from .markers import SERVICE_VALUE_PROPERTY
from .models import Declaration, SymbolTable
from .processors import ProcessingEnvironment, Processor, discover_processors
from .resolver import MarkerResolver
from .rounds import BuildSession
from .scanner import SourceFile, SourceScanner
from .validator import ContractCheck, ContractValidator
from .values import ValueExtractor
from .writer import FileSystemFiler, Filer, MemoryFiler, RegistryWriter


@dataclass
class BuildOutcome:
    """Result of a registry build."""

    output_root: Path
    written: List[str]
    dry_run: bool
    contents: Dict[str, str] = field(default_factory=dict)


@dataclass
class Explanation:
    """How one declaration relates to the configured markers."""

    name: str
    kind: str
    factories: Dict[str, Optional[Tuple[str, ...]]] = field(default_factory=dict)
    services: List[ContractCheck] = field(default_factory=list)


class Orchestrator:
    """Coordinates scanning, parsing, round processing and registry output."""

    def __init__(
        self,
        scanner: SourceScanner | None = None,
        reader: JavaSourceReader | None = None,
        processors: Optional[Iterable[Processor]] = None,
        writer: RegistryWriter | None = None,
    ) -> None:
        self.scanner = scanner
        self.reader = reader or JavaSourceReader()
        self._processor_overrides = list(processors) if processors is not None else None
        self.writer = writer or RegistryWriter()
        self.logger = get_logger("orchestrator")

    def run_build(
        self,
        path: str,
        *,
        output: str | None = None,
        options: Mapping[str, str] | None = None,
        dry_run: bool = False,
    ) -> BuildOutcome:
        """Scan the project at ``path`` and write its registry files."""
        repo_path = Path(path).expanduser().resolve()
        config = load_config(repo_path)
        self.logger.info("Starting registry build for %s", repo_path)

        merged_options = dict(config.options)
        merged_options.update(options or {})

        symbols = self._load_symbols(config)
        batches = self._read_batches(config, repo_path, symbols)
        # Every source root belongs to one compilation; rounds only decide which
        # declarations are presented when.
        for batch in batches:
            symbols.register(batch)

        output_root = Path(output).expanduser().resolve() if output else config.output_root
        filer: Filer = MemoryFiler() if dry_run else FileSystemFiler(output_root)
        env = ProcessingEnvironment(
            symbols=symbols,
            filer=filer,
            options=merged_options,
            factory_markers=tuple(config.markers.factories),
            service_marker=config.markers.service,
            builtin_namespaces=tuple(config.markers.builtin_namespaces),
        )
        with debug_logging(env.debug):
            session = BuildSession(env, self._select_processors(config), writer=self.writer)
            written = session.run(batches)

        contents: Dict[str, str] = {}
        if isinstance(filer, MemoryFiler):
            contents = {name: filer.text(name) for name in written}
        return BuildOutcome(output_root=output_root, written=written, dry_run=dry_run, contents=contents)

    def explain(self, path: str, type_name: str) -> Explanation:
        """Report marker chains and contract checks for ``type_name``."""
        repo_path = Path(path).expanduser().resolve()
        config = load_config(repo_path)
        symbols = self._load_symbols(config)
        for batch in self._read_batches(config, repo_path, symbols):
            symbols.register(batch)

        declaration = symbols.get(type_name)
        if declaration is None:
            raise AutoRegError(f"Type not found: {type_name}")

        resolver = MarkerResolver(symbols, config.markers.builtin_namespaces)
        explanation = Explanation(name=declaration.name, kind=declaration.kind.value)
        for marker in config.markers.factories:
            explanation.factories[marker.key] = (
                resolver.trace(declaration, marker.annotation)
                if declaration.is_class_or_interface()
                else None
            )

        values = ValueExtractor(symbols)
        validator = ContractValidator(symbols)
        for usage in declaration.usages_of(config.markers.service):
            for contract in values.type_refs(usage, SERVICE_VALUE_PROPERTY):
                explanation.services.append(validator.check(declaration, contract))
        return explanation

    def _load_symbols(self, config: AutoRegConfig) -> SymbolTable:
        symbols = SymbolTable(load_catalog())
        for manifest in config.classpath:
            symbols.register(load_declarations(manifest))
            self.logger.debug("Loaded declarations from %s", manifest)
        return symbols

    def _read_batches(
        self, config: AutoRegConfig, repo_path: Path, symbols: SymbolTable
    ) -> List[List[Declaration]]:
        scanner = self.scanner or SourceScanner(config.exclude_paths)
        files = scanner.scan(repo_path, config.sources)
        self.logger.debug("Scanner discovered %d source file(s)", len(files))

        declarations = self.reader.read_all(
            ((source.path, source.text) for source in files), known=symbols.names()
        )
        return _group_by_source_root(files, declarations, config.sources)

    def _select_processors(self, config: AutoRegConfig) -> List[Processor]:
        if self._processor_overrides is not None:
            return list(self._processor_overrides)
        return discover_processors(config.processors.enabled)


def _group_by_source_root(
    files: List[SourceFile], declarations: List[Declaration], source_roots: List[str]
) -> List[List[Declaration]]:
    """Split declarations into one round per source root, in configured order."""
    root_of = {source.path: source.source_root for source in files}
    batches: Dict[str, List[Declaration]] = {root: [] for root in source_roots}
    for declaration in declarations:
        root = root_of.get(declaration.source or "")
        if root is not None:
            batches[root].append(declaration)
    return [batch for batch in batches.values() if batch]


__all__ = ["BuildOutcome", "Explanation", "Orchestrator"]
