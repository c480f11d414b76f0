"""Tests for autoreg.rounds, including the end-to-end registry scenarios."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import BinaryIO, Iterator

import pytest

from autoreg.errors import BuildFailure, IOWriteError
from autoreg.markers import COMPONENT, SERVICE_MARKER
from autoreg.models import Declaration, DeclarationKind, MarkerUsage, SymbolTable, TypeRef
from autoreg.processors import ProcessingEnvironment, discover_processors
from autoreg.rounds import BuildSession
from autoreg.writer import Filer, MemoryFiler

_FACTORIES = "META-INF/spring.factories"
_KEY = COMPONENT.key


def _session(symbols: SymbolTable, filer: Filer | None = None, **options: str) -> BuildSession:
    env = ProcessingEnvironment(symbols=symbols, filer=filer or MemoryFiler(), options=dict(options))
    return BuildSession(env, discover_processors())


def _service(name: str, contract: str, *supertypes: str) -> Declaration:
    return Declaration(
        name=name,
        annotations=(MarkerUsage(SERVICE_MARKER, {"value": TypeRef(contract)}),),
        supertypes=supertypes,
    )


def test_direct_component_is_registered(symbols: SymbolTable) -> None:
    session = _session(symbols)
    foo = Declaration("com.example.Foo", annotations=(MarkerUsage(COMPONENT.annotation),))

    written = session.run([[foo]])

    assert written == [_FACTORIES]
    assert session.env.filer.text(_FACTORIES) == f"{_KEY}=\\\ncom.example.Foo\n"  # type: ignore[attr-defined]


def test_composed_component_is_registered(symbols: SymbolTable, make_marker) -> None:
    session = _session(symbols)
    my_component = make_marker("com.example.MyComponent", annotations=[COMPONENT.annotation])
    bar = Declaration("com.example.Bar", annotations=(MarkerUsage("com.example.MyComponent"),))

    session.run([[my_component, bar]])

    text = session.env.filer.text(_FACTORIES)  # type: ignore[attr-defined]
    assert "com.example.Bar" in text.splitlines()
    # The composed marker itself is an annotation type and is never registered.
    assert "com.example.MyComponent" not in text


def test_service_with_matching_contract_is_written(symbols: SymbolTable) -> None:
    api = Declaration("com.example.Api", kind=DeclarationKind.INTERFACE)
    session = _session(symbols)

    written = session.run([[api, _service("com.example.Impl", "com.example.Api", "com.example.Api")]])

    assert written == ["META-INF/services/com.example.Api"]
    assert session.env.filer.text("META-INF/services/com.example.Api") == "com.example.Impl\n"  # type: ignore[attr-defined]


def test_service_with_mismatched_contract_is_excluded(symbols: SymbolTable) -> None:
    api = Declaration("com.example.Api", kind=DeclarationKind.INTERFACE)
    session = _session(symbols)

    written = session.run([[api, _service("com.example.BadImpl", "com.example.Api")]])

    assert written == []
    assert session.env.filer.files == {}  # type: ignore[attr-defined]


def test_last_provider_wins_for_a_contract(symbols: SymbolTable) -> None:
    session = _session(symbols)

    session.run(
        [
            [_service("com.example.First", "com.example.Api", "com.example.Api")],
            [_service("com.example.Second", "com.example.Api", "com.example.Api")],
        ]
    )

    assert session.env.filer.text("META-INF/services/com.example.Api") == "com.example.Second\n"  # type: ignore[attr-defined]


def test_no_matches_write_no_files(symbols: SymbolTable) -> None:
    session = _session(symbols)

    written = session.run([[Declaration("com.example.Plain")], []])

    assert written == []
    assert session.env.filer.files == {}  # type: ignore[attr-defined]


def test_registrations_accumulate_across_rounds(symbols: SymbolTable) -> None:
    session = _session(symbols)
    marker = (MarkerUsage(COMPONENT.annotation),)

    session.run_round([Declaration("com.example.Zeta", annotations=marker)])
    session.run_round([Declaration("com.example.Alpha", annotations=marker)])
    written = session.run_round([], processing_over=True)

    assert written == [_FACTORIES]
    assert session.env.filer.text(_FACTORIES) == (  # type: ignore[attr-defined]
        f"{_KEY}=\\\ncom.example.Alpha,\\\ncom.example.Zeta\n"
    )


def test_identical_inputs_give_identical_bytes() -> None:
    def _build(order: list[str]) -> bytes:
        session = _session(SymbolTable())
        batch = [
            Declaration(name, annotations=(MarkerUsage(COMPONENT.annotation),)) for name in order
        ]
        session.run([batch])
        return session.env.filer.files[_FACTORIES]  # type: ignore[attr-defined]

    assert _build(["a.B", "a.A", "a.C"]) == _build(["a.C", "a.B", "a.A"])


def test_enums_and_records_are_not_factories(symbols: SymbolTable) -> None:
    session = _session(symbols)
    marker = (MarkerUsage(COMPONENT.annotation),)

    written = session.run(
        [
            [
                Declaration("com.example.Kind", kind=DeclarationKind.ENUM, annotations=marker),
                Declaration("com.example.Point", kind=DeclarationKind.RECORD, annotations=marker),
            ]
        ]
    )

    assert written == []


def test_rounds_after_terminal_round_are_rejected(symbols: SymbolTable) -> None:
    session = _session(symbols)
    session.run([])

    assert session.closed
    with pytest.raises(BuildFailure):
        session.run_round([])


def test_flush_failure_becomes_build_failure(symbols: SymbolTable) -> None:
    class _BrokenFiler(Filer):
        @contextmanager
        def create_resource(self, path: str) -> Iterator[BinaryIO]:
            raise OSError("disk full")
            yield  # pragma: no cover

    session = _session(symbols, filer=_BrokenFiler())
    foo = Declaration("com.example.Foo", annotations=(MarkerUsage(COMPONENT.annotation),))

    with pytest.raises(BuildFailure) as excinfo:
        session.run([[foo]])

    assert isinstance(excinfo.value.__cause__, IOWriteError)
    assert isinstance(excinfo.value.__cause__.__cause__, OSError)


def test_unrecognized_option_is_warned(symbols: SymbolTable, caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("autoreg")
    logger.addHandler(caplog.handler)
    try:
        env = ProcessingEnvironment(
            symbols=symbols, filer=MemoryFiler(), options={"debug": "true", "colour": "blue"}
        )
        BuildSession(env, discover_processors())
    finally:
        logger.removeHandler(caplog.handler)

    assert env.debug
    messages = [record.getMessage() for record in caplog.records]
    assert "Unrecognized processor option: colour" in messages
    assert not any(message.endswith(": debug") for message in messages)
