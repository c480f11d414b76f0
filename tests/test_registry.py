"""Tests for autoreg.registry."""

from __future__ import annotations

from autoreg.registry import RegistryAccumulator


def test_new_accumulator_is_empty() -> None:
    accumulator = RegistryAccumulator()

    assert accumulator.is_empty()
    assert dict(accumulator.factories) == {}
    assert dict(accumulator.services) == {}


def test_factories_deduplicate_and_keep_key_order() -> None:
    accumulator = RegistryAccumulator()
    accumulator.record_factory("k2", "com.example.B")
    accumulator.record_factory("k1", "com.example.A")
    accumulator.record_factory("k2", "com.example.B")
    accumulator.record_factory("k2", "com.example.A")

    assert not accumulator.is_empty()
    assert list(accumulator.factories) == ["k2", "k1"]
    assert accumulator.factories["k2"] == frozenset({"com.example.A", "com.example.B"})


def test_later_service_record_replaces_earlier() -> None:
    accumulator = RegistryAccumulator()
    accumulator.record_service("com.example.Api", "com.example.First")
    accumulator.record_service("com.example.Api", "com.example.Second")

    assert dict(accumulator.services) == {"com.example.Api": "com.example.Second"}


def test_services_alone_make_accumulator_non_empty() -> None:
    accumulator = RegistryAccumulator()
    accumulator.record_service("com.example.Api", "com.example.Impl")

    assert not accumulator.is_empty()
