"""Tests for the CalculationAuditLogger and related utilities."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass

import pytest

from compass.core.audit.logger import (
    CalculationAuditLogger,
    CalculationLogEntry,
    canonical_json,
    hash_input,
    to_plain,
)
from compass.core.audit.storage import InMemoryAuditStorage


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@dataclass
class _Point:
    x: int
    y: int


# ---------------------------------------------------------------------------
# Canonical form and hashing
# ---------------------------------------------------------------------------

class TestHashInput:
    def test_hash_is_eight_hex_chars(self):
        h = hash_input({"key": "value"})
        assert len(h) == 8
        assert all(c in "0123456789abcdef" for c in h)

    def test_deterministic(self):
        data = {"a": 1, "b": [1, 2, 3]}
        assert hash_input(data) == hash_input(data)

    def test_key_order_does_not_matter(self):
        assert hash_input({"z": 1, "a": {"y": 2, "b": 3}}) == hash_input({"a": {"b": 3, "y": 2}, "z": 1})

    def test_different_inputs_differ(self):
        assert hash_input({"a": 1}) != hash_input({"a": 2})

    def test_dataclass_hashes_like_its_dict(self):
        assert hash_input(_Point(1, 2)) == hash_input({"x": 1, "y": 2})

    def test_none_hashes(self):
        assert len(hash_input(None)) == 8

    def test_whole_float_hashes_like_int(self):
        assert hash_input({"base_rate": 400}) == hash_input({"base_rate": 400.0})
        assert hash_input({"base_rate": 400.5}) != hash_input({"base_rate": 400})


class TestCanonicalForm:
    def test_canonical_json_sorts_keys(self):
        assert canonical_json({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_to_plain_converts_nested_structures(self):
        plain = to_plain({"p": _Point(1, 2), "t": (1, 2), 3: "three"})
        assert plain == {"p": {"x": 1, "y": 2}, "t": [1, 2], "3": "three"}

    def test_to_plain_sorts_sets(self):
        assert to_plain({3, 1, 2}) == [1, 2, 3]

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_floats_become_none(self, value):
        assert to_plain({"age": value}) == {"age": None}

    def test_whole_floats_become_ints(self):
        plain = to_plain([400.0, 0.5, True])
        assert plain == [400, 0.5, True]
        assert type(plain[0]) is int


# ---------------------------------------------------------------------------
# log_calculation
# ---------------------------------------------------------------------------

class TestLogCalculation:
    def test_returns_result_unchanged(self, audit):
        result = audit.log_calculation("premium", {"age": 40}, lambda data: data["age"] * 2)
        assert result == 80

    def test_records_one_entry(self, audit):
        audit.log_calculation("premium", {"age": 40}, lambda data: 123.45)
        entries = audit.get_logs()
        assert len(entries) == 1
        entry = entries[0]
        assert entry.calculation_type == "premium"
        assert entry.input == {"age": 40}
        assert entry.output == 123.45
        assert entry.input_hash == hash_input({"age": 40})
        assert entry.duration_ms >= 0
        assert entry.version == "1.0.0"
        assert entry.id.startswith("log_")

    def test_exception_propagates_and_nothing_logged(self, audit):
        def boom(data):
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            audit.log_calculation("premium", {"age": 40}, boom)
        assert audit.get_logs() == []

    def test_metadata_is_stored(self, audit):
        audit.log_calculation("premium", {}, lambda d: 1, metadata={"source": "test"})
        assert audit.get_logs()[0].metadata == {"source": "test"}

    def test_dataclass_output_stored_as_plain_data(self, audit):
        audit.log_calculation("point", {}, lambda d: _Point(3, 4))
        assert audit.get_logs()[0].output == {"x": 3, "y": 4}

    def test_custom_version(self):
        audit = CalculationAuditLogger(version="2026.1")
        audit.log_calculation("premium", {}, lambda d: 1)
        assert audit.get_logs()[0].version == "2026.1"


class TestLogAsyncCalculation:
    def test_logs_after_completion(self, audit):
        async def compute(data):
            await asyncio.sleep(0)
            return data["n"] + 1

        result = _run(audit.log_async_calculation("async", {"n": 1}, compute))
        assert result == 2
        assert audit.get_logs()[0].output == 2

    def test_failure_leaves_log_untouched(self, audit):
        async def compute(data):
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            _run(audit.log_async_calculation("async", {"n": 1}, compute))
        assert audit.get_logs() == []


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_logs_are_newest_first(self, audit):
        for n in range(3):
            audit.log_calculation("premium", {"n": n}, lambda d: d["n"])
        assert [e.output for e in audit.get_logs()] == [2, 1, 0]

    def test_get_recent_limits(self, audit):
        for n in range(5):
            audit.log_calculation("premium", {"n": n}, lambda d: d["n"])
        assert [e.output for e in audit.get_recent_logs(2)] == [4, 3]

    def test_get_by_type(self, audit):
        audit.log_calculation("premium", {}, lambda d: 1)
        audit.log_calculation("cobra", {}, lambda d: 2)
        assert [e.output for e in audit.get_logs_by_type("cobra")] == [2]

    def test_get_by_hash(self, audit):
        audit.log_calculation("premium", {"a": 1}, lambda d: 1)
        audit.log_calculation("premium", {"a": 2}, lambda d: 2)
        entries = audit.get_logs_by_hash(hash_input({"a": 1}))
        assert [e.output for e in entries] == [1]

    def test_get_log_by_id(self, audit):
        audit.log_calculation("premium", {}, lambda d: 1)
        entry = audit.get_logs()[0]
        assert audit.get_log(entry.id) == entry
        assert audit.get_log("log_missing") is None

    def test_clear_logs(self, audit):
        audit.log_calculation("premium", {}, lambda d: 1)
        audit.clear_logs()
        assert audit.get_logs() == []


class TestFindCachedResult:
    def test_returns_most_recent_matching_output(self, audit):
        audit.log_calculation("premium", {"age": 40}, lambda d: 100)
        audit.log_calculation("premium", {"age": 40}, lambda d: 110)
        assert audit.find_cached_result("premium", {"age": 40}) == 110

    def test_type_must_match(self, audit):
        audit.log_calculation("premium", {"age": 40}, lambda d: 100)
        assert audit.find_cached_result("cobra", {"age": 40}) is None

    def test_missing_input_returns_none(self, audit):
        assert audit.find_cached_result("premium", {"age": 41}) is None

    def test_int_and_float_inputs_share_cache(self, audit):
        audit.log_calculation("premium", {"base_rate": 400, "age": 40}, lambda d: 580.8)
        assert audit.find_cached_result("premium", {"base_rate": 400.0, "age": 40}) == 580.8

    def test_mutating_cached_result_leaves_log_intact(self, audit):
        audit.log_calculation("premium", {"a": 1}, lambda d: {"total": 100})
        cached = audit.find_cached_result("premium", {"a": 1})
        cached["total"] = 999
        assert audit.get_logs()[0].output == {"total": 100}
        assert audit.find_cached_result("premium", {"a": 1}) == {"total": 100}

    def test_mutating_returned_entry_leaves_log_intact(self, audit):
        entry = audit.log("premium", {"a": 1}, {"total": 100}, 1.0)
        entry.output["total"] = 999
        audit.get_logs()[0].input["a"] = 5
        stored = audit.get_log(entry.id)
        assert (stored.input, stored.output) == ({"a": 1}, {"total": 100})


class TestStatsAndExport:
    def test_stats(self, audit):
        audit.log_calculation("premium", {"a": 1}, lambda d: 1)
        audit.log_calculation("premium", {"a": 1}, lambda d: 1)
        audit.log_calculation("cobra", {"a": 2}, lambda d: 2)
        stats = audit.get_stats()
        assert stats["total_calculations"] == 3
        assert stats["by_type"] == {"premium": 2, "cobra": 1}
        assert stats["unique_inputs"] == 2
        assert stats["average_duration_ms"] >= 0

    def test_empty_stats(self, audit):
        stats = audit.get_stats()
        assert stats["total_calculations"] == 0
        assert stats["average_duration_ms"] == 0.0

    def test_export_is_self_describing(self, audit):
        audit.log_calculation("premium", {"age": 40}, lambda d: 100)
        exported = json.loads(audit.export_logs())
        assert set(exported) == {"exportedAt", "version", "logs"}
        log = exported["logs"][0]
        assert log["calculationType"] == "premium"
        assert log["inputHash"] == hash_input({"age": 40})
        assert log["input"] == {"age": 40}
        assert log["output"] == 100

    def test_export_is_strict_json_with_non_finite_input(self, audit):
        audit.log_calculation("premium", {"age": float("nan")}, lambda d: 0.635)

        def reject(token):
            raise ValueError(token)

        exported = json.loads(audit.export_logs(), parse_constant=reject)
        assert exported["logs"][0]["input"] == {"age": None}

    def test_exported_entry_round_trips(self, audit):
        audit.log_calculation("premium", {"age": 40}, lambda d: 100)
        entry = audit.get_logs()[0]
        assert CalculationLogEntry.from_dict(entry.to_dict()) == entry


def test_default_storage_is_in_memory():
    audit = CalculationAuditLogger()
    assert isinstance(audit.storage, InMemoryAuditStorage)
