"""Calculation audit logger: a content-addressed record of every calculation.

Each analyzer call is recorded once as an immutable
:class:`CalculationLogEntry` keyed by a short hash of its canonical input:

* ``input_hash``: first 8 hex chars of SHA-256 over canonical JSON, so
  key order never changes the hash.
* ``find_cached_result``: read-only memoization lookup; the most recent
  entry for a (type, hash) pair wins.
* failed or cancelled calculations are never written.
"""

from __future__ import annotations

import dataclasses
import enum
import hashlib
import json
import logging
import math
import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeVar

from compass.core.audit.storage import InMemoryAuditStorage

if TYPE_CHECKING:
    from compass.core.audit.storage import AuditLogStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUDIT_LOG_VERSION = "1.0.0"
INPUT_HASH_LENGTH = 8
DEFAULT_RECENT_LIMIT = 10


# ---------------------------------------------------------------------------
# Canonical form and hashing
# ---------------------------------------------------------------------------

def to_plain(value: Any) -> Any:
    """Convert *value* into JSON-compatible plain data.

    Dataclasses become dicts, tuples and sets become lists (sets sorted),
    enums collapse to their value and mapping keys become strings. Whole
    floats become ints so ``400`` and ``400.0`` hash alike; NaN and
    infinities become None. Anything else that JSON cannot carry falls
    back to ``repr``.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value) if value.is_integer() else value
    if isinstance(value, enum.Enum):
        return to_plain(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted((to_plain(v) for v in value), key=repr)
    return repr(value)


def canonical_json(value: Any) -> str:
    """Deterministic JSON text for *value*: sorted keys at every depth, no whitespace."""
    return json.dumps(to_plain(value), sort_keys=True, separators=(",", ":"), allow_nan=False)


def hash_input(value: Any) -> str:
    """Short content hash of a calculation input.

    Returns:
        8 lowercase hex characters. Structurally identical inputs always
        collide regardless of key order.
    """
    digest = hashlib.sha256(canonical_json(value).encode()).hexdigest()
    return digest[:INPUT_HASH_LENGTH]


# ---------------------------------------------------------------------------
# CalculationLogEntry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalculationLogEntry:
    """A single recorded calculation. Never mutated after creation."""

    id: str
    calculation_type: str
    input: Any
    output: Any
    input_hash: str
    duration_ms: float
    version: str
    timestamp: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Export form (camelCase keys, as consumed by reporting tools)."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "calculationType": self.calculation_type,
            "inputHash": self.input_hash,
            "input": self.input,
            "output": self.output,
            "duration": self.duration_ms,
            "version": self.version,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalculationLogEntry:
        return cls(
            id=data["id"],
            calculation_type=data["calculationType"],
            input=data.get("input"),
            output=data.get("output"),
            input_hash=data["inputHash"],
            duration_ms=float(data.get("duration") or 0.0),
            version=data.get("version", AUDIT_LOG_VERSION),
            timestamp=data["timestamp"],
            metadata=data.get("metadata") or {},
        )


# ---------------------------------------------------------------------------
# CalculationAuditLogger
# ---------------------------------------------------------------------------

class CalculationAuditLogger:
    """Records calculations into swappable storage and answers cache lookups.

    Usage::

        audit = CalculationAuditLogger()
        premium = audit.log_calculation(
            "premium",
            {"base_rate": 400, "age": 40, "state": "FL", "tier": "silver"},
            lambda data: calculator.price(**data),
        )
        audit.find_cached_result("premium", {...})
    """

    def __init__(
        self,
        storage: AuditLogStorage | None = None,
        *,
        version: str = AUDIT_LOG_VERSION,
    ) -> None:
        self._storage = storage if storage is not None else InMemoryAuditStorage()
        self._version = version

    @property
    def version(self) -> str:
        return self._version

    @property
    def storage(self) -> AuditLogStorage:
        return self._storage

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log(
        self,
        calculation_type: str,
        input: Any,
        output: Any,
        duration_ms: float,
        metadata: dict[str, Any] | None = None,
    ) -> CalculationLogEntry:
        """Record one completed calculation and return its entry."""
        plain_input = to_plain(input)
        entry = CalculationLogEntry(
            id=f"log_{uuid.uuid4().hex}",
            calculation_type=calculation_type,
            input=plain_input,
            output=to_plain(output),
            input_hash=hash_input(plain_input),
            duration_ms=round(float(duration_ms), 3),
            version=self._version,
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata=to_plain(metadata or {}),
        )
        self._storage.save(entry)
        logger.debug(
            "Logged %s calculation %s (hash %s, %.3f ms)",
            calculation_type, entry.id, entry.input_hash, entry.duration_ms,
        )
        return entry

    def log_calculation(
        self,
        calculation_type: str,
        input: Any,
        fn: Callable[[Any], T],
        metadata: dict[str, Any] | None = None,
    ) -> T:
        """Run ``fn(input)``, log it, and return its result unchanged.

        Exceptions from *fn* propagate and nothing is logged.
        """
        start = time.perf_counter()
        result = fn(input)
        duration_ms = (time.perf_counter() - start) * 1000
        self.log(calculation_type, input, result, duration_ms, metadata)
        return result

    async def log_async_calculation(
        self,
        calculation_type: str,
        input: Any,
        fn: Callable[[Any], Awaitable[T]],
        metadata: dict[str, Any] | None = None,
    ) -> T:
        """Await ``fn(input)``, log it, and return its result.

        The entry is written only after the await completes, so a
        cancellation or exception leaves the log untouched.
        """
        start = time.perf_counter()
        result = await fn(input)
        duration_ms = (time.perf_counter() - start) * 1000
        self.log(calculation_type, input, result, duration_ms, metadata)
        return result

    def clear_logs(self) -> None:
        self._storage.clear()
        logger.info("Calculation audit log cleared")

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_logs(self) -> list[CalculationLogEntry]:
        """All entries, newest first."""
        return self._storage.get_all()

    def get_log(self, entry_id: str) -> CalculationLogEntry | None:
        return self._storage.get_by_id(entry_id)

    def get_logs_by_hash(self, input_hash: str) -> list[CalculationLogEntry]:
        return self._storage.get_by_hash(input_hash)

    def get_logs_by_type(self, calculation_type: str) -> list[CalculationLogEntry]:
        return self._storage.get_by_type(calculation_type)

    def get_recent_logs(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[CalculationLogEntry]:
        return self._storage.get_recent(limit)

    def find_cached_result(self, calculation_type: str, input: Any) -> Any | None:
        """Output of the most recent entry with this type and input hash, or None."""
        input_hash = hash_input(input)
        for entry in self._storage.get_by_hash(input_hash):
            if entry.calculation_type == calculation_type:
                return entry.output
        return None

    def get_stats(self) -> dict[str, Any]:
        """Aggregate counts: per type, distinct input hashes and mean duration."""
        entries = self._storage.get_all()
        by_type = Counter(e.calculation_type for e in entries)
        average = sum(e.duration_ms for e in entries) / len(entries) if entries else 0.0
        return {
            "total_calculations": len(entries),
            "by_type": dict(by_type),
            "average_duration_ms": round(average, 3),
            "unique_inputs": len({e.input_hash for e in entries}),
        }

    def export_logs(self) -> str:
        """Self-describing JSON snapshot ``{exportedAt, version, logs}``."""
        return json.dumps(
            {
                "exportedAt": datetime.now(timezone.utc).isoformat(),
                "version": self._version,
                "logs": [e.to_dict() for e in self._storage.get_all()],
            },
            indent=2,
            allow_nan=False,
        )
