"""
Observability Layer

RESPONSIBILITY: Record contract violations and count guarded activity
ALLOWED INPUTS: ContractViolation instances, metric increments
OUTPUTS: ViolationLog, ContractMetrics, log lines on the 'catcontracts' logger

WHAT THIS LAYER MUST NOT DO:
============================
- Change the outcome of any contract check
- Swallow or rewrap the violation being recorded
- Install logging handlers (the application owns logging setup)
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple
import logging
import threading

from .errors import ContractViolation, ErrorCode, ViolationRecord


logger = logging.getLogger("catcontracts")


# =============================================================================
# VIOLATION LOG
# =============================================================================

class ViolationLog:
    """
    Bounded append-only collector of violation records.

    Holds at most max_entries records; once full, the oldest are discarded.
    No modification of collected data; readers always receive copies.
    """

    def __init__(self, max_entries: int = 1000):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: Deque[ViolationRecord] = deque(maxlen=max_entries)
        self._dropped = 0
        self._lock = threading.Lock()

    def collect(self, record: ViolationRecord):
        with self._lock:
            if len(self._entries) == self._entries.maxlen:
                self._dropped += 1
            self._entries.append(record)

    def get_entries(
        self,
        code: Optional[ErrorCode] = None,
        site: Optional[str] = None
    ) -> List[ViolationRecord]:
        """Get entries, optionally filtered."""
        with self._lock:
            entries = list(self._entries)

        if code:
            entries = [e for e in entries if e.code == code]
        if site:
            entries = [e for e in entries if e.site == site]

        return entries

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def dropped_count(self) -> int:
        """Records discarded because the log was full."""
        return self._dropped


# =============================================================================
# METRICS
# =============================================================================

GUARDED_CALLS = "guarded_calls_total"
VIOLATIONS = "violations_total"
MEMO_HITS = "memo_hits_total"
MEMO_MISSES = "memo_misses_total"

MetricKey = Tuple[str, Tuple[Tuple[str, str], ...]]


class ContractMetrics:
    """Monotonic counters keyed by metric name and sorted labels."""

    def __init__(self):
        self._counters: Dict[MetricKey, int] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(name: str, labels: Optional[Dict[str, str]]) -> MetricKey:
        return (name, tuple(sorted(labels.items())) if labels else ())

    def increment(self, name: str, labels: Optional[Dict[str, str]] = None, amount: int = 1):
        key = self._key(name, labels)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def get(self, name: str, labels: Optional[Dict[str, str]] = None) -> int:
        """Counter value for exactly these labels; 0 if never incremented."""
        with self._lock:
            return self._counters.get(self._key(name, labels), 0)

    def total(self, name: str) -> int:
        """Sum over every label combination of a metric."""
        with self._lock:
            return sum(v for (n, _), v in self._counters.items() if n == name)

    def snapshot(self) -> Dict[MetricKey, int]:
        with self._lock:
            return dict(self._counters)


# =============================================================================
# OBSERVER (Orchestrates log + metrics)
# =============================================================================

@dataclass
class ObservabilityConfig:
    """Configuration for the contract observer."""
    enable_metrics: bool = True
    enable_violation_log: bool = True
    max_violation_entries: int = 1000


class ContractObserver:
    """
    Central sink for guarded-call activity.

    BOUNDARY ENFORCEMENT:
    - ONLY observes, never modifies
    - Stores immutable records, not live exceptions
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._log = (
            ViolationLog(self._config.max_violation_entries)
            if self._config.enable_violation_log else None
        )
        self._metrics = ContractMetrics() if self._config.enable_metrics else None

    def record_call(self, site: str):
        if self._metrics:
            self._metrics.increment(GUARDED_CALLS, {"site": site})

    def record_violation(self, error: ContractViolation, site: Optional[str] = None) -> ViolationRecord:
        """Freeze a violation into a record and store it."""
        record = error.to_record(site=site)
        if self._log:
            self._log.collect(record)
        if self._metrics:
            self._metrics.increment(VIOLATIONS, {"code": record.code.value})
        logger.debug(
            "contract violation code=%s site=%s path=%s: %s",
            record.code.value, site, list(record.path), record.message
        )
        return record

    def record_memo(self, hit: bool):
        if self._metrics:
            self._metrics.increment(MEMO_HITS if hit else MEMO_MISSES)

    @property
    def violations(self) -> Optional[ViolationLog]:
        return self._log

    @property
    def metrics(self) -> Optional[ContractMetrics]:
        return self._metrics


_observer = ContractObserver()


def get_observer() -> ContractObserver:
    return _observer


def set_observer(observer: ContractObserver) -> ContractObserver:
    """Install a new process-wide observer; returns the previous one."""
    global _observer
    previous, _observer = _observer, observer
    return previous
