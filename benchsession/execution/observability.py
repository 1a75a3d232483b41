from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
import threading
from typing import Any, Callable, Mapping

# ==================================================
# Observability Types
# ==================================================

EventObserveHook = Callable[["SessionEvent"], None]
LabelMap = Mapping[str, str]


@dataclass(frozen=True)
class ObservabilitySettings:
    """
    Observability settings shared by session hooks and connectors.
    """

    event_observer: EventObserveHook | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionEvent:
    """
    Structured session lifecycle event payload.
    """

    timestamp: str
    event: str
    dialect: str
    source: str
    success: bool
    metadata: Mapping[str, Any] = field(default_factory=dict)
    connection_id: str | None = None
    statement_count: int | None = None
    duration_ms: float | None = None
    error_type: str | None = None
    error_code: str | None = None
    error_message: str | None = None


def now_iso_utc() -> str:
    return datetime.now(timezone.utc).isoformat()


def extract_error_code(exc: BaseException) -> str | None:
    """
    Pulls a SQLSTATE-like code off a driver exception, if it carries one.
    """
    sqlstate = getattr(exc, "sqlstate", None)
    if isinstance(sqlstate, str) and sqlstate:
        return sqlstate.upper()

    pgcode = getattr(exc, "pgcode", None)
    if isinstance(pgcode, str) and pgcode:
        return pgcode.upper()

    # pyodbc puts the SQLSTATE first in args.
    args = getattr(exc, "args", ())
    if args and isinstance(args[0], str) and len(args[0]) == 5 and args[0].isalnum():
        return args[0].upper()

    return None


def session_event_to_dict(event: SessionEvent) -> dict[str, Any]:
    """
    Converts a SessionEvent dataclass into a JSON-safe dictionary.
    """

    return {
        "timestamp": event.timestamp,
        "event": event.event,
        "dialect": event.dialect,
        "source": event.source,
        "success": event.success,
        "metadata": dict(event.metadata),
        "connection_id": event.connection_id,
        "statement_count": event.statement_count,
        "duration_ms": event.duration_ms,
        "error_type": event.error_type,
        "error_code": event.error_code,
        "error_message": event.error_message,
    }


def make_json_event_logger(
    *,
    logger: logging.Logger,
    level: int = logging.INFO,
    failure_level: int = logging.WARNING,
) -> EventObserveHook:
    """
    Builds an EventObserveHook that emits one JSON log line per SessionEvent.
    """

    def _log_event(event: SessionEvent) -> None:
        payload = session_event_to_dict(event)
        logger.log(
            level if event.success else failure_level,
            json.dumps(payload, separators=(",", ":"), sort_keys=True, default=str),
        )

    return _log_event


def compose_event_observers(*observers: EventObserveHook) -> EventObserveHook:
    """
    Composes multiple event observers into a single observer.
    """

    def _composed(event: SessionEvent) -> None:
        for observer in observers:
            observer(event)

    return _composed


# ==================================================
# In-Memory Metrics
# ==================================================


def _normalize_label(value: str | None, *, fallback: str) -> str:
    if value is None:
        return fallback
    stripped = value.strip()
    return stripped if stripped else fallback


def _event_labels(event: SessionEvent) -> dict[str, str]:
    return {
        "dialect": _normalize_label(event.dialect, fallback="unknown"),
        "source": _normalize_label(event.source, fallback="unknown"),
        "error_type": _normalize_label(event.error_type, fallback="none"),
    }


def _labels_key(labels: LabelMap) -> tuple[tuple[str, str], ...]:
    return tuple(sorted((str(key), str(value)) for key, value in labels.items()))


@dataclass(frozen=True)
class MetricPoint:
    """
    Single metric point lookup result.
    """

    name: str
    labels: Mapping[str, str]
    value: int | float


class InMemoryMetricsAdapter:
    """
    In-memory metrics adapter for SessionEvent streams.
    """

    def __init__(self) -> None:
        self._counters: dict[tuple[str, tuple[tuple[str, str], ...]], int] = {}
        self._histograms: dict[tuple[str, tuple[tuple[str, str], ...]], list[float]] = {}
        # Hooks fire from every thread that grows a pool.
        self._lock = threading.Lock()

    def __call__(self, event: SessionEvent) -> None:
        labels = _event_labels(event)
        if event.event == "session.apply.end":
            self._inc("benchsession_applications_total", labels, 1)
            if not event.success:
                self._inc("benchsession_application_failures_total", labels, 1)
            if event.duration_ms is not None:
                self._observe("benchsession_apply_duration_ms", labels, event.duration_ms)
            return

        if event.event == "connection.open.end" and event.duration_ms is not None:
            self._observe("benchsession_connection_open_ms", labels, event.duration_ms)

    def _inc(self, metric: str, labels: LabelMap, delta: int) -> None:
        key = (metric, _labels_key(labels))
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + delta

    def _observe(self, metric: str, labels: LabelMap, value: float) -> None:
        key = (metric, _labels_key(labels))
        with self._lock:
            bucket = self._histograms.setdefault(key, [])
            bucket.append(value)

    def counter_value(self, metric: str, labels: LabelMap) -> int:
        return self._counters.get((metric, _labels_key(labels)), 0)

    def histogram_values(self, metric: str, labels: LabelMap) -> list[float]:
        values = self._histograms.get((metric, _labels_key(labels)), [])
        return list(values)

    def counters(self) -> list[MetricPoint]:
        points: list[MetricPoint] = []
        for (name, label_key), value in self._counters.items():
            points.append(MetricPoint(name=name, labels=dict(label_key), value=value))
        return points

    def histograms(self) -> list[MetricPoint]:
        points: list[MetricPoint] = []
        for (name, label_key), values in self._histograms.items():
            for value in values:
                points.append(MetricPoint(name=name, labels=dict(label_key), value=value))
        return points
