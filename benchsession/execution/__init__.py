from benchsession.execution.apply import apply_session_script, apply_session_script_async
from benchsession.execution.hook import ConnectionOpenHook, SessionSettingsConnectionHook
from benchsession.execution.base import SessionConnector
from benchsession.execution.postgres import PostgresSessionConnector
from benchsession.execution.mssql import MsSqlSessionConnector
from benchsession.execution.connection import ConnectionSettings, with_session_settings
from benchsession.execution.observability import (
    InMemoryMetricsAdapter,
    MetricPoint,
    ObservabilitySettings,
    SessionEvent,
    compose_event_observers,
    make_json_event_logger,
    session_event_to_dict,
)

__all__ = [
    "apply_session_script",
    "apply_session_script_async",
    "ConnectionOpenHook",
    "SessionSettingsConnectionHook",
    "SessionConnector",
    "PostgresSessionConnector",
    "MsSqlSessionConnector",
    "ConnectionSettings",
    "with_session_settings",
    "InMemoryMetricsAdapter",
    "MetricPoint",
    "ObservabilitySettings",
    "SessionEvent",
    "compose_event_observers",
    "make_json_event_logger",
    "session_event_to_dict",
]
