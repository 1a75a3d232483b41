from benchsession.settings import (
    Dialect,
    DialectSessionScript,
    POSTGRES_READ_ONLY_SESSION_SETTINGS,
    POSTGRES_SESSION_SETTINGS,
    PostgresSessionSettings,
    SQL_SERVER_SESSION_SETTINGS,
    SqlServerSessionSettings,
    session_script_for,
)
from benchsession.execution import (
    ConnectionOpenHook,
    ConnectionSettings,
    InMemoryMetricsAdapter,
    MsSqlSessionConnector,
    ObservabilitySettings,
    PostgresSessionConnector,
    SessionEvent,
    SessionSettingsConnectionHook,
    apply_session_script,
    apply_session_script_async,
    make_json_event_logger,
    with_session_settings,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Dialect",
    "DialectSessionScript",
    "POSTGRES_READ_ONLY_SESSION_SETTINGS",
    "POSTGRES_SESSION_SETTINGS",
    "PostgresSessionSettings",
    "SQL_SERVER_SESSION_SETTINGS",
    "SqlServerSessionSettings",
    "session_script_for",
    "ConnectionOpenHook",
    "ConnectionSettings",
    "InMemoryMetricsAdapter",
    "MsSqlSessionConnector",
    "ObservabilitySettings",
    "PostgresSessionConnector",
    "SessionEvent",
    "SessionSettingsConnectionHook",
    "apply_session_script",
    "apply_session_script_async",
    "make_json_event_logger",
    "with_session_settings",
]
