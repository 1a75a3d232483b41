from benchsession.settings.session_scripts import (
    Dialect,
    DialectSessionScript,
    POSTGRES_EXPECTED_SETTINGS,
    POSTGRES_READ_ONLY_SESSION_SETTINGS,
    POSTGRES_SESSION_SETTINGS,
    PostgresReadOnlySessionSettings,
    PostgresSessionSettings,
    SQL_SERVER_EXPECTED_SETTINGS,
    SQL_SERVER_SESSION_SETTINGS,
    SqlServerSessionSettings,
    build_session_settings_script,
    combine_scripts,
    format_postgres_setting,
    format_sql_server_setting,
    session_script_for,
    split_statements,
)

__all__ = [
    "Dialect",
    "DialectSessionScript",
    "POSTGRES_EXPECTED_SETTINGS",
    "POSTGRES_READ_ONLY_SESSION_SETTINGS",
    "POSTGRES_SESSION_SETTINGS",
    "PostgresReadOnlySessionSettings",
    "PostgresSessionSettings",
    "SQL_SERVER_EXPECTED_SETTINGS",
    "SQL_SERVER_SESSION_SETTINGS",
    "SqlServerSessionSettings",
    "build_session_settings_script",
    "combine_scripts",
    "format_postgres_setting",
    "format_sql_server_setting",
    "session_script_for",
    "split_statements",
]
