from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping

# ==================================================
# Dialects
# ==================================================


class Dialect(str, Enum):
    """
    Database dialects that ship a session normalization script.
    """

    SQL_SERVER = "sqlserver"
    POSTGRES = "postgres"

    @classmethod
    def from_name(cls, name: "str | Dialect") -> "Dialect":
        """
        Resolves a dialect from its value or a common driver/product alias.
        """
        if isinstance(name, Dialect):
            return name
        key = name.strip().lower().replace("-", "_")
        dialect = _DIALECT_ALIASES.get(key)
        if dialect is None:
            raise ValueError(f"Unsupported dialect: {name!r}")
        return dialect


_DIALECT_ALIASES: dict[str, Dialect] = {
    "sqlserver": Dialect.SQL_SERVER,
    "sql_server": Dialect.SQL_SERVER,
    "mssql": Dialect.SQL_SERVER,
    "pyodbc": Dialect.SQL_SERVER,
    "postgres": Dialect.POSTGRES,
    "postgresql": Dialect.POSTGRES,
    "psycopg": Dialect.POSTGRES,
    "pg": Dialect.POSTGRES,
}

# Session-scoped only; these forms touch the current transaction instead.
_TRANSACTION_SCOPED_PREFIXES = ("SET TRANSACTION", "SET LOCAL", "SET SESSION CHARACTERISTICS")


# ==================================================
# Statement Helpers
# ==================================================


def split_statements(text: str) -> list[str]:
    """
    Splits SQL text on ';' terminators that sit outside single-quoted literals,
    double-quoted identifiers and '--' line comments.

    Each returned statement keeps its terminator. A trailing fragment with no
    terminator is returned as-is so callers can detect it.

    Doubled quotes ('' and "") are handled. Backslash escapes in PostgreSQL
    E'...' strings and /* */ block comments are not recognised.
    """
    statements: list[str] = []
    current: list[str] = []
    quote: str | None = None
    in_comment = False
    for char in text:
        previous = current[-1] if current else ""
        current.append(char)
        if in_comment:
            if char == "\n":
                in_comment = False
        elif quote is not None:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "-" and previous == "-":
            in_comment = True
        elif char == ";":
            statement = "".join(current).strip()
            if statement != ";":
                statements.append(statement)
            current = []

    tail = "".join(current).strip()
    if tail:
        statements.append(tail)
    return statements


def combine_scripts(*texts: str | None) -> str:
    """
    Joins session scripts with newlines, skipping empty parts.
    """
    return "\n".join(text.strip() for text in texts if text and text.strip())


def _validate_session_statement(statement: str) -> None:
    if not statement.endswith(";"):
        raise ValueError(f"Session statement is not terminated with ';': {statement!r}")
    normalized = " ".join(statement.upper().split())
    if not normalized.startswith("SET "):
        raise ValueError(f"Session scripts may only contain SET statements: {statement!r}")
    if normalized.startswith(_TRANSACTION_SCOPED_PREFIXES):
        raise ValueError(f"Session scripts may not contain transaction-scoped statements: {statement!r}")


# ==================================================
# Session Scripts
# ==================================================


@dataclass(frozen=True)
class DialectSessionScript:
    """
    A literal block of session-scoped SET statements for one dialect.
    """

    dialect: Dialect
    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.dialect, Dialect):
            object.__setattr__(self, "dialect", Dialect.from_name(self.dialect))
        if not self.text or not self.text.strip():
            raise ValueError("Session script text must not be empty")
        for statement in split_statements(self.text):
            _validate_session_statement(statement)

    @property
    def statements(self) -> list[str]:
        return split_statements(self.text)

    def __str__(self) -> str:
        return self.text


SqlServerSessionSettings = (
    "SET NOCOUNT ON;\n"
    "SET ANSI_NULLS ON;\n"
    "SET ANSI_PADDING ON;\n"
    "SET ANSI_WARNINGS ON;\n"
    "SET ARITHABORT ON;\n"
    "SET CONCAT_NULL_YIELDS_NULL ON;\n"
    "SET QUOTED_IDENTIFIER ON;\n"
    "SET NUMERIC_ROUNDABORT OFF;\n"
    "SET NOCOUNT OFF;"
)

PostgresSessionSettings = (
    "SET standard_conforming_strings = on;\n"
    "SET client_min_messages = warning;"
)

PostgresReadOnlySessionSettings = "SET default_transaction_read_only = on;"

SQL_SERVER_SESSION_SETTINGS = DialectSessionScript(Dialect.SQL_SERVER, SqlServerSessionSettings)
POSTGRES_SESSION_SETTINGS = DialectSessionScript(Dialect.POSTGRES, PostgresSessionSettings)
POSTGRES_READ_ONLY_SESSION_SETTINGS = DialectSessionScript(Dialect.POSTGRES, PostgresReadOnlySessionSettings)

_SESSION_SCRIPTS: Mapping[Dialect, DialectSessionScript] = {
    Dialect.SQL_SERVER: SQL_SERVER_SESSION_SETTINGS,
    Dialect.POSTGRES: POSTGRES_SESSION_SETTINGS,
}

_READ_ONLY_SCRIPTS: Mapping[Dialect, DialectSessionScript] = {
    Dialect.POSTGRES: POSTGRES_READ_ONLY_SESSION_SETTINGS,
}


def session_script_for(dialect: str | Dialect, *, read_only: bool = False) -> DialectSessionScript:
    """
    Returns the session script for a dialect.

    Args:
        dialect: A Dialect member or one of its aliases ("mssql", "postgresql", ...).
        read_only: Appends the dialect's read-only session statements.
    """
    resolved = Dialect.from_name(dialect)
    script = _SESSION_SCRIPTS[resolved]
    if not read_only:
        return script

    read_only_script = _READ_ONLY_SCRIPTS.get(resolved)
    if read_only_script is None:
        raise ValueError(f"No read-only session settings are defined for {resolved.value}")
    return DialectSessionScript(resolved, combine_scripts(script.text, read_only_script.text))


# ==================================================
# Differential Scripts
# ==================================================

SettingFormatter = Callable[[str, str], str]

SQL_SERVER_EXPECTED_SETTINGS: Mapping[str, str] = {
    "ANSI_NULLS": "ON",
    "ANSI_PADDING": "ON",
    "ANSI_WARNINGS": "ON",
    "ARITHABORT": "ON",
    "CONCAT_NULL_YIELDS_NULL": "ON",
    "QUOTED_IDENTIFIER": "ON",
    "NUMERIC_ROUNDABORT": "OFF",
}

POSTGRES_EXPECTED_SETTINGS: Mapping[str, str] = {
    "standard_conforming_strings": "on",
    "client_min_messages": "warning",
}


def format_sql_server_setting(name: str, value: str) -> str:
    return f"SET {name} {value};"


def format_postgres_setting(name: str, value: str) -> str:
    return f"SET {name} = {value};"


def build_session_settings_script(
    expected: Mapping[str, str],
    current: Mapping[str, str],
    formatter: SettingFormatter,
) -> str:
    """
    Builds a script containing only the settings whose current value differs.

    Setting names compare case-insensitively; values compare exactly. Missing
    current values count as different.
    """
    current_by_name = {name.lower(): value for name, value in current.items()}
    lines = [
        formatter(name, value)
        for name, value in expected.items()
        if current_by_name.get(name.lower()) != value
    ]
    return "\n".join(lines)
