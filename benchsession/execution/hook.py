from __future__ import annotations

import asyncio
import time
from typing import Any, Mapping

from benchsession.execution.apply import apply_session_script, apply_session_script_async
from benchsession.execution.observability import (
    ObservabilitySettings,
    SessionEvent,
    extract_error_code,
    now_iso_utc,
)
from benchsession.settings.session_scripts import (
    Dialect,
    DialectSessionScript,
    session_script_for,
    split_statements,
)

# ==================================================
# Connection-Open Hook
# ==================================================


class SessionSettingsConnectionHook:
    """
    Applies a fixed session script to every newly opened physical connection.

    The hook only holds its SQL text, so one instance can serve any number of
    connections concurrently. It exposes the callback shapes used by the
    common pooling layers:

    - connection_opened / connection_opened_async: plain callbacks.
    - configure / configure_async: psycopg_pool 'configure=' callbacks.
    - __call__: SQLAlchemy pool "connect" event listener.
    """

    def __init__(
        self,
        sql: str | DialectSessionScript,
        *,
        dialect: str | Dialect | None = None,
        observability_settings: ObservabilitySettings | None = None,
    ) -> None:
        """
        Args:
            sql: The session script, as text or as a DialectSessionScript.
            dialect: Optional dialect label; taken from the script when omitted.
            observability_settings: Optional event observer and metadata.
        """
        if isinstance(sql, DialectSessionScript):
            dialect = dialect if dialect is not None else sql.dialect
            sql = sql.text
        if not isinstance(sql, str) or not sql.strip():
            raise ValueError("Session script text must be a non-empty string.")

        self._sql = sql
        self._dialect = Dialect.from_name(dialect) if dialect is not None else None
        self.observability_settings = observability_settings or ObservabilitySettings()

    @classmethod
    def for_dialect(
        cls,
        dialect: str | Dialect,
        *,
        read_only: bool = False,
        observability_settings: ObservabilitySettings | None = None,
    ) -> "SessionSettingsConnectionHook":
        """
        Builds a hook bound to the built-in session script of a dialect.
        """
        return cls(
            session_script_for(dialect, read_only=read_only),
            observability_settings=observability_settings,
        )

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def dialect(self) -> Dialect | None:
        return self._dialect

    def __repr__(self) -> str:
        dialect = self._dialect.value if self._dialect is not None else None
        return f"{self.__class__.__name__}(dialect={dialect!r}, statements={len(split_statements(self._sql))})"

    # ==================================================
    # Callbacks
    # ==================================================

    def connection_opened(self, connection: Any, event_data: Any = None) -> None:
        """
        Applies the session script to a freshly opened connection.
        """
        started = self._emit_start(connection, event_data)
        try:
            apply_session_script(connection, self._sql)
        except Exception as exc:
            self._emit_end(connection, event_data, started, exc)
            raise
        self._emit_end(connection, event_data, started, None)

    async def connection_opened_async(
        self,
        connection: Any,
        event_data: Any = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """
        Applies the session script to a freshly opened async connection.

        Cancellation (already signalled, signalled mid-flight, or the calling
        task being cancelled) surfaces as asyncio.CancelledError.
        """
        started = self._emit_start(connection, event_data)
        try:
            await apply_session_script_async(connection, self._sql, cancel_event)
        except (Exception, asyncio.CancelledError) as exc:
            self._emit_end(connection, event_data, started, exc)
            raise
        self._emit_end(connection, event_data, started, None)

    def configure(self, connection: Any) -> None:
        self.connection_opened(connection)

    async def configure_async(self, connection: Any) -> None:
        await self.connection_opened_async(connection)

    def __call__(self, dbapi_connection: Any, connection_record: Any = None) -> None:
        self.connection_opened(dbapi_connection, connection_record)

    # ==================================================
    # Observability Helpers
    # ==================================================

    def _dialect_name(self) -> str:
        return self._dialect.value if self._dialect is not None else "unknown"

    def _metadata(self, event_data: Any) -> dict[str, Any]:
        base = dict(self.observability_settings.metadata)
        if isinstance(event_data, Mapping):
            base.update(event_data)
        return base

    def _emit(self, event: str, connection: Any, event_data: Any, *, success: bool, **kwargs: Any) -> None:
        observer = self.observability_settings.event_observer
        if observer is None:
            return
        observer(
            SessionEvent(
                timestamp=now_iso_utc(),
                event=event,
                dialect=self._dialect_name(),
                source=self.__class__.__name__,
                success=success,
                metadata=self._metadata(event_data),
                connection_id=str(id(connection)),
                **kwargs,
            )
        )

    def _emit_start(self, connection: Any, event_data: Any) -> float:
        self._emit(
            "session.apply.start",
            connection,
            event_data,
            success=True,
            statement_count=len(split_statements(self._sql)),
        )
        return time.perf_counter()

    def _emit_end(self, connection: Any, event_data: Any, started: float, error: BaseException | None) -> None:
        self._emit(
            "session.apply.end",
            connection,
            event_data,
            success=error is None,
            duration_ms=(time.perf_counter() - started) * 1000,
            error_type=type(error).__name__ if error is not None else None,
            error_code=extract_error_code(error) if error is not None else None,
            error_message=str(error) if error is not None else None,
        )


ConnectionOpenHook = SessionSettingsConnectionHook
