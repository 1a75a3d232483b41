import asyncio
import time
from typing import Any

from benchsession.execution.base import SessionConnector
from benchsession.execution.connection import ConnectionAcquireHook, ConnectionReleaseHook
from benchsession.execution.hook import SessionSettingsConnectionHook
from benchsession.execution.observability import ObservabilitySettings, extract_error_code
from benchsession.settings.session_scripts import Dialect

# ==================================================
# PostgreSQL Connector
# ==================================================


class PostgresSessionConnector(SessionConnector):
    """
    A connection factory for PostgreSQL using the 'psycopg' library.
    """

    dialect = Dialect.POSTGRES

    def __init__(
        self,
        connection_info: str | dict[str, Any] | None = None,
        *,
        hook: SessionSettingsConnectionHook | None = None,
        read_only: bool = False,
        connect_timeout_seconds: float | None = None,
        acquire_connection: ConnectionAcquireHook | None = None,
        release_connection: ConnectionReleaseHook | None = None,
        observability_settings: ObservabilitySettings | None = None,
    ) -> None:
        """
        Initializes the connector with connection information or an acquire hook.

        Args:
            connection_info: A conninfo/URL string or a dictionary of connection parameters.
            hook: Session hook to apply; defaults to the PostgreSQL session script.
            read_only: Adds the read-only session statements to the default hook.
            connect_timeout_seconds: Forwarded to psycopg as 'connect_timeout'.
            acquire_connection: Optional factory used instead of psycopg.connect.
            release_connection: Optional callback used instead of conn.close().
            observability_settings: Optional event observer and metadata.
        """
        if connection_info is None and acquire_connection is None:
            raise ValueError("Provide connection_info or acquire_connection.")

        self.connection_info = connection_info
        self._psycopg = None
        super().__init__(
            hook=hook,
            read_only=read_only,
            connect_timeout_seconds=connect_timeout_seconds,
            acquire_connection=acquire_connection,
            release_connection=release_connection,
            observability_settings=observability_settings,
        )

    def _get_psycopg(self) -> Any:
        """
        Lazily imports psycopg and returns the module.
        """
        if self._psycopg is None:
            try:
                import psycopg
                self._psycopg = psycopg
            except ImportError:
                raise ImportError(
                    "The 'psycopg' library is required for PostgresSessionConnector. "
                    "Install it with 'pip install psycopg[binary]'."
                )
        return self._psycopg

    def _connect_args(self) -> tuple[tuple[Any, ...], dict[str, Any]]:
        kwargs: dict[str, Any] = {}
        timeout = self.connection_settings.connect_timeout_seconds
        if timeout is not None:
            kwargs["connect_timeout"] = timeout
        if isinstance(self.connection_info, dict):
            return (), {**self.connection_info, **kwargs}
        return (self.connection_info,), kwargs

    def _connect(self) -> Any:
        psycopg = self._get_psycopg()
        args, kwargs = self._connect_args()
        return psycopg.connect(*args, **kwargs)

    async def connect_async(self, cancel_event: asyncio.Event | None = None) -> Any:
        """
        Opens a psycopg.AsyncConnection and applies the session script before returning it.

        A connection whose configuration fails or is cancelled is closed before
        the error propagates.
        """
        self._ensure_open()
        self._emit_event("connection.open.start", success=True)
        started = time.perf_counter()
        psycopg = self._get_psycopg()
        args, kwargs = self._connect_args()
        conn = None
        try:
            conn = await psycopg.AsyncConnection.connect(*args, **kwargs)
            await self.hook.connection_opened_async(conn, cancel_event=cancel_event)
        except (Exception, asyncio.CancelledError) as exc:
            if conn is not None:
                try:
                    await conn.close()
                except Exception:
                    pass
            self._emit_event(
                "connection.open.end",
                success=False,
                connection_id=str(id(conn)) if conn is not None else None,
                duration_ms=(time.perf_counter() - started) * 1000,
                error_type=type(exc).__name__,
                error_code=extract_error_code(exc),
                error_message=str(exc),
            )
            raise
        self._emit_event(
            "connection.open.end",
            success=True,
            connection_id=str(id(conn)),
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        return conn
