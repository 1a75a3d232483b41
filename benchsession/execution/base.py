from abc import ABC, abstractmethod
from contextlib import contextmanager
import time
from typing import Any, Iterator, Mapping

from benchsession.execution.connection import (
    ConnectionAcquireHook,
    ConnectionReleaseHook,
    ConnectionSettings,
)
from benchsession.execution.hook import SessionSettingsConnectionHook
from benchsession.execution.observability import (
    ObservabilitySettings,
    SessionEvent,
    extract_error_code,
    now_iso_utc,
)
from benchsession.settings.session_scripts import Dialect

# ==================================================
# Base Connector
# ==================================================


class SessionConnector(ABC):
    """
    Abstract base class for connection factories that hand out connections
    with the session script already applied.
    """

    dialect: Dialect

    def __init__(
        self,
        *,
        hook: SessionSettingsConnectionHook | None = None,
        read_only: bool = False,
        connect_timeout_seconds: float | None = None,
        acquire_connection: ConnectionAcquireHook | None = None,
        release_connection: ConnectionReleaseHook | None = None,
        observability_settings: ObservabilitySettings | None = None,
    ) -> None:
        self.observability_settings = observability_settings or ObservabilitySettings()
        if hook is None:
            hook = SessionSettingsConnectionHook.for_dialect(
                self.dialect,
                read_only=read_only,
                observability_settings=self.observability_settings,
            )
        self.connection_settings = ConnectionSettings(
            connect_timeout_seconds=connect_timeout_seconds,
            acquire_connection=acquire_connection,
            release_connection=release_connection,
            session_hook=hook,
        )
        self._closed = False

    @property
    def hook(self) -> SessionSettingsConnectionHook:
        return self.connection_settings.session_hook

    @abstractmethod
    def _connect(self) -> Any:
        """
        Opens a new physical connection with the dialect's driver.
        """
        pass

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Connector is closed.")

    def _open_unconfigured(self) -> Any:
        if self.connection_settings.acquire_connection is not None:
            return self.connection_settings.acquire_connection()
        return self._connect()

    def _return_connection(self, conn: Any) -> None:
        if self.connection_settings.release_connection is not None:
            self.connection_settings.release_connection(conn)
            return
        conn.close()

    def _discard(self, conn: Any) -> None:
        # The configuration error is what the caller sees, not a failed close.
        try:
            self._return_connection(conn)
        except Exception:
            pass

    def connect(self) -> Any:
        """
        Returns an open connection with the session script applied.

        Failures while opening or configuring propagate unchanged; a connection
        that fails configuration is closed (or released) before the error surfaces.
        """
        self._ensure_open()
        self._emit_event("connection.open.start", success=True)
        started = time.perf_counter()
        conn = None
        try:
            conn = self._open_unconfigured()
            self.hook.connection_opened(conn)
        except Exception as exc:
            if conn is not None:
                self._discard(conn)
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

    def release(self, conn: Any) -> None:
        """
        Returns a connection obtained from connect().
        """
        self._emit_event("connection.release", success=True, connection_id=str(id(conn)))
        self._return_connection(conn)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        conn = self.connect()
        try:
            yield conn
        finally:
            self.release(conn)

    # ==================================================
    # Observability Helpers
    # ==================================================

    def _metadata(self, override: Mapping[str, Any] | None = None) -> dict[str, Any]:
        base = dict(self.observability_settings.metadata)
        if override:
            base.update(override)
        return base

    def _emit_event(self, event: str, *, success: bool, **kwargs: Any) -> None:
        observer = self.observability_settings.event_observer
        if observer is None:
            return
        observer(
            SessionEvent(
                timestamp=now_iso_utc(),
                event=event,
                dialect=self.dialect.value,
                source=self.__class__.__name__,
                success=success,
                metadata=self._metadata(),
                **kwargs,
            )
        )

    # ==================================================
    # Lifecycle Controls
    # ==================================================

    def close(self) -> None:
        """
        Marks the connector closed. Connections already handed out stay with their owners.
        """
        self._closed = True

    def __enter__(self) -> "SessionConnector":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        _ = exc_type
        _ = exc
        _ = tb
        self.close()
