from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from benchsession.execution.hook import SessionSettingsConnectionHook

# ==================================================
# Connection Management Types
# ==================================================

ConnectionAcquireHook = Callable[[], Any]
ConnectionReleaseHook = Callable[[Any], None]


@dataclass(frozen=True)
class ConnectionSettings:
    """
    Cross-dialect connection settings for session-aware connectors.
    """

    connect_timeout_seconds: float | None = None
    acquire_connection: ConnectionAcquireHook | None = None
    release_connection: ConnectionReleaseHook | None = None
    session_hook: "SessionSettingsConnectionHook | None" = None


def with_session_settings(
    connect: ConnectionAcquireHook,
    hook: "SessionSettingsConnectionHook",
) -> ConnectionAcquireHook:
    """
    Wraps a connection factory so every connection it opens is configured first.

    If the session script fails, the new connection is closed and the original
    error is re-raised; a half-configured connection is never returned.
    """

    def _acquire() -> Any:
        conn = connect()
        try:
            hook.connection_opened(conn)
        except Exception:
            try:
                conn.close()
            except Exception:
                pass
            raise
        return conn

    return _acquire
