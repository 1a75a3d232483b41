from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from benchsession.execution.hook import SessionSettingsConnectionHook
from benchsession.execution.observability import ObservabilitySettings
from benchsession.settings.session_scripts import Dialect

# ==================================================
# SQLAlchemy Engine Integration
# ==================================================


def _sync_engine(engine: Any) -> Engine:
    # AsyncEngine exposes its pool events through the wrapped sync engine.
    return getattr(engine, "sync_engine", engine)


def install_session_hook(engine: Any, hook: SessionSettingsConnectionHook) -> SessionSettingsConnectionHook:
    """
    Registers the hook on the engine's pool "connect" event.

    The event fires once per new DBAPI connection, so connections returned to
    the pool and checked out again keep the settings applied on first connect.
    """
    event.listen(_sync_engine(engine), "connect", hook)
    return hook


def remove_session_hook(engine: Any, hook: SessionSettingsConnectionHook) -> None:
    event.remove(_sync_engine(engine), "connect", hook)


def has_session_hook(engine: Any, hook: SessionSettingsConnectionHook) -> bool:
    return event.contains(_sync_engine(engine), "connect", hook)


def create_engine_with_session_settings(
    url: str,
    *,
    dialect: str | Dialect | None = None,
    hook: SessionSettingsConnectionHook | None = None,
    read_only: bool = False,
    observability_settings: ObservabilitySettings | None = None,
    **engine_kwargs: Any,
) -> Engine:
    """
    Creates an Engine whose new connections get the dialect's session script.

    The dialect is taken from the URL backend ("postgresql", "mssql") unless
    given explicitly or a ready-made hook is passed.
    """
    if hook is None:
        resolved = dialect if dialect is not None else make_url(url).get_backend_name()
        hook = SessionSettingsConnectionHook.for_dialect(
            resolved,
            read_only=read_only,
            observability_settings=observability_settings,
        )
    engine = create_engine(url, **engine_kwargs)
    install_session_hook(engine, hook)
    return engine
