from benchsession.integrations.sqlalchemy import (
    create_engine_with_session_settings,
    has_session_hook,
    install_session_hook,
    remove_session_hook,
)

__all__ = [
    "create_engine_with_session_settings",
    "has_session_hook",
    "install_session_hook",
    "remove_session_hook",
]
