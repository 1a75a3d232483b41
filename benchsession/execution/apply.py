from __future__ import annotations

import asyncio
from typing import Any, Awaitable, TypeVar

T = TypeVar("T")

# ==================================================
# Session Script Execution
# ==================================================


def apply_session_script(connection: Any, sql: str) -> None:
    """
    Runs a session script on an open DBAPI connection.

    The cursor is closed on every path. Driver errors propagate unchanged.
    """
    cursor = connection.cursor()
    try:
        cursor.execute(sql)
    finally:
        cursor.close()

    # SET inside an implicit transaction would be undone by a later rollback.
    if getattr(connection, "autocommit", None) is False:
        connection.commit()


async def apply_session_script_async(
    connection: Any,
    sql: str,
    cancel_event: asyncio.Event | None = None,
) -> None:
    """
    Runs a session script on an open async connection (e.g. psycopg.AsyncConnection).

    Args:
        connection: An async connection whose cursor() supports 'async with'.
        sql: The session script text.
        cancel_event: Optional cancellation signal. If it is already set the
            script is not sent; if it is set while the script runs, the
            execution is cancelled. Both cases raise asyncio.CancelledError.
    """
    _raise_if_cancelled(cancel_event)
    async with connection.cursor() as cursor:
        await _await_cancellable(cursor.execute(sql), cancel_event)

    if getattr(connection, "autocommit", None) is False:
        await _await_cancellable(connection.commit(), cancel_event)


def _raise_if_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise asyncio.CancelledError("Session script execution was cancelled.")


async def _await_cancellable(awaitable: Awaitable[T], cancel_event: asyncio.Event | None) -> T:
    if cancel_event is None:
        return await awaitable

    execution = asyncio.ensure_future(awaitable)
    cancelled = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({execution, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        pending = [task for task in (execution, cancelled) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    if execution.cancelled():
        raise asyncio.CancelledError("Session script execution was cancelled.")
    return execution.result()
