import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

from starlette.requests import Request

from app.api.exceptions import ClientDisconnectedError
from app.logging.logger import Log

T = TypeVar("T")


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_seconds: float = 0.5,
) -> T:
    """Await ``work`` but cancel it as soon as the client disconnects.

    Cancelling the task aborts the in-flight upstream HTTP call.

    Raises:
        ClientDisconnectedError: if the client went away first.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _pending = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                return task.result()
            if await request.is_disconnected():
                Log.warning("Client disconnected, cancelling in-flight analysis")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise ClientDisconnectedError()
    finally:
        if not task.done():
            task.cancel()
