"""Bridge between click's synchronous commands and async implementations."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

import click

T = TypeVar("T")


def coro(f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """Run an async click command to completion on a fresh event loop.

    Ctrl+C while the loop is running becomes ``click.Abort`` so the user
    sees "Aborted!" and exit status 1 instead of a traceback. Stopping a
    long-running worker gracefully is handled by its own signal handlers.

    Usage:
        @queue.command(name="emails")
        @coro
        async def emails() -> None:
            async with cli_database():
                ...
    """

    @wraps(f)
    def run_command(*args: Any, **kwargs: Any) -> T:
        try:
            return asyncio.run(f(*args, **kwargs))
        except KeyboardInterrupt:
            raise click.Abort from None

    return run_command
