"""
Async handler boundary.

Route handlers wrapped with ``async_handler`` always run as awaitables.
A failure of the awaited work propagates unchanged, as the same
exception object, into the exception handlers registered by
``register_error_handlers``. Nothing here retries, swallows or rewrites
an error, and cancellation propagates untouched.
"""

import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from starlette.concurrency import run_in_threadpool

T = TypeVar("T")


def async_handler(handler: Callable[..., Awaitable[T] | T]) -> Callable[..., Awaitable[T]]:
    """Wrap ``handler`` so its failures reach the error pipeline.

    Coroutine functions are awaited directly. Plain callables run in the
    threadpool so they never block the event loop; if they return an
    awaitable it is awaited too. The wrapper keeps the handler's
    signature, so FastAPI still resolves its parameters and dependencies.
    """

    if inspect.iscoroutinefunction(handler):

        @functools.wraps(handler)
        async def boundary(*args: Any, **kwargs: Any) -> T:
            return await handler(*args, **kwargs)

    else:

        @functools.wraps(handler)
        async def boundary(*args: Any, **kwargs: Any) -> T:
            result = await run_in_threadpool(handler, *args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

    return boundary
