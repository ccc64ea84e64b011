"""
Tests for the async handler boundary.

The boundary forwards results and failures unchanged; it never
retries, swallows or rewrites an error.
"""

import asyncio
import inspect

import pytest

from errorlayer.domain.errors import ApiError
from errorlayer.shared.errors.boundary import async_handler


class TestAsyncHandler:
    """Behaviour of functions wrapped with async_handler."""

    @pytest.mark.asyncio
    async def test_result_is_forwarded(self) -> None:
        @async_handler
        async def handler(value: int) -> int:
            await asyncio.sleep(0)
            return value * 2

        assert await handler(21) == 42

    @pytest.mark.asyncio
    async def test_failure_is_the_same_object(self) -> None:
        error = ApiError(409, "Order already shipped")

        @async_handler
        async def handler() -> None:
            await asyncio.sleep(0)
            raise error

        with pytest.raises(ApiError) as excinfo:
            await handler()
        assert excinfo.value is error

    @pytest.mark.asyncio
    async def test_handler_runs_once(self) -> None:
        calls = []

        @async_handler
        async def handler() -> None:
            calls.append(1)
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await handler()
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_sync_callable_runs_in_threadpool(self) -> None:
        @async_handler
        def handler(name: str) -> str:
            return f"hello {name}"

        assert inspect.iscoroutinefunction(handler)
        assert await handler("ada") == "hello ada"

    @pytest.mark.asyncio
    async def test_sync_callable_failure_propagates(self) -> None:
        @async_handler
        def handler() -> None:
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            await handler()

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_independent(self) -> None:
        @async_handler
        async def handler(delay: float, fail: bool) -> str:
            await asyncio.sleep(delay)
            if fail:
                raise ApiError(404, "Resource not found")
            return "ok"

        results = await asyncio.gather(
            handler(0.02, True), handler(0.0, False), return_exceptions=True
        )
        assert isinstance(results[0], ApiError)
        assert results[1] == "ok"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        @async_handler
        async def handler() -> None:
            await asyncio.sleep(10)

        task = asyncio.create_task(handler())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    def test_signature_is_preserved(self) -> None:
        async def handler(item_id: int, q: str | None = None) -> dict:
            return {}

        wrapped = async_handler(handler)
        assert inspect.signature(wrapped) == inspect.signature(handler)
        assert wrapped.__name__ == "handler"
