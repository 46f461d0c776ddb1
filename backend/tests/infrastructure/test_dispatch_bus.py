"""Tests for DispatchBus — request/reply, fire-and-forget, timeouts and correlation.

Invariants:
    - No subscriber fails immediately, distinct from a timeout
    - Timeouts never cancel the handler
    - Handler failures reach the caller as ContoError, send() never raises
"""

import asyncio
import time

import pytest

from conto.core.errors import (
    DispatchTimeoutError,
    ErrorCode,
    InternalProcessingError,
    InvalidRequestError,
    NoSubscriberError,
)
from conto.infrastructure.dispatch_bus import DEFAULT_TIMEOUT_SECONDS, DispatchBus
from conto.infrastructure.observability import bind_correlation_id, get_correlation_id


def test_default_timeout_is_100_seconds():
    assert DEFAULT_TIMEOUT_SECONDS == 100.0
    assert DispatchBus().default_timeout == 100.0


def test_duplicate_subscription_rejected():
    bus = DispatchBus()

    async def handler(message):
        return None

    bus.subscribe("balance", handler)
    with pytest.raises(ValueError):
        bus.subscribe("balance", handler)
    assert bus.has_subscriber("balance")


async def test_request_returns_handler_reply():
    bus = DispatchBus()

    async def echo(message):
        return {"echo": message.payload}

    bus.subscribe("echo", echo)
    assert await bus.request("echo", 1) == {"echo": 1}


async def test_request_without_subscriber_fails_immediately():
    bus = DispatchBus(default_timeout=5.0)
    started = time.monotonic()
    with pytest.raises(NoSubscriberError) as exc:
        await bus.request("nobody", {})
    assert time.monotonic() - started < 1.0
    assert exc.value.code == ErrorCode.DISPATCH_NO_HANDLER


async def test_timeout_is_distinct_and_handler_keeps_running():
    bus = DispatchBus()
    finished = asyncio.Event()

    async def slow(message):
        await asyncio.sleep(0.2)
        finished.set()
        return "late"

    bus.subscribe("slow", slow)
    with pytest.raises(DispatchTimeoutError) as exc:
        await bus.request("slow", None, timeout=0.05)
    assert exc.value.code == ErrorCode.DISPATCH_TIMEOUT
    assert not isinstance(exc.value, NoSubscriberError)

    await bus.drain()
    assert finished.is_set()


async def test_handler_error_reaches_caller_unchanged():
    bus = DispatchBus()

    async def reject(message):
        raise InvalidRequestError("bad amount", ErrorCode.VALIDATION_INVALID_VALUE)

    bus.subscribe("reject", reject)
    with pytest.raises(InvalidRequestError) as exc:
        await bus.request("reject", None, correlation_id="cid-2")
    assert exc.value.code == ErrorCode.VALIDATION_INVALID_VALUE
    assert exc.value.context.correlation_id == "cid-2"


async def test_unexpected_exception_wrapped_as_internal_error():
    bus = DispatchBus()

    async def boom(message):
        raise RuntimeError("kaboom")

    bus.subscribe("boom", boom)
    with pytest.raises(InternalProcessingError) as exc:
        await bus.request("boom", None)
    assert exc.value.code == ErrorCode.INTERNAL_ERROR
    assert "kaboom" in exc.value.message


async def test_correlation_id_visible_inside_handler():
    bus = DispatchBus()
    seen = []

    async def handler(message):
        seen.append((message.correlation_id, get_correlation_id()))

    bus.subscribe("t", handler)
    await bus.request("t", None, correlation_id="cid-1")
    assert seen == [("cid-1", "cid-1")]


async def test_correlation_id_defaults_to_bound_context():
    bus = DispatchBus()
    seen = []

    async def handler(message):
        seen.append(message.correlation_id)

    bus.subscribe("t", handler)
    with bind_correlation_id("ctx-7"):
        await bus.request("t", None)
    assert seen == ["ctx-7"]


async def test_send_from_handler_inherits_correlation_id():
    bus = DispatchBus()
    seen = []

    async def first(message):
        bus.send("second", message.payload)
        return "ok"

    async def second(message):
        seen.append((message.payload, message.correlation_id))

    bus.subscribe("first", first)
    bus.subscribe("second", second)
    assert await bus.request("first", 42, correlation_id="cid-9") == "ok"
    await bus.drain()
    assert seen == [(42, "cid-9")]


async def test_send_to_unsubscribed_topic_is_dropped():
    bus = DispatchBus()
    bus.send("nobody", {"x": 1})
    await bus.drain()


async def test_send_handler_failure_is_not_raised():
    bus = DispatchBus()
    calls = []

    async def bad(message):
        calls.append(message.payload)
        raise RuntimeError("store down")

    bus.subscribe("bad", bad)
    bus.send("bad", 1)
    await bus.drain()
    assert calls == [1]


async def test_handler_can_reply_then_keep_working():
    bus = DispatchBus()
    done = asyncio.Event()

    async def handler(message):
        message.reply("early")
        await asyncio.sleep(0.01)
        done.set()

    bus.subscribe("t", handler)
    assert await bus.request("t", None) == "early"
    await bus.drain()
    assert done.is_set()


async def test_failure_after_reply_does_not_reach_caller():
    bus = DispatchBus()

    async def handler(message):
        message.reply("first")
        raise RuntimeError("after reply")

    bus.subscribe("t", handler)
    assert await bus.request("t", None) == "first"
    await bus.drain()


async def test_second_reply_ignored():
    bus = DispatchBus()

    async def handler(message):
        message.reply(1)
        message.reply(2)

    bus.subscribe("t", handler)
    assert await bus.request("t", None) == 1


async def test_concurrent_requests_are_independent():
    bus = DispatchBus()

    async def handler(message):
        await asyncio.sleep(0.05 if message.payload == 1 else 0)
        return message.payload * 10

    bus.subscribe("t", handler)
    results = await asyncio.gather(
        bus.request("t", 1, correlation_id="a"),
        bus.request("t", 2, correlation_id="b"),
    )
    assert results == [10, 20]
