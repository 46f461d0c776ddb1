"""Dispatch Bus — in-process request/reply and fire-and-forget messaging.

Invariants:
    - At most one handler per topic for the bus lifetime (subscribe twice → ValueError)
    - request() to a topic without a handler fails immediately with NoSubscriberError
    - request() waits at most `timeout` seconds (default 100s); on expiry the caller
      gets DispatchTimeoutError and the handler keeps running, its reply discarded
    - A handler failure reaches the caller as the handler's own ContoError;
      any other exception is wrapped in InternalProcessingError
    - send() returns immediately; handler failures are logged, never raised
    - Each handler runs in its own task with the message's correlation id bound
    - A message is answered at most once; later replies are dropped

Design Decisions:
    - Explicit dict topic → handler, no auto-discovery: every route visible in one place
    - The caller awaits a Future, not the handler task: a handler may reply and
      keep working (post-reply side effects) and a timeout never cancels it
    - Pending handler tasks held in a set until done so drain() can await them
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from conto.core.errors import (
    ContoError,
    DispatchTimeoutError,
    ErrorContext,
    InternalProcessingError,
    NoSubscriberError,
)
from conto.infrastructure.observability import (
    bind_correlation_id, get_correlation_id,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 100.0


class Message:
    """Envelope delivered to a topic handler: topic, payload, correlation id, deadline."""

    def __init__(
        self,
        topic: str,
        payload: Any,
        correlation_id: str | None,
        deadline: float | None,
        future: asyncio.Future | None = None,
    ):
        self.topic = topic
        self.payload = payload
        self.correlation_id = correlation_id
        self.deadline = deadline
        self._future = future
        self._answered = False

    @property
    def answered(self) -> bool:
        return self._answered

    def reply(self, body: Any = None) -> None:
        """Deliver the success reply to the waiting caller (no-op for send())."""
        if self._answered:
            logger.warning(
                "Duplicate reply on '%s' ignored", self.topic,
                extra={"topic": self.topic},
            )
            return
        self._answered = True
        if self._future is None:
            return
        if self._future.done():
            logger.info(
                "Reply on '%s' arrived after the caller gave up; discarded",
                self.topic, extra={"topic": self.topic},
            )
            return
        self._future.set_result(body)

    def fail(self, error: ContoError) -> None:
        """Deliver a structured failure to the waiting caller."""
        if self._answered:
            logger.warning(
                "Failure after reply on '%s' ignored: %s", self.topic,
                error.message, extra={"topic": self.topic},
            )
            return
        self._answered = True
        if self._future is None or self._future.done():
            logger.error(
                "Handler for '%s' failed with nobody waiting: %s",
                self.topic, error.message,
                extra={"topic": self.topic, "error_code": int(error.code)},
            )
            return
        self._future.set_exception(error)


Handler = Callable[[Message], Awaitable[Any]]


class DispatchBus:
    """Single-consumer-per-topic request/reply bus for one event loop."""

    def __init__(self, default_timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.default_timeout = default_timeout
        self._handlers: dict[str, Handler] = {}
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, topic: str, handler: Handler) -> None:
        """Register the one handler for `topic`."""
        if topic in self._handlers:
            raise ValueError(f"Topic '{topic}' already has a subscriber")
        self._handlers[topic] = handler
        logger.debug("Subscribed to topic '%s'", topic, extra={"topic": topic})

    def has_subscriber(self, topic: str) -> bool:
        return topic in self._handlers

    async def request(
        self,
        topic: str,
        payload: Any,
        *,
        correlation_id: str | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send `payload` to the topic handler and wait for its reply."""
        cid = correlation_id if correlation_id is not None else get_correlation_id()
        handler = self._handlers.get(topic)
        if handler is None:
            logger.error(
                "No handler registered for '%s'", topic,
                extra={"topic": topic, "correlation_id": cid},
            )
            raise NoSubscriberError(topic, ErrorContext(correlation_id=cid))

        timeout = self.default_timeout if timeout is None else timeout
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        message = Message(topic, payload, cid, loop.time() + timeout, future)
        self._spawn(handler, message)
        try:
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Request on '%s' timed out after %ss", topic, timeout,
                extra={"topic": topic, "correlation_id": cid},
            )
            raise DispatchTimeoutError(
                topic, timeout, ErrorContext(correlation_id=cid),
            ) from None

    def send(
        self, topic: str, payload: Any, *, correlation_id: str | None = None,
    ) -> None:
        """Fire-and-forget delivery. Must be called from a running event loop."""
        cid = correlation_id if correlation_id is not None else get_correlation_id()
        handler = self._handlers.get(topic)
        if handler is None:
            logger.warning(
                "Dropping message for '%s': no handler registered", topic,
                extra={"topic": topic, "correlation_id": cid},
            )
            return
        self._spawn(handler, Message(topic, payload, cid, deadline=None))

    async def drain(self) -> None:
        """Wait until every in-flight handler task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, handler: Handler, message: Message) -> None:
        task = asyncio.create_task(
            self._run(handler, message), name=f"dispatch:{message.topic}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, handler: Handler, message: Message) -> None:
        with bind_correlation_id(message.correlation_id):
            try:
                result = await handler(message)
            except ContoError as e:
                self._deliver_failure(message, e)
            except Exception as e:
                logger.error(
                    "Unhandled error in handler for '%s': %s", message.topic, e,
                    exc_info=True, extra={"topic": message.topic},
                )
                self._deliver_failure(message, InternalProcessingError(
                    str(e) or type(e).__name__,
                    ErrorContext(topic=message.topic),
                ))
            else:
                if not message.answered:
                    message.reply(result)

    def _deliver_failure(self, message: Message, error: ContoError) -> None:
        if error.context.correlation_id is None:
            error.context.correlation_id = message.correlation_id
        if message.answered:
            logger.error(
                "Handler for '%s' failed after replying: %s",
                message.topic, error.message,
                extra={"topic": message.topic, "error_code": int(error.code)},
            )
            return
        message.fail(error)
