import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Coroutine, Mapping

logger = logging.getLogger(__name__)


class MessageAddress(str, Enum):
    INVOICE_TOTALS = "invoicing.invoice.update.totals"


@dataclass(frozen=True, slots=True)
class Message:
    address: str
    body: dict[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)


Handler = Callable[[Message], Awaitable[None]]


class EventBus:
    """
    In-process message bus with fire-and-forget delivery.

    - publish() never blocks and never raises to the publisher; a full queue
      or an address nobody listens to drops the message (at-most-once).
    - A single consumer task dispatches queued messages to the handlers
      subscribed to their address; handler failures are only logged.
    - spawn() runs background work that the caller does not await.
    - drain() waits until every spawned task and queued message is done.
    """

    def __init__(self, maxsize: int = 0):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._queue: asyncio.Queue[Message] = asyncio.Queue(maxsize=maxsize)
        self._tasks: set[asyncio.Task] = set()
        self.consumer_task: asyncio.Task | None = None

    def subscribe(self, address: str, handler: Handler) -> None:
        self._handlers[_address_key(address)].append(handler)

    def publish(self, address: str, body: dict[str, Any], headers: Mapping[str, str] | None = None) -> None:
        address = _address_key(address)
        if not self._handlers.get(address):
            logger.warning("No handlers subscribed to %s, message dropped", address)
            return
        try:
            self._queue.put_nowait(Message(address, body, dict(headers or {})))
        except asyncio.QueueFull:
            logger.error("Event queue is full, message to %s dropped", address)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(_log_task_failure)
        return task

    async def start(self) -> None:
        """Start the consumer task."""
        if self.consumer_task is None:
            self.consumer_task = asyncio.create_task(self._consume())
            logger.info("Event bus started")

    async def stop(self) -> None:
        """Finish pending work, then stop the consumer task."""
        if self.consumer_task is None:
            return
        await self.drain()
        self.consumer_task.cancel()
        try:
            await self.consumer_task
        except asyncio.CancelledError:
            pass
        self.consumer_task = None
        logger.info("Event bus stopped")

    async def drain(self) -> None:
        while True:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            if self.consumer_task is not None:
                await self._queue.join()
            if not self._tasks:
                break

    async def _consume(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._dispatch(message)
            finally:
                self._queue.task_done()

    async def _dispatch(self, message: Message) -> None:
        for handler in self._handlers.get(message.address, []):
            try:
                await handler(message)
            except Exception as e:
                logger.error("Handler %s failed for %s: %s", getattr(handler, "__name__", handler), message.address, e)


def _address_key(address: str) -> str:
    return address.value if isinstance(address, Enum) else address


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task failed: %s", exc, exc_info=exc)
