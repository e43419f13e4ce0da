"""Event bus abstraction — publish/subscribe for engine events.

This is the Strategy Pattern:
- BaseEventBus defines the interface (publish, subscribe)
- RedisEventBus implements it with Redis Pub/Sub
- InMemoryEventBus delivers in-process (single instance, tests, no Redis)

Engine code only talks to the interface, never the concrete class.

Architecture:
    ReportAssembler: event_bus.publish(topic="diagnosis.completed", event=DiagnosisCompletedEvent(...))
                                    ↓
                            Event Bus (Redis/in-memory)
                                    ↓
    Dashboard: event_bus.subscribe(topic="diagnosis.completed", handler=refresh)
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from typing import Awaitable, Callable

import redis.asyncio as redis

from .schemas import BaseEvent

logger = logging.getLogger(__name__)

# Type alias for event handlers
EventHandler = Callable[[dict], Awaitable[None]]


class BaseEventBus(ABC):
    """Abstract event bus — all implementations must follow this interface."""

    @abstractmethod
    async def publish(self, topic: str, event: BaseEvent) -> None:
        """Publish an event to a topic.

        Args:
            topic: Topic name, e.g. "diagnosis.completed", "remediation"
            event: Event object to publish
        """
        ...

    @abstractmethod
    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Subscribe to a topic with a handler function.

        Args:
            topic: Topic name to listen to
            handler: Async function called with the event dict
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close connections and cleanup resources."""
        ...


class RedisEventBus(BaseEventBus):
    """Redis Pub/Sub implementation of the event bus.

    No message durability: a subscriber that is down misses the message.
    Diagnosis can always be re-run, so that is acceptable here.
    """

    def __init__(self, redis_url: str):
        """Initialize Redis connection.

        Args:
            redis_url: Redis connection string, e.g. "redis://localhost:6379/0"
        """
        self._redis_url = redis_url
        self._client: redis.Redis | None = None
        self._pubsub: redis.client.PubSub | None = None
        self._subscriber_tasks: list[asyncio.Task] = []

    async def _ensure_connected(self):
        """Lazy connection — only connect when first needed."""
        if self._client is None:
            self._client = redis.from_url(self._redis_url, decode_responses=True)
            logger.info("Connected to Redis at %s", self._redis_url)

    async def publish(self, topic: str, event: BaseEvent) -> None:
        await self._ensure_connected()
        await self._client.publish(topic, json.dumps(event.to_dict()))
        logger.debug("Published %s to topic '%s'", event.event_type.value, topic)

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Subscribe to a Redis channel; a background task feeds the handler."""
        await self._ensure_connected()

        if self._pubsub is None:
            self._pubsub = self._client.pubsub()

        await self._pubsub.subscribe(topic)
        logger.info("Subscribed to topic '%s'", topic)

        task = asyncio.create_task(self._listen_loop(topic, handler))
        self._subscriber_tasks.append(task)

    async def _listen_loop(self, topic: str, handler: EventHandler):
        try:
            async for message in self._pubsub.listen():
                if message["type"] != "message" or message.get("channel") != topic:
                    continue
                try:
                    await handler(json.loads(message["data"]))
                except json.JSONDecodeError:
                    logger.error("Invalid JSON in topic '%s': %s", topic, message["data"])
                except Exception as e:
                    logger.error("Handler error for topic '%s': %s", topic, e)

        except asyncio.CancelledError:
            logger.info("Subscriber for topic '%s' cancelled", topic)
        except Exception as e:
            logger.error("Listen loop error for topic '%s': %s", topic, e)

    async def close(self) -> None:
        """Close Redis connection and cancel all subscriber tasks."""
        for task in self._subscriber_tasks:
            task.cancel()

        if self._subscriber_tasks:
            await asyncio.gather(*self._subscriber_tasks, return_exceptions=True)

        if self._pubsub:
            await self._pubsub.close()

        if self._client:
            await self._client.close()

        logger.info("Redis event bus closed")


class InMemoryEventBus(BaseEventBus):
    """In-process event bus — handlers run inline on publish.

    Events go through the same JSON round-trip as Redis so handlers see
    identical dicts on either backend.
    """

    def __init__(self, history: int = 100):
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        # Most recent events only; older ones fall off
        self.published: deque[tuple[str, dict]] = deque(maxlen=history)

    async def publish(self, topic: str, event: BaseEvent) -> None:
        event_dict = json.loads(json.dumps(event.to_dict()))
        self.published.append((topic, event_dict))
        logger.debug("Published %s to topic '%s'", event.event_type.value, topic)

        for handler in list(self._handlers.get(topic, ())):
            try:
                await handler(event_dict)
            except Exception as e:
                logger.error("Handler error for topic '%s': %s", topic, e)

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        self._handlers[topic].append(handler)
        logger.info("Subscribed to topic '%s'", topic)

    async def close(self) -> None:
        self._handlers.clear()
        logger.info("In-memory event bus closed")


# ── Factory ───────────────────────────────────────────

def create_event_bus(backend: str = "redis", **kwargs) -> BaseEventBus:
    """Create an event bus instance based on config.

    Args:
        backend: "redis" or "memory"
        **kwargs: Backend-specific config (redis_url, history)

    Usage:
        event_bus = create_event_bus("redis", redis_url="redis://localhost:6379")
        event_bus = create_event_bus("memory")
    """
    if backend == "redis":
        redis_url = kwargs.get("redis_url")
        if not redis_url:
            raise ValueError("redis_url required for Redis event bus")
        return RedisEventBus(redis_url)

    elif backend == "memory":
        return InMemoryEventBus(history=kwargs.get("history", 100))

    else:
        raise ValueError(f"Unknown event bus backend: {backend}")
