"""
In-process message channels for live session updates.

Each subscription owns a bounded asyncio.Queue bound to the loop it was
created on. Publishing is synchronous and thread-safe: messages are handed
to the subscriber's loop with call_soon_threadsafe. When a queue is full the
oldest message is dropped so a slow consumer never blocks a publisher.
"""
import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional
from config import settings

logger = logging.getLogger(__name__)

APPROVAL_REQUESTS_TOPIC = "approval_requests"


def user_topic(user_id: str) -> str:
    return f"user:{user_id}"


class Subscription:
    def __init__(self, topic: str, loop: asyncio.AbstractEventLoop, maxsize: int):
        self.topic = topic
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def _deliver(self, message: Dict[str, Any]) -> None:
        # Runs on the subscriber's loop
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
        self.queue.put_nowait(message)

    async def get(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        if timeout is None:
            return await self.queue.get()
        return await asyncio.wait_for(self.queue.get(), timeout=timeout)


class EventBus:
    """
    Topic based publish/subscribe between request handlers and live sessions.
    """

    def __init__(self, queue_size: int = settings.EVENT_BUS_QUEUE_SIZE):
        self._queue_size = queue_size
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str) -> Subscription:
        """
        Subscribe to a topic from inside a running event loop.

        Args:
            topic: The channel name, e.g. ``user:<user_id>``
        """
        subscription = Subscription(topic, asyncio.get_running_loop(), self._queue_size)
        with self._lock:
            self._subscriptions.setdefault(topic, []).append(subscription)
        logger.debug(f"Subscribed to {topic}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscriptions = self._subscriptions.get(subscription.topic, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)
            if not subscriptions:
                self._subscriptions.pop(subscription.topic, None)
        logger.debug(f"Unsubscribed from {subscription.topic}")

    def publish(self, topic: str, message: Dict[str, Any]) -> int:
        """
        Publish a message to every subscriber of a topic.

        Returns:
            The number of subscriptions the message was handed to
        """
        with self._lock:
            subscriptions = list(self._subscriptions.get(topic, []))

        delivered = 0
        for subscription in subscriptions:
            if subscription.loop.is_closed():
                self.unsubscribe(subscription)
                continue
            try:
                subscription.loop.call_soon_threadsafe(subscription._deliver, dict(message))
                delivered += 1
            except RuntimeError:
                # Loop closed between the check and the call
                self.unsubscribe(subscription)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(topic, []))


# Global event bus instance
event_bus = EventBus()
