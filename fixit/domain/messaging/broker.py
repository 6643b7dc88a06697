"""
In-process change notifications for conversation streams.

Each open stream holds a queue per conversation. Writers publish after their
commit and every subscriber is woken up to re-send its snapshot. Queues hold
at most one pending wake-up, so a burst of writes collapses into one
snapshot.
"""

import asyncio
import logging
from collections import defaultdict
from threading import Lock

logger = logging.getLogger(__name__)


class MessageBroker:
    def __init__(self):
        self._subscribers: dict[str, set[tuple[asyncio.AbstractEventLoop, asyncio.Queue]]] = defaultdict(set)
        self._lock = Lock()

    def subscribe(self, conversation_id: str) -> asyncio.Queue:
        """Register a queue on the running event loop"""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        with self._lock:
            self._subscribers[conversation_id].add((loop, queue))
        logger.debug(f"📡 Subscribed to conversation {conversation_id}")
        return queue

    def unsubscribe(self, conversation_id: str, queue: asyncio.Queue) -> None:
        with self._lock:
            subscribers = self._subscribers.get(conversation_id)
            if not subscribers:
                return
            for entry in [s for s in subscribers if s[1] is queue]:
                subscribers.discard(entry)
            if not subscribers:
                del self._subscribers[conversation_id]
        logger.debug(f"📴 Unsubscribed from conversation {conversation_id}")

    def subscriber_count(self, conversation_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(conversation_id, ()))

    def publish(self, conversation_id: str) -> None:
        """Wake every subscriber of the conversation. Safe to call from any thread."""
        with self._lock:
            subscribers = list(self._subscribers.get(conversation_id, ()))

        for loop, queue in subscribers:
            try:
                loop.call_soon_threadsafe(_offer, queue)
            except RuntimeError:
                # Loop already closed: the stream is gone
                self.unsubscribe(conversation_id, queue)


def _offer(queue: asyncio.Queue) -> None:
    try:
        queue.put_nowait(True)
    except asyncio.QueueFull:
        pass


broker = MessageBroker()


def get_message_broker() -> MessageBroker:
    """Dependency returning the process-wide broker"""
    return broker
