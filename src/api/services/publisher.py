"""In-process fan-out of debate events to viewer connections."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

from pydantic import BaseModel

from .debate_events import normalize_debate_event

logger = logging.getLogger(__name__)


class SubscriberSendFailedError(Exception):
    """Raised by a subscriber that can no longer accept events."""


class Subscriber(Protocol):
    def deliver(self, payload: Dict[str, Any]) -> None:
        ...


class QueueSubscriber:
    """Bounded FIFO per connection; the gateway drains it to the socket."""

    def __init__(self, maxsize: int = 256):
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def deliver(self, payload: Dict[str, Any]) -> None:
        if self.closed:
            raise SubscriberSendFailedError("subscriber closed")
        try:
            self.queue.put_nowait(payload)
        except asyncio.QueueFull as e:
            self.closed = True
            raise SubscriberSendFailedError("subscriber queue full") from e

    def close(self) -> None:
        self.closed = True


class Publisher:
    """Delivers each event to every open subscriber.

    A failing subscriber is dropped; the broadcast to the others continues.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, subscriber: Subscriber, subscriber_id: Optional[str] = None) -> str:
        subscriber_id = subscriber_id or str(uuid.uuid4())
        self._subscribers[subscriber_id] = subscriber
        logger.info(f"Subscriber {subscriber_id[:8]} connected. Total: {len(self._subscribers)}")
        return subscriber_id

    def unsubscribe(self, subscriber_id: str) -> None:
        if self._subscribers.pop(subscriber_id, None) is not None:
            logger.info(f"Subscriber {subscriber_id[:8]} removed. Total: {len(self._subscribers)}")

    def send_to(self, subscriber_id: str, event: Union[BaseModel, Mapping[str, Any]]) -> bool:
        """Deliver to a single subscriber; returns False if it was dropped."""
        subscriber = self._subscribers.get(subscriber_id)
        if subscriber is None:
            return False
        payload = normalize_debate_event(event)
        return self._deliver(subscriber_id, subscriber, payload)

    def publish(self, event: Union[BaseModel, Mapping[str, Any]]) -> int:
        """Fan out one event; returns the number of successful deliveries."""
        payload = normalize_debate_event(event)
        delivered = 0
        # Copy: failed subscribers are removed while iterating
        for subscriber_id, subscriber in list(self._subscribers.items()):
            if self._deliver(subscriber_id, subscriber, payload):
                delivered += 1
        return delivered

    def _deliver(self, subscriber_id: str, subscriber: Subscriber, payload: Dict[str, Any]) -> bool:
        try:
            subscriber.deliver(payload)
            return True
        except SubscriberSendFailedError as e:
            logger.warning(f"Dropping subscriber {subscriber_id[:8]}: {e}")
        except Exception as e:
            logger.error(f"Dropping subscriber {subscriber_id[:8]} after unexpected error: {e}", exc_info=True)
        self.unsubscribe(subscriber_id)
        return False

    def subscriber_ids(self) -> List[str]:
        return list(self._subscribers)
