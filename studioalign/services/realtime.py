# /studioalign/services/realtime.py

"""
In-process change feed for messaging.

Writers publish a `ChangeEvent` after their transaction commits; readers hold
a `Subscription` on a topic and receive a callback for every event published
to it. Callbacks carry no row data: a subscriber's job on notification is to
refetch from the database, so the feed never has to be the source of truth.

Topics:
    conversations:{user_id}       - a conversation the user takes part in changed
    messages:{conversation_id}    - a message was added to the conversation
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


def conversations_topic(user_id: str) -> str:
    return f"conversations:{user_id}"


def messages_topic(conversation_id: str) -> str:
    return f"messages:{conversation_id}"


@dataclass(frozen=True)
class ChangeEvent:
    topic: str
    kind: str
    payload: Dict = field(default_factory=dict)


@dataclass
class Subscription:
    id: int
    topic: str
    callback: Callable[[ChangeEvent], None]
    active: bool = True


class ChangeFeed:
    """Thread-safe topic registry. Safe to publish from any worker thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, Dict[int, Subscription]] = {}
        self._ids = itertools.count(1)

    def subscribe(self, topic: str, callback: Callable[[ChangeEvent], None]) -> Subscription:
        with self._lock:
            subscription = Subscription(id=next(self._ids), topic=topic, callback=callback)
            self._subscriptions.setdefault(topic, {})[subscription.id] = subscription
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscription.active = False
            topic_subs = self._subscriptions.get(subscription.topic)
            if topic_subs is None:
                return
            topic_subs.pop(subscription.id, None)
            if not topic_subs:
                del self._subscriptions[subscription.topic]

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(topic, {}))

    def publish(self, event: ChangeEvent) -> int:
        """
        Delivers `event` to every current subscriber of its topic and returns
        how many were called. A failing callback is logged and skipped.
        """
        with self._lock:
            targets: List[Subscription] = list(self._subscriptions.get(event.topic, {}).values())
        delivered = 0
        for subscription in targets:
            if not subscription.active:
                continue
            try:
                subscription.callback(event)
                delivered += 1
            except Exception:
                logger.exception("Change feed subscriber %s on %s failed", subscription.id, event.topic)
        return delivered


# Process-wide feed shared by the REST handlers and the WebSocket sessions.
change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    """FastAPI dependency returning the process-wide feed."""
    return change_feed
