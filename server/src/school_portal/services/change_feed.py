"""Realtime change feed for content tables.

Writers publish one ChangeEvent per committed write; consumers subscribe per
table (optionally filtered by a predicate on the changed record) and re-fetch
the list they display. There is no incremental diffing.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """A committed row change on a content table"""

    table: str
    type: ChangeType
    ids: List[str] = field(default_factory=list)
    record: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "type": self.type.value,
            "ids": self.ids,
            "record": self.record,
            "timestamp": self.timestamp.isoformat(),
        }


ChangeCallback = Callable[[ChangeEvent], None]
ChangePredicate = Callable[[ChangeEvent], bool]


def column_equals(column: str, value: Any) -> ChangePredicate:
    """Predicate matching changes whose record has ``column == value``.

    Deletes carry no record, so they always match; consumers re-fetch anyway.
    """

    def _predicate(event: ChangeEvent) -> bool:
        if event.type == ChangeType.DELETE and not event.record:
            return True
        return event.record.get(column) == value

    return _predicate


class Subscription:
    """Handle returned by ChangeFeed.subscribe"""

    def __init__(
        self,
        feed: "ChangeFeed",
        table: str,
        callback: ChangeCallback,
        predicate: Optional[ChangePredicate],
    ):
        self.id = uuid.uuid4().hex
        self.table = table
        self.callback = callback
        self.predicate = predicate
        self._feed = feed

    def matches(self, event: ChangeEvent) -> bool:
        return self.predicate is None or self.predicate(event)

    def unsubscribe(self) -> None:
        self._feed._remove(self)


class ChangeFeed:
    """In-process pub/sub of table changes"""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)

    def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        predicate: Optional[ChangePredicate] = None,
    ) -> Subscription:
        subscription = Subscription(self, table, callback, predicate)
        with self._lock:
            self._subscriptions[table].append(subscription)
        logger.debug(f"Subscribed {subscription.id} to {table}")
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.table, [])
            if subscription in subs:
                subs.remove(subscription)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(table, []))

    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every matching subscriber.

        Subscriber failures are logged and never reach the writer.
        """
        with self._lock:
            targets = list(self._subscriptions.get(event.table, []))

        for subscription in targets:
            try:
                if subscription.matches(event):
                    subscription.callback(event)
            except Exception as e:
                logger.error(
                    f"Change subscriber {subscription.id} on {event.table} failed: {e}"
                )


class LiveQuery:
    """Keeps a fetched list in sync with a table by re-fetching on change.

    ``fetch`` returns the full filtered list; a failing fetch leaves an empty
    list (no data rather than unknown).
    """

    def __init__(
        self,
        feed: ChangeFeed,
        table: str,
        fetch: Callable[[], List[Any]],
        predicate: Optional[ChangePredicate] = None,
        on_refresh: Optional[Callable[[List[Any]], None]] = None,
    ):
        self.feed = feed
        self.table = table
        self.fetch = fetch
        self.predicate = predicate
        self.on_refresh = on_refresh
        self.items: List[Any] = []
        self.refresh_count = 0
        self._subscription: Optional[Subscription] = None

    def start(self) -> List[Any]:
        self.refresh()
        if self._subscription is None:
            self._subscription = self.feed.subscribe(
                self.table, lambda _event: self.refresh(), self.predicate
            )
        return self.items

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def refresh(self) -> List[Any]:
        try:
            self.items = list(self.fetch())
        except Exception as e:
            logger.error(f"Live query on {self.table} failed to fetch: {e}")
            self.items = []
        self.refresh_count += 1
        if self.on_refresh is not None:
            self.on_refresh(self.items)
        return self.items


def to_sse(payload: Any) -> str:
    """Format a JSON-serializable payload as a Server-Sent Event"""
    return f"data: {json.dumps(payload, default=str)}\n\n"


# Global change feed instance
change_feed = ChangeFeed()
