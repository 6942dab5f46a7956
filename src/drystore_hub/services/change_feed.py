"""Row-change fan-out for realtime clients.

Services publish an event after committing a row change; every subscriber
whose table filter matches, and who may see the row, gets its own copy on a
bounded asyncio queue. Clients treat events as a hint to refetch, so
duplicate, dropped or out-of-order delivery is harmless. When enabled, events
are mirrored to Redis pub/sub so several API processes can share one feed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import redis
from fastapi.encoders import jsonable_encoder
from sqlalchemy import inspect

from drystore_hub.core.settings import settings
from drystore_hub.db.time import utcnow

logger = logging.getLogger(__name__)

# Columns that never leave the process, whoever is listening.
SECRET_COLUMNS = frozenset({"token", "password_hash"})


class ChangeType(str, Enum):
    """Kinds of row changes carried by the feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """Single row change."""

    table: str
    event: ChangeType
    record: dict[str, Any]
    commit_timestamp: datetime = field(default_factory=utcnow)

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "table": self.table,
            "event": self.event.value,
            "record": jsonable_encoder(
                {key: value for key, value in self.record.items() if key not in SECRET_COLUMNS}
            ),
            "commit_timestamp": self.commit_timestamp.isoformat(),
        }


@dataclass
class Viewer:
    """Who is listening: enough to decide which rows they may see.

    ``channel_ids`` starts as the user's memberships and follows the
    ``channel_members`` events published for that user.
    """

    user_id: str
    is_admin: bool = False
    channel_ids: set[str] = field(default_factory=set)

    def observe(self, table: str, event: ChangeType, record: dict[str, Any]) -> None:
        if table == "channel_members" and record.get("user_id") == self.user_id:
            if event is ChangeType.DELETE:
                self.channel_ids.discard(record.get("channel_id"))
            else:
                self.channel_ids.add(record.get("channel_id"))
        elif table == "channels" and event is ChangeType.INSERT and record.get("created_by") == self.user_id:
            self.channel_ids.add(record.get("id"))
        elif table == "user_roles" and record.get("user_id") == self.user_id and "is_admin" in record:
            self.is_admin = bool(record["is_admin"])


def _own_row(record: dict[str, Any], viewer: Viewer) -> bool:
    return record.get("user_id") == viewer.user_id


def _admins_only(record: dict[str, Any], viewer: Viewer) -> bool:
    return viewer.is_admin


def _everyone(record: dict[str, Any], viewer: Viewer) -> bool:
    return True


VISIBILITY: dict[str, Callable[[dict[str, Any], Viewer], bool]] = {
    "messages": lambda record, viewer: record.get("channel_id") in viewer.channel_ids,
    "direct_messages": lambda record, viewer: viewer.user_id
    in (record.get("sender_user_id"), record.get("recipient_user_id")),
    "mention_reads": _own_row,
    "announcement_reads": _own_row,
    "document_reads": _own_row,
    "invitations": _admins_only,
    "user_roles": _admins_only,
    "channels": lambda record, viewer: (
        not record.get("is_private") or record.get("id") in viewer.channel_ids or viewer.is_admin
    ),
    "channel_members": lambda record, viewer: (
        _own_row(record, viewer) or record.get("channel_id") in viewer.channel_ids or viewer.is_admin
    ),
    "documents": lambda record, viewer: (
        record.get("is_public", False) or record.get("created_by") == viewer.user_id or viewer.is_admin
    ),
    "announcements": _everyone,
    "profiles": _everyone,
}


def visible_to(viewer: Viewer, table: str, record: dict[str, Any]) -> bool:
    """Return whether ``viewer`` may see ``record``; unknown tables are admin-only."""
    return VISIBILITY.get(table, _admins_only)(record, viewer)


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`ChangeFeed.subscribe`.

    Without a ``viewer`` the subscription is trusted and sees every row.
    """

    tables: frozenset[str]
    queue: asyncio.Queue[ChangeEvent]
    loop: asyncio.AbstractEventLoop
    viewer: Viewer | None = None
    dropped: int = 0

    def wants(self, table: str) -> bool:
        return not self.tables or table in self.tables

    def accepts(self, change: ChangeEvent) -> bool:
        if self.viewer is not None:
            self.viewer.observe(change.table, change.event, change.record)
        if not self.wants(change.table):
            return False
        return self.viewer is None or visible_to(self.viewer, change.table, change.record)

    def offer(self, change: ChangeEvent) -> None:
        """Enqueue ``change`` on the subscriber's loop, dropping it when the queue is full."""
        try:
            self.queue.put_nowait(change)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Subscriber queue full; dropped %s change on %s (%d dropped so far)",
                change.event.value,
                change.table,
                self.dropped,
            )


def row_to_dict(obj: Any) -> dict[str, Any]:
    """Return the column values of an ORM instance."""
    mapper = inspect(obj).mapper
    return {column.key: getattr(obj, column.key) for column in mapper.column_attrs}


class ChangeFeed:
    """In-process publish/subscribe hub for row changes."""

    def __init__(self, redis_client: redis.Redis | None = None, queue_size: int | None = None) -> None:
        self._subscriptions: set[Subscription] = set()
        self._lock = threading.Lock()
        self._redis = redis_client
        self._queue_size = settings.change_feed_queue_size if queue_size is None else queue_size

    def subscribe(self, tables: Iterable[str] = (), viewer: Viewer | None = None) -> Subscription:
        """Register a subscriber; must be called from a running event loop."""
        subscription = Subscription(
            tables=frozenset(tables),
            queue=asyncio.Queue(maxsize=self._queue_size),
            loop=asyncio.get_running_loop(),
            viewer=viewer,
        )
        with self._lock:
            self._subscriptions.add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Stop delivering events to ``subscription``."""
        with self._lock:
            self._subscriptions.discard(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, table: str, event: ChangeType | str, record: Any) -> ChangeEvent:
        """Fan a change out to every subscriber that wants and may see it.

        ``record`` may be an ORM instance or a plain mapping.
        """
        values = record if isinstance(record, dict) else row_to_dict(record)
        change = ChangeEvent(
            table=table,
            event=ChangeType(event),
            record={key: value for key, value in values.items() if key not in SECRET_COLUMNS},
        )

        with self._lock:
            targets = [sub for sub in self._subscriptions if sub.accepts(change)]

        for subscription in targets:
            try:
                subscription.loop.call_soon_threadsafe(subscription.offer, change)
            except RuntimeError:
                # Subscriber's loop is gone; drop it.
                logger.debug("Dropping subscriber with closed loop for table %s", table)
                self.unsubscribe(subscription)

        if self._redis is not None:
            try:
                self._redis.publish(f"changes:{table}", json.dumps(change.to_payload()))
            except redis.RedisError as exc:
                logger.warning("Failed to mirror %s change on %s to Redis: %s", change.event, table, exc)
        return change


_feed: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """Return the process-wide change feed."""
    global _feed
    if _feed is None:
        client = redis.from_url(settings.redis_url) if settings.change_feed_redis_enabled else None
        _feed = ChangeFeed(redis_client=client)
    return _feed


def publish_change(table: str, event: ChangeType | str, record: Any) -> ChangeEvent:
    """Publish on the process-wide feed."""
    return get_change_feed().publish(table, event, record)
