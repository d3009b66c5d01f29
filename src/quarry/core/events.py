"""Synchronous event registry for query and ORM failures.

Every ``Database`` owns an :class:`EventRegistry` (or receives one from the
caller) so observers can react to failures without the executor or the ORM
knowing about them.

Usage::

    from quarry.core.events import EventRegistry, ON_QUERY_EXEC_FAIL

    events = EventRegistry()
    events.on(ON_QUERY_EXEC_FAIL).listen(lambda query: alert(query.error))
    db = Database(credentials, events=events)

Events
------
query_exec_fail   a statement failed and ``throw_on_fail`` was set
orm_query_fail    an ORM save/insert/update/delete missed its row count
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from quarry.core.errors import SchemaError
from quarry.core.logging import get_logger

__all__ = [
    "ON_ORM_QUERY_FAIL",
    "ON_QUERY_EXEC_FAIL",
    "Event",
    "EventHandler",
    "EventRegistry",
]

ON_QUERY_EXEC_FAIL = "query_exec_fail"
ON_ORM_QUERY_FAIL = "orm_query_fail"

EventHandler = Callable[..., Any]

logger = get_logger(__name__)


@dataclass
class Subscription:
    """Internal subscription record."""

    id: str
    handler: EventHandler


@dataclass
class Event:
    """A named event and its listeners, in subscription order."""

    name: str
    _subscriptions: dict[str, Subscription] = field(default_factory=dict, repr=False)

    def listen(self, handler: EventHandler) -> str:
        """Add a listener; returns its subscription id."""
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        self._subscriptions[sub_id] = Subscription(id=sub_id, handler=handler)
        return sub_id

    def unlisten(self, subscription_id: str) -> None:
        self._subscriptions.pop(subscription_id, None)

    def trigger(self, *args: Any) -> int:
        """Call every listener with ``args``.

        Listeners are best effort: an exception is logged and the remaining
        listeners still run. Returns the number of listeners that completed.
        """
        completed = 0
        for sub in list(self._subscriptions.values()):
            try:
                sub.handler(*args)
                completed += 1
            except Exception as e:
                logger.warning(
                    "event_handler_error",
                    subscription_id=sub.id,
                    event_name=self.name,
                    error=str(e),
                )
        return completed

    @property
    def listener_count(self) -> int:
        return len(self._subscriptions)


class EventRegistry:
    """Registry of the known events of one database."""

    EVENTS = (ON_QUERY_EXEC_FAIL, ON_ORM_QUERY_FAIL)

    def __init__(self) -> None:
        self._events = {name: Event(name) for name in self.EVENTS}

    def on(self, name: str) -> Event:
        """Return the event called ``name``.

        Raises:
            SchemaError: If the event is not one of :attr:`EVENTS`.
        """
        if name not in self._events:
            raise SchemaError(f'Unknown event "{name}"')
        return self._events[name]

    def on_query_exec_fail(self) -> Event:
        return self._events[ON_QUERY_EXEC_FAIL]

    def on_orm_query_fail(self) -> Event:
        return self._events[ON_ORM_QUERY_FAIL]
