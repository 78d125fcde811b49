"""
Wildcard publish/subscribe for lifecycle events.

Patterns: '*' (everything), an exact event name, or 'prefix*'.
Publication is synchronous and best-effort: a failing subscriber is
logged and the remaining subscribers still run.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from taskrun.core.logging import get_logger

logger = get_logger('events')

Subscriber = Callable[['Event'], Any]


@dataclass(frozen=True)
class Event:
    name: str
    data: Mapping[str, Any] = field(default_factory=dict)
    timestamp: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def to_dict(self) -> dict[str, Any]:
        return {'name': self.name, 'data': dict(self.data), 'timestamp': self.timestamp}


def _matches(pattern: str, name: str) -> bool:
    if pattern == '*' or pattern == name:
        return True
    return pattern.endswith('*') and name.startswith(pattern[:-1])


class EventRegistry:
    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = {}

    def subscribe(self, pattern: str | None, subscriber: Subscriber) -> EventRegistry:
        if not callable(subscriber):
            raise TypeError('subscriber must be callable')
        self._subscribers.setdefault(pattern or '*', []).append(subscriber)
        return self

    def all(self, subscriber: Subscriber) -> EventRegistry:
        return self.subscribe('*', subscriber)

    def unsubscribe(self, pattern: str, subscriber: Subscriber) -> EventRegistry:
        subscribers = self._subscribers.get(pattern, [])
        if subscriber in subscribers:
            subscribers.remove(subscriber)
        return self

    def _matching(self, name: str) -> list[Subscriber]:
        return [
            subscriber
            for pattern, subscribers in self._subscribers.items()
            if _matches(pattern, name)
            for subscriber in subscribers
        ]

    def listening(self, name: str) -> bool:
        return bool(self._matching(name))

    def publish(self, name: str, **data: Any) -> Event:
        event = Event(name, data)
        for subscriber in self._matching(name):
            try:
                subscriber(event)
            except Exception as e:
                logger.error(f'Event subscriber failed for {name}: {type(e).__name__}: {e}')
                logger.debug('Subscriber traceback', exc_info=True)
        return event

    def clear(self) -> EventRegistry:
        self._subscribers.clear()
        return self


_default_registry = EventRegistry()


def default_registry() -> EventRegistry:
    return _default_registry


def subscribe(pattern: str | None, subscriber: Subscriber) -> EventRegistry:
    return _default_registry.subscribe(pattern, subscriber)


def publish(name: str, **data: Any) -> Event:
    return _default_registry.publish(name, **data)


def listening(name: str) -> bool:
    return _default_registry.listening(name)
