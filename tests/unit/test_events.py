"""Unit tests for the event registry."""

from __future__ import annotations

import datetime as dt
from unittest.mock import MagicMock

import pytest

from taskrun.core import events as events_module
from taskrun.core.events import (
    Event,
    EventRegistry,
    default_registry,
    listening,
    publish,
    subscribe,
)

pytestmark = pytest.mark.unit


class TestEvent:
    def test_fields(self) -> None:
        event = Event('task.success', {'task': 'x'})
        assert event.name == 'task.success'
        assert event['task'] == 'x'
        assert event.timestamp.tzinfo is dt.timezone.utc

    def test_to_dict(self) -> None:
        event = Event('task.failed', {'reason': 'boom'})
        data = event.to_dict()
        assert data['name'] == 'task.failed'
        assert data['data'] == {'reason': 'boom'}
        assert data['timestamp'] == event.timestamp


class TestPatterns:
    def test_exact_prefix_and_wildcard(self) -> None:
        registry = EventRegistry()
        seen: dict[str, list[str]] = {'exact': [], 'prefix': [], 'all': []}
        registry.subscribe('task.failed', lambda e: seen['exact'].append(e.name))
        registry.subscribe('task.*', lambda e: seen['prefix'].append(e.name))
        registry.all(lambda e: seen['all'].append(e.name))

        registry.publish('task.failed')
        registry.publish('task.success')
        registry.publish('workflow.started')

        assert seen['exact'] == ['task.failed']
        assert seen['prefix'] == ['task.failed', 'task.success']
        assert seen['all'] == ['task.failed', 'task.success', 'workflow.started']

    def test_none_pattern_means_everything(self) -> None:
        registry = EventRegistry()
        received: list[Event] = []
        registry.subscribe(None, received.append)
        registry.publish('anything', value=1)
        assert [event['value'] for event in received] == [1]

    def test_listening(self) -> None:
        registry = EventRegistry()
        assert not registry.listening('task.success')
        registry.subscribe('task.*', lambda e: None)
        assert registry.listening('task.success')
        assert not registry.listening('chain.sealed')


class TestSubscriptions:
    def test_subscriber_must_be_callable(self) -> None:
        with pytest.raises(TypeError):
            EventRegistry().subscribe('task.*', 'not callable')  # type: ignore[arg-type]

    def test_unsubscribe(self) -> None:
        registry = EventRegistry()
        received: list[Event] = []
        registry.subscribe('task.*', received.append)
        registry.unsubscribe('task.*', received.append)
        registry.unsubscribe('task.*', received.append)
        registry.publish('task.success')
        assert received == []

    def test_clear(self) -> None:
        registry = EventRegistry()
        registry.all(lambda e: None)
        registry.clear()
        assert not registry.listening('task.success')

    def test_publish_returns_the_event(self) -> None:
        event = EventRegistry().publish('task.success', task='t')
        assert isinstance(event, Event)
        assert event.data == {'task': 't'}


class TestFailingSubscribers:
    def test_other_subscribers_still_run(self, monkeypatch: pytest.MonkeyPatch) -> None:
        logger = MagicMock()
        monkeypatch.setattr(events_module, 'logger', logger)

        def broken(event: Event) -> None:
            raise RuntimeError('subscriber down')

        registry = EventRegistry()
        received: list[Event] = []
        registry.all(broken)
        registry.all(received.append)

        registry.publish('task.success')

        assert len(received) == 1
        logger.error.assert_called_once()
        assert 'RuntimeError: subscriber down' in logger.error.call_args[0][0]


class TestDefaultRegistry:
    def test_module_functions_use_the_shared_registry(self) -> None:
        received: list[Event] = []
        subscribe('custom.ping', received.append)
        try:
            assert listening('custom.ping')
            publish('custom.ping', n=1)
            assert [event['n'] for event in received] == [1]
        finally:
            default_registry().unsubscribe('custom.ping', received.append)
        assert not listening('custom.ping')
