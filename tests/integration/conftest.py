"""Integration test fixtures for full task runs."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from taskrun.core.events import Event, default_registry


@pytest.fixture
def published() -> Iterator[list[Event]]:
    """Every event published on the shared registry while the test runs."""
    events: list[Event] = []
    registry = default_registry()
    registry.all(events.append)
    yield events
    registry.unsubscribe('*', events.append)
