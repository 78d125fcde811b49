"""Root test configuration for taskrun tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load test environment before any test module imports
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env.test')

from taskrun.core.models.config import reset_configuration  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line('markers', 'unit: Unit tests (single component)')
    config.addinivalue_line(
        'markers', 'integration: Integration tests (full task runs through the worker)'
    )
    config.addinivalue_line('markers', 'slow: Long-running tests')


@pytest.fixture(autouse=True)
def _reset_configuration() -> Iterator[None]:
    """Every test starts from the environment-derived runtime configuration."""
    reset_configuration()
    yield
    reset_configuration()
