from __future__ import annotations

from typing import Any

from taskrun.core.validators.base import is_present, reject


def validate_presence(value: Any, options: dict[str, Any]) -> None:
    if not is_present(value):
        raise reject(options, (), 'validators.presence')


def validate_absence(value: Any, options: dict[str, Any]) -> None:
    if is_present(value):
        raise reject(options, (), 'validators.absence')
