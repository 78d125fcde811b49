"""Helpers shared by the built-in validators."""

from __future__ import annotations

import operator
from typing import Any, Callable, Optional

from taskrun.core.errors import ValidationError
from taskrun.core.locale import translate


def bounds(value: Any) -> tuple[Any, Any]:
    """Inclusive (min, max) from a 2-tuple/list or a `range`."""
    if isinstance(value, range):
        return value.start, value.stop - 1
    low, high = value
    return low, high


def compare(op: Callable[[Any, Any], bool], left: Any, right: Any) -> bool:
    # values that cannot be ordered never satisfy a bound
    try:
        return op(left, right)
    except TypeError:
        return False


def between(low: Any, measured: Any, high: Any) -> bool:
    return compare(operator.le, low, measured) and compare(operator.le, measured, high)


def contains(values: Any, value: Any) -> bool:
    try:
        return value in values
    except TypeError:
        # unhashable value against a set or dict
        return False


def is_present(value: Any) -> bool:
    """Blank strings, empty containers and None are absent."""
    if isinstance(value, str):
        return bool(value.strip())
    if value is None:
        return False
    try:
        return len(value) > 0
    except TypeError:
        return True


def reject(options: dict[str, Any], keys: tuple[str, ...], locale_key: str, **params: Any) -> ValidationError:
    """Build the failure for `locale_key`, honoring `<key>_message` / `message` overrides."""
    override: Optional[str] = None
    for key in keys:
        override = options.get(f'{key}_message')
        if override:
            break
    override = override or options.get('message')
    if override:
        return ValidationError(override.format(**params))
    return ValidationError(translate(locale_key, **params))
