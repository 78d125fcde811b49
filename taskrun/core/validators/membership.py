"""Inclusion and exclusion validators.

`in` takes any collection; a `range` (or, under `within`, an inclusive
`(min, max)` tuple) is checked as a span instead of by membership.
"""

from __future__ import annotations

from typing import Any

from taskrun.core.validators.base import between, bounds, contains, reject


def _values(options: dict[str, Any]) -> tuple[Any, bool]:
    if 'within' in options:
        values = options['within']
        return values, isinstance(values, (range, tuple))
    values = options.get('in', ())
    return values, isinstance(values, range)


def _listing(values: Any) -> str:
    return ', '.join(repr(v) for v in values)


def validate_inclusion(value: Any, options: dict[str, Any]) -> None:
    values, is_span = _values(options)
    if is_span:
        low, high = bounds(values)
        if not between(low, value, high):
            raise reject(options, ('within', 'in'), 'validators.inclusion.within', min=low, max=high)
    elif not contains(values, value):
        raise reject(options, ('of',), 'validators.inclusion.of', values=_listing(values))


def validate_exclusion(value: Any, options: dict[str, Any]) -> None:
    values, is_span = _values(options)
    if is_span:
        low, high = bounds(values)
        if between(low, value, high):
            raise reject(options, ('within', 'in'), 'validators.exclusion.within', min=low, max=high)
    elif contains(values, value):
        raise reject(options, ('of',), 'validators.exclusion.of', values=_listing(values))
