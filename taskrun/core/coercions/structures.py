"""Container coercions: array (list) and hash (dict)."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from taskrun.core.errors import CoercionError
from taskrun.core.locale import translate


def _fail(type_key: str) -> CoercionError:
    return CoercionError(translate('coercions.into_a', type=translate(f'types.{type_key}')))


def coerce_array(value: Any, options: dict[str, Any]) -> list[Any]:
    """Wrap scalars, unpack other iterables, parse JSON arrays; None becomes []."""
    match value:
        case None:
            return []
        case list():
            return value
        case str() if value.lstrip().startswith('['):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                raise _fail('array') from None
            return parsed if isinstance(parsed, list) else [parsed]
        case str() | bytes() | Mapping():
            return [value]
        case tuple() | set() | frozenset():
            return list(value)
        case _:
            return [value]


def coerce_hash(value: Any, options: dict[str, Any]) -> dict[Any, Any]:
    """Accept mappings, pair lists, flat key/value lists and JSON objects."""
    match value:
        case Mapping():
            return dict(value)
        case str() if value.lstrip().startswith('{'):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                raise _fail('hash') from None
            if not isinstance(parsed, dict):
                raise _fail('hash')
            return parsed
        case list() | tuple():
            try:
                if all(isinstance(item, (list, tuple)) and len(item) == 2 for item in value):
                    return {key: item for key, item in value}
                if len(value) % 2 == 0:
                    return dict(zip(value[::2], value[1::2]))
            except TypeError:
                # unhashable keys
                raise _fail('hash') from None
            raise _fail('hash')
        case _:
            raise _fail('hash')
