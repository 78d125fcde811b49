"""Date/time coercions. A `format` option switches string parsing to strptime."""

from __future__ import annotations

import datetime as dt
from typing import Any

from taskrun.core.errors import CoercionError
from taskrun.core.locale import translate


def _fail(type_key: str) -> CoercionError:
    return CoercionError(translate('coercions.into_a', type=translate(f'types.{type_key}')))


def _parse(value: str, options: dict[str, Any]) -> dt.datetime:
    fmt = options.get('format')
    if fmt:
        return dt.datetime.strptime(value, fmt)
    return dt.datetime.fromisoformat(value.strip())


def coerce_date(value: Any, options: dict[str, Any]) -> dt.date:
    match value:
        case dt.datetime():
            return value.date()
        case dt.date():
            return value
        case str():
            try:
                if options.get('format'):
                    return _parse(value, options).date()
                return dt.date.fromisoformat(value.strip())
            except ValueError:
                raise _fail('date') from None
        case _:
            raise _fail('date')


def coerce_datetime(value: Any, options: dict[str, Any]) -> dt.datetime:
    match value:
        case dt.datetime():
            return value
        case dt.date():
            return dt.datetime(value.year, value.month, value.day)
        case int() | float() if not isinstance(value, bool):
            try:
                return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
            except (OverflowError, OSError, ValueError):
                raise _fail('datetime') from None
        case str():
            try:
                return _parse(value, options)
            except ValueError:
                raise _fail('datetime') from None
        case _:
            raise _fail('datetime')


def coerce_time(value: Any, options: dict[str, Any]) -> dt.time:
    match value:
        case dt.datetime():
            return value.timetz()
        case dt.time():
            return value
        case str():
            try:
                if options.get('format'):
                    return _parse(value, options).time()
                return dt.time.fromisoformat(value.strip())
            except ValueError:
                raise _fail('time') from None
        case _:
            raise _fail('time')
