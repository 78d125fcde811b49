"""Numeric coercions: integer, float, big_decimal, rational, complex."""

from __future__ import annotations

from decimal import Context as DecimalContext, Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

from taskrun.core.errors import CoercionError
from taskrun.core.locale import translate

DEFAULT_PRECISION = 14


def _fail(type_key: str, article: str = 'into_a') -> CoercionError:
    return CoercionError(translate(f'coercions.{article}', type=translate(f'types.{type_key}')))


def coerce_integer(value: Any, options: dict[str, Any]) -> int:
    # bool is an int subclass; True -> 1 is never what a caller means
    if isinstance(value, bool):
        raise _fail('integer', 'into_an')
    try:
        if isinstance(value, str):
            return int(value.strip())
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise _fail('integer', 'into_an') from None


def coerce_float(value: Any, options: dict[str, Any]) -> float:
    if isinstance(value, bool):
        raise _fail('float')
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        raise _fail('float') from None


def coerce_big_decimal(value: Any, options: dict[str, Any]) -> Decimal:
    precision = options.get('precision', DEFAULT_PRECISION)
    if isinstance(value, (bool, complex)) or value is None:
        raise _fail('big_decimal')
    try:
        raw = value.strip() if isinstance(value, str) else value
        if isinstance(raw, float):
            raw = repr(raw)
        return DecimalContext(prec=precision).create_decimal(raw)
    except (TypeError, ValueError, InvalidOperation):
        raise _fail('big_decimal') from None


def coerce_rational(value: Any, options: dict[str, Any]) -> Fraction:
    if isinstance(value, bool) or value is None:
        raise _fail('rational')
    try:
        return Fraction(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, ZeroDivisionError, OverflowError):
        raise _fail('rational') from None


def coerce_complex(value: Any, options: dict[str, Any]) -> complex:
    if isinstance(value, bool) or value is None:
        raise _fail('complex')
    try:
        if isinstance(value, str):
            return complex(value.strip().replace(' ', ''))
        return complex(value)
    except (TypeError, ValueError):
        raise _fail('complex') from None
