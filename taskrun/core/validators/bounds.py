"""Numeric and length validators.

Both accept the same constraint keys, checked in this order and only the
first that applies is enforced:

    within / in          inclusive (min, max) tuple or range
    not_within / not_in  forbidden inclusive (min, max)
    min + max            same as within
    min / minimum        lower bound
    max / maximum        upper bound
    is, is_not           exact value
"""

from __future__ import annotations

import operator
from typing import Any

from taskrun.core.validators.base import between, bounds, compare, reject

ALIASES = {'minimum': 'min', 'maximum': 'max'}


def _normalize(options: dict[str, Any]) -> dict[str, Any]:
    return {ALIASES.get(key, key): value for key, value in options.items()}


def _check(kind: str, measured: Any, options: dict[str, Any]) -> None:
    opts = _normalize(options)
    prefix = f'validators.{kind}'
    match opts:
        case {'within': span} | {'in': span}:
            low, high = bounds(span)
            if not between(low, measured, high):
                raise reject(opts, ('within', 'in'), f'{prefix}.within', min=low, max=high)
        case {'not_within': span} | {'not_in': span}:
            low, high = bounds(span)
            if between(low, measured, high):
                raise reject(opts, ('not_within', 'not_in'), f'{prefix}.not_within', min=low, max=high)
        case {'min': low, 'max': high}:
            if not between(low, measured, high):
                raise reject(opts, ('within',), f'{prefix}.within', min=low, max=high)
        case {'min': low}:
            if not compare(operator.ge, measured, low):
                raise reject(opts, ('min',), f'{prefix}.min', min=low)
        case {'max': high}:
            if not compare(operator.le, measured, high):
                raise reject(opts, ('max',), f'{prefix}.max', max=high)
        case {'is': exact}:
            if measured != exact:
                raise reject(opts, ('is',), f'{prefix}.is', **{'is': exact})
        case {'is_not': exact}:
            if measured == exact:
                raise reject(opts, ('is_not',), f'{prefix}.is_not', is_not=exact)
        case _:
            raise ValueError(f'no known {kind} validator options given')


def validate_numeric(value: Any, options: dict[str, Any]) -> None:
    _check('numeric', value, options)


def validate_length(value: Any, options: dict[str, Any]) -> None:
    try:
        measured = len(value)
    except TypeError:
        measured = None
    _check('length', measured, options)
