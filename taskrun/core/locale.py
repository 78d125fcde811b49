"""Message lookup for user-facing resolution and fault messages.

`translate()` resolves dotted keys against the built-in English table.
Applications wanting another locale (gettext, babel, a remote service)
install their own lookup with `set_translator()`; the lookup must return
a string or None, None falling back to the English table.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

Translator = Callable[..., Optional[str]]

EN: dict[str, str] = {
    'attributes.required': 'is required',
    'attributes.transform_failed': 'could not be transformed: {error}',
    'attributes.undefined_source': 'undefined source {method}',
    'attributes.undefined_method': 'undefined method {method}',
    'coercions.into_a': 'could not coerce into a {type}',
    'coercions.into_an': 'could not coerce into an {type}',
    'coercions.into_any': 'could not coerce into one of: {types}',
    'coercions.raised': '{type} coercion raised {error}',
    'coercions.unknown': 'unknown coercion {type}',
    'faults.unspecified': 'no reason given',
    'types.array': 'array',
    'types.big_decimal': 'big decimal',
    'types.boolean': 'boolean',
    'types.complex': 'complex',
    'types.date': 'date',
    'types.datetime': 'datetime',
    'types.float': 'float',
    'types.hash': 'hash',
    'types.integer': 'integer',
    'types.rational': 'rational',
    'types.string': 'string',
    'types.time': 'time',
    'validators.absence': 'must be empty',
    'validators.custom': 'is not valid',
    'validators.exclusion.of': 'must not be one of: {values}',
    'validators.exclusion.within': 'must not be within {min} and {max}',
    'validators.format': 'is an invalid format',
    'validators.inclusion.of': 'must be one of: {values}',
    'validators.inclusion.within': 'must be within {min} and {max}',
    'validators.length.is': 'length must be {is}',
    'validators.length.is_not': 'length must not be {is_not}',
    'validators.length.max': 'length must be at most {max}',
    'validators.length.min': 'length must be at least {min}',
    'validators.length.not_within': 'length must not be within {min} and {max}',
    'validators.length.within': 'length must be within {min} and {max}',
    'validators.numeric.is': 'must be {is}',
    'validators.numeric.is_not': 'must not be {is_not}',
    'validators.numeric.max': 'must be less than or equal to {max}',
    'validators.numeric.min': 'must be greater than or equal to {min}',
    'validators.numeric.not_within': 'must not be within {min} and {max}',
    'validators.numeric.within': 'must be within {min} and {max}',
    'validators.presence': 'cannot be empty',
    'validators.raised': '{validator} validator raised {error}',
}

_translator: Optional[Translator] = None


def set_translator(translator: Optional[Translator]) -> None:
    """Install an external lookup `translator(key, **params)`; None restores the default."""
    global _translator
    _translator = translator


def translate(key: str, **params: Any) -> str:
    """Resolve `key` to a message, interpolating `params`.

    A missing key never raises; it yields `Translation missing: <key>`.
    """
    if _translator is not None:
        message = _translator(key, **params)
        if message is not None:
            return message

    template = EN.get(key)
    if template is None:
        return f'Translation missing: {key}'
    return template.format(**params)


t = translate
