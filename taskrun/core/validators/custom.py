from __future__ import annotations

from typing import Any

from taskrun.core.validators.base import reject


def validate_custom(value: Any, options: dict[str, Any]) -> None:
    """Call `options['validator'](value, options)`; a falsy return is a failure."""
    validator = options.get('validator')
    if validator is None:
        raise ValueError("custom validator requires a 'validator' callable")
    if not validator(value, options):
        raise reject(options, (), 'validators.custom')
