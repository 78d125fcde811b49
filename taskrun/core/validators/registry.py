# taskrun/core/validators/registry.py
from __future__ import annotations

from typing import Any, Callable, Dict, Union

from taskrun.core.registry.handlers import HandlerRegistry
from taskrun.core.utils.condition import evaluate, invoke_handler
from taskrun.core.validators.bounds import validate_length, validate_numeric
from taskrun.core.validators.custom import validate_custom
from taskrun.core.validators.format import validate_format
from taskrun.core.validators.membership import validate_exclusion, validate_inclusion
from taskrun.core.validators.presence import validate_absence, validate_presence

# A plain callable `(value, options) -> None`, or the name of a task method
# with the same signature.
ValidatorHandler = Union[Callable[[Any, Dict[str, Any]], None], str]

DEFAULT_VALIDATORS: Dict[str, ValidatorHandler] = {
    'absence': validate_absence,
    'custom': validate_custom,
    'exclusion': validate_exclusion,
    'format': validate_format,
    'inclusion': validate_inclusion,
    'length': validate_length,
    'numeric': validate_numeric,
    'presence': validate_presence,
}

# Keys consumed by the registry itself; handlers never see them.
GATE_KEYS = ('if', 'unless', 'allow_nil')


def normalize_options(options: Any) -> Dict[str, Any]:
    """`True` enables a validator with defaults; a dict carries its constraints."""
    match options:
        case dict():
            return dict(options)
        case True:
            return {}
        case _:
            raise TypeError(f'validator options must be True or a dict, got {options!r}')


class ValidatorRegistry(HandlerRegistry[ValidatorHandler]):
    """Type key -> validator handler. Handlers raise ValidationError on failure."""

    kind = 'validator'

    def __init__(self, initial: Dict[str, ValidatorHandler] | None = None) -> None:
        super().__init__(DEFAULT_VALIDATORS if initial is None else initial)

    def validate(self, type_key: str, task: Any, value: Any, options: Any = True) -> None:
        """Run one validator unless its `if` / `unless` gate rejects it."""
        handler = self[type_key]
        opts = normalize_options(options)
        if not evaluate(task, opts.get('if'), opts.get('unless'), value):
            return
        for key in GATE_KEYS:
            opts.pop(key, None)
        invoke_handler(task, handler, value, opts)
