# taskrun/core/coercions/registry.py
from __future__ import annotations

from typing import Any, Callable, Dict, Union

from taskrun.core.coercions.numeric import (
    coerce_big_decimal,
    coerce_complex,
    coerce_float,
    coerce_integer,
    coerce_rational,
)
from taskrun.core.coercions.structures import coerce_array, coerce_hash
from taskrun.core.coercions.temporal import coerce_date, coerce_datetime, coerce_time
from taskrun.core.coercions.text import coerce_boolean, coerce_string
from taskrun.core.registry.handlers import HandlerRegistry
from taskrun.core.utils.condition import invoke_handler

# A plain callable `(value, options) -> value`, or the name of a task method
# with the same signature.
CoercionHandler = Union[Callable[[Any, Dict[str, Any]], Any], str]

DEFAULT_COERCIONS: Dict[str, CoercionHandler] = {
    'array': coerce_array,
    'big_decimal': coerce_big_decimal,
    'boolean': coerce_boolean,
    'complex': coerce_complex,
    'date': coerce_date,
    'datetime': coerce_datetime,
    'float': coerce_float,
    'hash': coerce_hash,
    'integer': coerce_integer,
    'rational': coerce_rational,
    'string': coerce_string,
    'time': coerce_time,
}


class CoercionRegistry(HandlerRegistry[CoercionHandler]):
    """Type key -> coercion handler. Handlers raise CoercionError on failure."""

    kind = 'coercion'

    def __init__(self, initial: Dict[str, CoercionHandler] | None = None) -> None:
        super().__init__(DEFAULT_COERCIONS if initial is None else initial)

    def coerce(
        self,
        type_key: str,
        task: Any,
        value: Any,
        options: Dict[str, Any] | None = None,
    ) -> Any:
        """Coerce `value` into `type_key`; raises NotRegistered for unknown keys."""
        handler = self[type_key]
        return invoke_handler(task, handler, value, dict(options or {}))
