"""String and boolean coercions."""

from __future__ import annotations

import re
from typing import Any

from taskrun.core.errors import CoercionError
from taskrun.core.locale import translate

FALSEY = re.compile(r'^(false|f|no|n|0)$', re.IGNORECASE)
TRUTHY = re.compile(r'^(true|t|yes|y|1)$', re.IGNORECASE)


def coerce_string(value: Any, options: dict[str, Any]) -> str:
    if isinstance(value, bytes):
        try:
            return value.decode(options.get('encoding', 'utf-8'))
        except (UnicodeDecodeError, LookupError):
            raise CoercionError(translate('coercions.into_a', type=translate('types.string'))) from None
    return str(value)


def coerce_boolean(value: Any, options: dict[str, Any]) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip()
    if FALSEY.match(text):
        return False
    if TRUTHY.match(text):
        return True
    raise CoercionError(translate('coercions.into_a', type=translate('types.boolean')))
