from __future__ import annotations

import re
from typing import Any

from taskrun.core.validators.base import reject


def validate_format(value: Any, options: dict[str, Any]) -> None:
    """`with` must match and `without` must not; patterns are str or compiled."""
    text = str(value)
    with_pattern = options.get('with')
    without_pattern = options.get('without')
    if with_pattern is None and without_pattern is None:
        valid = False
    else:
        valid = (with_pattern is None or re.search(with_pattern, text) is not None) and (
            without_pattern is None or re.search(without_pattern, text) is None
        )
    if not valid:
        raise reject(options, (), 'validators.format')
