from taskrun.core.coercions.registry import (
    DEFAULT_COERCIONS,
    CoercionHandler,
    CoercionRegistry,
)

__all__ = [
    'DEFAULT_COERCIONS',
    'CoercionHandler',
    'CoercionRegistry',
]
