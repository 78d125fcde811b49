from taskrun.core.validators.registry import (
    DEFAULT_VALIDATORS,
    ValidatorHandler,
    ValidatorRegistry,
    normalize_options,
)

__all__ = [
    'DEFAULT_VALIDATORS',
    'ValidatorHandler',
    'ValidatorRegistry',
    'normalize_options',
]
