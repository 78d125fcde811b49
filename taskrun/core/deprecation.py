"""Enforcement of the `deprecate` task setting at instantiation time."""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Any

from taskrun.core.errors import DeprecationError, ErrorCode
from taskrun.core.logging import get_logger

if TYPE_CHECKING:
    from taskrun.core.task import Task

logger = get_logger('task')

NOTICE = 'DEPRECATED: migrate to a replacement or discontinue use'


def _policy(task: 'Task', deprecate: Any) -> Any:
    if deprecate is None or isinstance(deprecate, (bool, str)):
        return deprecate
    return deprecate(task)


def restrict(task: 'Task', deprecate: Any) -> None:
    """Apply `deprecate` to a freshly built task.

    Raises DeprecationError for True / 'raise', logs a warning for 'log'
    and emits a DeprecationWarning for 'warn'. Falsy values do nothing.
    """
    name = type(task).__name__
    match _policy(task, deprecate):
        case policy if not policy:
            return
        case True | 'raise':
            raise DeprecationError(
                message=f'{name} usage prohibited',
                code=ErrorCode.TASK_DEPRECATED,
                help_text=f"migrate away from {name}, or relax its deprecate setting to 'log' or 'warn'",
            )
        case 'log':
            logger.warning(f'{name} {NOTICE}')
        case 'warn':
            warnings.warn(f'[{name}] {NOTICE}', DeprecationWarning, stacklevel=3)
        case other:
            raise ValueError(f'unknown deprecation type {other!r}')
