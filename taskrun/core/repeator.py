# taskrun/core/repeator.py
from __future__ import annotations

import time
from typing import TYPE_CHECKING

from taskrun.core.errors import TaskrunError
from taskrun.core.logging import get_logger

if TYPE_CHECKING:
    from taskrun.core.task import Task

logger = get_logger('repeator')


class Repeator:
    """Retry policy for generic exceptions raised by a task's work.

    The budget, jitter and eligible exception classes come from the task's
    resolved settings; the attempt counter lives in
    `result.metadata['retries']` so it is reported on the final result.
    """

    def __init__(self, task: 'Task') -> None:
        self.task = task
        self.settings = task.settings()

    @property
    def available_retries(self) -> int:
        return self.settings.retries

    @property
    def current_retries(self) -> int:
        return int(self.task.result.metadata.get('retries', 0))

    @property
    def remaining_retries(self) -> int:
        return self.available_retries - self.current_retries

    def is_retriable(self, exc: BaseException) -> bool:
        # the runtime's own errors are programming errors
        if isinstance(exc, TaskrunError):
            return False
        return isinstance(exc, tuple(self.settings.retry_on))

    def should_retry(self, exc: BaseException) -> bool:
        """Authorize one more attempt, counting it and sleeping for the jitter delay."""
        if self.available_retries <= 0 or self.remaining_retries <= 0:
            return False
        if not self.is_retriable(exc):
            return False

        self.task.result.metadata['retries'] = self.current_retries + 1
        logger.warning(
            f'Retrying {type(self.task).__name__} [{self.task.id}] '
            f'attempt={self.current_retries} remaining={self.remaining_retries} '
            f'reason=[{type(exc).__name__}] {exc}'
        )

        delay = self.settings.retry_jitter * self.current_retries
        if delay > 0:
            time.sleep(delay)
        return True
