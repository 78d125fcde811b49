# core/types/status.py
"""
Result lifecycle enums.
This module should not import from other application modules.
"""

from enum import Enum


class ResultState(str, Enum):
    """Position of a result in the execution lifecycle"""

    INITIALIZED = 'initialized'  # Created with the task, work not started.

    EXECUTING = 'executing'  # The task's own work is running.

    COMPLETE = 'complete'  # Work returned normally (or was skipped while running).

    INTERRUPTED = 'interrupted'  # Halted by a failure or never reached the work.

    @property
    def is_terminal(self) -> bool:
        """Whether this state represents a final state (no further transitions)."""
        return self in RESULT_TERMINAL_STATES


class ResultStatus(str, Enum):
    """Disposition of a result"""

    SUCCESS = 'success'
    SKIPPED = 'skipped'
    FAILED = 'failed'

    @property
    def is_good(self) -> bool:
        return self is not ResultStatus.FAILED

    @property
    def is_bad(self) -> bool:
        return self is ResultStatus.FAILED


RESULT_TERMINAL_STATES: frozenset[ResultState] = frozenset({
    ResultState.COMPLETE,
    ResultState.INTERRUPTED,
})

# Statuses a fault can carry; only these may be configured as breakpoints.
HALTING_STATUSES: frozenset[ResultStatus] = frozenset({
    ResultStatus.SKIPPED,
    ResultStatus.FAILED,
})
