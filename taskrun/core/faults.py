"""Result-carrying exceptions used to halt a task.

A fault is raised when a task is skipped or failed with halting enabled.
The worker tells it apart from generic exceptions by type: a fault
already carries a classified outcome, a generic exception still has to
be converted into one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from taskrun.core.locale import translate
from taskrun.core.types.status import ResultStatus

if TYPE_CHECKING:
    from taskrun.core.chain import Chain
    from taskrun.core.context import Context
    from taskrun.core.result import Result
    from taskrun.core.task import Task


class Fault(Exception):
    """Base class for halting faults; `result` holds the halted outcome."""

    def __init__(self, result: 'Result') -> None:
        self.result = result
        super().__init__(result.reason or translate('faults.unspecified'))

    @property
    def task(self) -> 'Task':
        return self.result.task

    @property
    def context(self) -> 'Context':
        return self.result.context

    @property
    def chain(self) -> 'Chain':
        return self.result.chain

    @property
    def status(self) -> ResultStatus:
        return self.result.status

    def raised_by(self, *task_classes: type[Any]) -> bool:
        """Whether the halted result belongs to one of `task_classes`."""
        return isinstance(self.result.task, task_classes)

    @staticmethod
    def build(result: 'Result') -> Fault:
        """Instantiate the fault subclass matching the result's status."""
        match result.status:
            case ResultStatus.SKIPPED:
                return Skipped(result)
            case ResultStatus.FAILED:
                return Failed(result)
            case _:
                raise ValueError(f'cannot build a fault from a {result.status.value} result')


class Skipped(Fault):
    """Raised when a task halts with a skipped result."""


class Failed(Fault):
    """Raised when a task halts with a failed result."""
