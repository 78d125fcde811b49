# taskrun/core/workflow.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from taskrun.core.errors import ErrorCode, task_definition_error
from taskrun.core.task import Task
from taskrun.core.types.status import HALTING_STATUSES, ResultStatus
from taskrun.core.utils.condition import evaluate


@dataclass(frozen=True)
class Group:
    """Task classes run in order when the group's condition holds."""

    tasks: tuple[type[Task], ...]
    if_: Any = None
    unless: Any = None
    breakpoints: Optional[tuple[ResultStatus, ...]] = None


class Workflow(Task):
    """
    A task whose work runs groups of other tasks.

        class Onboard(Workflow):
            pass

        Onboard.process(CreateUser, SendWelcome)
        Onboard.process(NotifySales, if_=lambda wf: wf.context.plan == 'pro', breakpoints=())

    Children share the workflow's context and chain. When a child ends with
    a status in the group's breakpoints (or, when the group sets none, the
    workflow's own), the workflow adopts that outcome and stops.
    """

    groups: ClassVar[tuple[Group, ...]] = ()

    @classmethod
    def process(
        cls,
        *task_classes: type[Task],
        if_: Any = None,
        unless: Any = None,
        breakpoints: Any = None,
    ) -> Group:
        if not task_classes:
            raise task_definition_error(
                f'{cls.__name__}.process() needs at least one task class',
                code=ErrorCode.WORKFLOW_INVALID_GROUP,
                obj=cls,
            )
        invalid = [t for t in task_classes if not (isinstance(t, type) and issubclass(t, Task))]
        if invalid:
            raise task_definition_error(
                f'{cls.__name__}.process() only accepts Task subclasses',
                code=ErrorCode.WORKFLOW_INVALID_GROUP,
                obj=cls,
                notes=[f'got {item!r}' for item in invalid],
            )

        group = Group(
            tasks=tuple(task_classes),
            if_=if_,
            unless=unless,
            breakpoints=_group_breakpoints(cls, breakpoints),
        )
        cls.groups = (*cls.groups, group)
        return group

    def work(self) -> None:
        default_breakpoints = self.settings().breakpoints
        for group in self.groups:
            if not evaluate(self, group.if_, group.unless):
                continue
            breakpoints = default_breakpoints if group.breakpoints is None else group.breakpoints
            for task_class in group.tasks:
                result = task_class.execute(self)
                if result.status in breakpoints:
                    self.throw(result)


def _group_breakpoints(cls: type[Workflow], breakpoints: Any) -> Optional[tuple[ResultStatus, ...]]:
    if breakpoints is None:
        return None
    if isinstance(breakpoints, (str, ResultStatus)):
        breakpoints = (breakpoints,)
    try:
        statuses = tuple(ResultStatus(status) for status in breakpoints)
    except ValueError as e:
        raise task_definition_error(
            f'invalid group breakpoints for {cls.__name__}',
            code=ErrorCode.WORKFLOW_INVALID_GROUP,
            obj=cls,
            notes=[str(e)],
        ) from e
    invalid = [status.value for status in statuses if status not in HALTING_STATUSES]
    if invalid:
        raise task_definition_error(
            f'invalid group breakpoints for {cls.__name__}',
            code=ErrorCode.WORKFLOW_INVALID_GROUP,
            obj=cls,
            notes=[f"'{value}' cannot be a breakpoint" for value in invalid],
            help_text="breakpoints may only contain 'skipped' and 'failed'",
        )
    return statuses
