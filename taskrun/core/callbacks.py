# taskrun/core/callbacks.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable

from taskrun.core.errors import ErrorCode, RegistryError
from taskrun.core.types.status import ResultState, ResultStatus
from taskrun.core.utils.condition import evaluate, invoke

if TYPE_CHECKING:
    from taskrun.core.task import Task

TYPES: tuple[str, ...] = (
    'before_validation',
    'after_validation',
    'before_execution',
    'after_execution',
    'on_executed',
    'on_good',
    'on_bad',
    *(f'on_{status.value}' for status in ResultStatus),
    *(f'on_{state.value}' for state in ResultState),
)


@dataclass
class UnknownCallbackError(RegistryError):
    """Raised when registering or running a callback type that does not exist."""

    pass


def _unknown(callback_type: str) -> UnknownCallbackError:
    return UnknownCallbackError(
        message=f"unknown callback '{callback_type}'",
        code=ErrorCode.CALLBACK_UNKNOWN_TYPE,
        notes=[f"known callbacks: {', '.join(TYPES)}"],
    )


@dataclass(frozen=True)
class CallbackEntry:
    callables: tuple[Any, ...]
    if_: Any = None
    unless: Any = None


@dataclass
class CallbackRegistry:
    """Callback type -> ordered entries. Each entry is gated by its own if_/unless."""

    entries: dict[str, list[CallbackEntry]] = field(default_factory=dict)

    def copy(self) -> CallbackRegistry:
        return CallbackRegistry({key: list(value) for key, value in self.entries.items()})

    def register(
        self,
        callback_type: str,
        *callables: Any,
        if_: Any = None,
        unless: Any = None,
    ) -> CallbackRegistry:
        """Register functions of `(task)` or names of task methods under `callback_type`."""
        if callback_type not in TYPES:
            raise _unknown(callback_type)
        if not callables:
            raise ValueError(f'no callables given for {callback_type}')
        self.entries.setdefault(callback_type, []).append(
            CallbackEntry(tuple(callables), if_=if_, unless=unless)
        )
        return self

    def registered(self, callback_type: str) -> Iterable[CallbackEntry]:
        return tuple(self.entries.get(callback_type, ()))

    def call(self, callback_type: str, task: 'Task') -> None:
        if callback_type not in TYPES:
            raise _unknown(callback_type)
        for entry in self.entries.get(callback_type, ()):
            if not evaluate(task, entry.if_, entry.unless):
                continue
            for callback in entry.callables:
                invoke(task, callback)
