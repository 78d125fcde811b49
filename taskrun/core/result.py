# taskrun/core/result.py
from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from taskrun.core.errors import ErrorCode, FrozenError, TransitionError
from taskrun.core.faults import Fault
from taskrun.core.locale import translate
from taskrun.core.types.status import ResultState, ResultStatus

if TYPE_CHECKING:
    from taskrun.core.chain import Chain
    from taskrun.core.context import Context
    from taskrun.core.task import Task


class Result:
    """
    Outcome record for one task invocation.

    `state` moves forward only: initialized -> executing -> complete | interrupted.
    `status` starts as success and may change once, to skipped or failed.
    A failed result always carries a non-empty `metadata['reason']`.

    Supports structural pattern matching on (state, status):

        match result:
            case Result(state=ResultState.COMPLETE, status=ResultStatus.SUCCESS):
                ...
    """

    __match_args__ = ('state', 'status')
    __slots__ = ('task', '_state', '_status', '_metadata', '_sealed')

    def __init__(self, task: 'Task') -> None:
        self.task = task
        self._state = ResultState.INITIALIZED
        self._status = ResultStatus.SUCCESS
        self._metadata: dict[str, Any] = {}
        self._sealed = False

    # --- accessors ---

    @property
    def state(self) -> ResultState:
        return self._state

    @property
    def status(self) -> ResultStatus:
        return self._status

    @property
    def metadata(self) -> Mapping[str, Any]:
        """Open metadata mapping; read-only once the result is sealed."""
        if self._sealed:
            return MappingProxyType(self._metadata)
        return self._metadata

    @property
    def reason(self) -> Optional[str]:
        return self._metadata.get('reason')

    @property
    def cause(self) -> Optional[BaseException]:
        return self._metadata.get('cause')

    @property
    def context(self) -> 'Context':
        return self.task.context

    @property
    def chain(self) -> 'Chain':
        return self.task.chain

    @property
    def index(self) -> int:
        return self.chain.index(self)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        self._sealed = True

    def _ensure_mutable(self) -> None:
        if self._sealed:
            raise FrozenError(
                message=f'cannot modify sealed result of {type(self.task).__name__}',
                code=ErrorCode.RESULT_SEALED,
                help_text='results are sealed once the top-level task finishes;\n'
                'disable with configure(seal_results=False) in tests',
            )

    # --- state predicates ---

    def is_initialized(self) -> bool:
        return self._state is ResultState.INITIALIZED

    def is_executing(self) -> bool:
        return self._state is ResultState.EXECUTING

    def is_complete(self) -> bool:
        return self._state is ResultState.COMPLETE

    def is_interrupted(self) -> bool:
        return self._state is ResultState.INTERRUPTED

    def is_executed(self) -> bool:
        return self._state.is_terminal

    # --- status predicates ---

    def is_success(self) -> bool:
        return self._status is ResultStatus.SUCCESS

    def is_skipped(self) -> bool:
        return self._status is ResultStatus.SKIPPED

    def is_failed(self) -> bool:
        return self._status is ResultStatus.FAILED

    def is_good(self) -> bool:
        return self._status.is_good

    def is_bad(self) -> bool:
        return self._status.is_bad

    # --- state transitions ---

    def _transition_error(self, target: ResultState) -> TransitionError:
        return TransitionError(
            message=f'cannot transition to {target.value} from {self._state.value}',
            code=ErrorCode.RESULT_INVALID_TRANSITION,
        )

    def mark_executing(self) -> None:
        if self.is_executing():
            return
        self._ensure_mutable()
        if not self.is_initialized():
            raise self._transition_error(ResultState.EXECUTING)
        self._state = ResultState.EXECUTING

    def mark_complete(self) -> None:
        if self.is_complete():
            return
        self._ensure_mutable()
        if not self.is_executing():
            raise self._transition_error(ResultState.COMPLETE)
        self._state = ResultState.COMPLETE

    def mark_interrupted(self) -> None:
        if self.is_interrupted():
            return
        self._ensure_mutable()
        if self.is_complete():
            raise self._transition_error(ResultState.INTERRUPTED)
        self._state = ResultState.INTERRUPTED

    def mark_executed(self) -> None:
        """Move to the terminal state matching the current status.

        Good outcomes of work that was running complete; everything else,
        including work that never started, is interrupted.
        """
        if self.is_executed():
            return
        if self.is_good() and self.is_executing():
            self.mark_complete()
        else:
            self.mark_interrupted()

    # --- status transitions ---

    def _change_status(
        self,
        target: ResultStatus,
        reason: Optional[str],
        halt: bool,
        metadata: dict[str, Any],
    ) -> None:
        if self._status is target:
            return
        self._ensure_mutable()
        if not self.is_success():
            raise TransitionError(
                message=f'cannot transition to {target.value} from {self._status.value}',
                code=ErrorCode.RESULT_INVALID_TRANSITION,
            )

        if reason is None and target is ResultStatus.FAILED:
            reason = translate('faults.unspecified')

        self._status = target
        self._metadata.update(metadata)
        if reason is not None:
            self._metadata['reason'] = reason

        if halt:
            self.halt()

    def skip(self, reason: Optional[str] = None, *, halt: bool = True, **metadata: Any) -> None:
        """Mark the result skipped; raises Skipped unless `halt=False`."""
        self._change_status(ResultStatus.SKIPPED, reason, halt, metadata)

    def fail(self, reason: Optional[str] = None, *, halt: bool = True, **metadata: Any) -> None:
        """Mark the result failed; raises Failed unless `halt=False`."""
        self._change_status(ResultStatus.FAILED, reason or None, halt, metadata)

    def halt(self) -> None:
        """Raise the fault matching a non-success status."""
        if self.is_success():
            return
        raise Fault.build(self)

    def throw(self, result: Result, *, halt: bool = True, **local_metadata: Any) -> None:
        """Adopt another result's skipped/failed outcome, merging its metadata."""
        if not isinstance(result, Result):
            raise TypeError(f'must be a Result, got {type(result).__name__}')

        if result is self:
            if halt:
                self.halt()
            return

        metadata = {**result._metadata, **local_metadata}
        reason = metadata.pop('reason', None)
        match result.status:
            case ResultStatus.SKIPPED:
                self.skip(reason, halt=halt, **metadata)
            case ResultStatus.FAILED:
                self.fail(reason, halt=halt, **metadata)
            case _:
                return

    # --- failure tracing across the chain ---

    def caused_failure(self) -> Optional[Result]:
        """The innermost failed result in the chain (the original failure)."""
        if not self.is_failed():
            return None
        return next((r for r in reversed(self.chain.results) if r.is_failed()), None)

    def is_caused_failure(self) -> bool:
        return self.is_failed() and self.caused_failure() is self

    def threw_failure(self) -> Optional[Result]:
        """The failed result this one adopted its failure from."""
        if not self.is_failed():
            return None
        failed = [r for r in self.chain.results if r.is_failed()]
        index = self.index
        return next((r for r in failed if r.index > index), failed[-1] if failed else None)

    def is_threw_failure(self) -> bool:
        return self.is_failed() and self.threw_failure() is self

    def is_thrown_failure(self) -> bool:
        return self.is_failed() and not self.is_caused_failure()

    @property
    def outcome(self) -> str:
        if self.is_initialized() or self.is_thrown_failure():
            return self._state.value
        return self._status.value

    # --- handlers ---

    def handle(self, outcome: str, callback: Callable[[Result], Any]) -> Result:
        """Call `callback(self)` when `outcome` (a state, status, 'executed', 'good' or 'bad') holds."""
        predicate = getattr(self, f'is_{outcome}', None)
        if predicate is None:
            raise ValueError(f'unknown outcome {outcome!r}')
        if predicate():
            callback(self)
        return self

    # --- presentation ---

    def to_dict(self) -> dict[str, Any]:
        metadata = dict(self._metadata)
        cause = metadata.get('cause')
        if cause is not None:
            metadata['cause'] = f'[{type(cause).__name__}] {cause}'
        return {
            'task': type(self.task).__name__,
            'id': self.task.id,
            'chain_id': self.chain.id,
            'index': self.index,
            'state': self._state.value,
            'status': self._status.value,
            'outcome': self.outcome,
            'metadata': metadata,
        }

    def __str__(self) -> str:
        return ' '.join(f'{key}={value}' for key, value in self.to_dict().items())

    def __repr__(self) -> str:
        return (
            f'<Result {type(self.task).__name__} state={self._state.value} '
            f'status={self._status.value}>'
        )
