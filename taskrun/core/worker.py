# taskrun/core/worker.py
"""
Lifecycle orchestration for one task invocation.

    middlewares(
        before_validation -> resolve attributes -> after_validation
        -> before_execution -> executing -> work() -> after_execution
        -> executed -> on_<state> / on_executed / on_<status> / on_good|on_bad
    )
    -> log -> seal (top-level only) -> publish events

Faults and exceptions raised anywhere inside the guarded region are
classified here; retries re-enter at before_execution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from taskrun.core.errors import UndefinedMethodError
from taskrun.core.faults import Fault
from taskrun.core.logging import get_logger
from taskrun.core.repeator import Repeator

if TYPE_CHECKING:
    from taskrun.core.result import Result
    from taskrun.core.task import Task

logger = get_logger('worker')


class Worker:
    def __init__(self, task: 'Task', strict: bool = False) -> None:
        self.task = task
        self.strict = strict
        self.settings = task.settings()
        self._pending: Optional[BaseException] = None

    @classmethod
    def execute(cls, task: 'Task', strict: bool = False) -> 'Result':
        """Run `task` to completion.

        Safe mode records every fault on the returned result. Strict mode
        records it too, then re-raises it once the result is finalized.
        A missing `work()` is re-raised in both modes.
        """
        return cls(task, strict=strict).run()

    def run(self) -> 'Result':
        try:
            type(self.task).middlewares.call(self.task, self._lifecycle)
        except UndefinedMethodError:
            raise
        except Exception:
            # raised by a post-execution callback or a middleware
            self._finalize()
            raise
        self._finalize()
        if self._pending is not None:
            raise self._pending
        return self.task.result

    # --- lifecycle ---

    def _lifecycle(self, task: 'Task') -> 'Result':
        self._guarded()
        self._post_execution()
        return task.result

    def _guarded(self) -> None:
        task = self.task
        result = task.result
        callbacks = type(task).callbacks

        while True:
            try:
                if not result.is_executing():
                    callbacks.call('before_validation', task)
                    type(task).attribute_registry.define_and_verify(task)
                    if task.errors:
                        result.fail(str(task.errors), messages=task.errors.to_dict())
                    callbacks.call('after_validation', task)

                callbacks.call('before_execution', task)
                result.mark_executing()
                task.work()
                callbacks.call('after_execution', task)
                return
            except UndefinedMethodError:
                raise
            except Fault as e:
                self._handle_fault(e)
                return
            except Exception as e:
                if result.is_executing() and Repeator(task).should_retry(e):
                    continue
                self._handle_exception(e)
                return

    def _handle_fault(self, fault: Fault) -> None:
        result = self.task.result
        if fault.status in self.settings.breakpoints:
            if result.is_success():
                result.throw(fault.result, halt=False, cause=fault)
            if self.strict:
                self._pending = fault
        elif fault.result is not result and result.is_success():
            result.fail(fault.result.reason, halt=False, cause=fault)

    def _handle_exception(self, exc: Exception) -> None:
        result = self.task.result
        if result.is_success():
            result.fail(f'[{type(exc).__name__}] {exc}', halt=False, cause=exc)
        if self.settings.exception_handler is not None:
            self.settings.exception_handler(self.task, exc)
        if self.strict:
            self._pending = exc

    def _post_execution(self) -> None:
        task = self.task
        result = task.result
        callbacks = type(task).callbacks

        result.mark_executed()
        callbacks.call(f'on_{result.state.value}', task)
        if result.is_executed():
            callbacks.call('on_executed', task)
        callbacks.call(f'on_{result.status.value}', task)
        callbacks.call('on_good' if result.is_good() else 'on_bad', task)

    # --- finalization ---

    def _finalize(self) -> None:
        task = self.task
        result = task.result

        logger.info(str(result), extra={'status': result.status.value})
        if self.settings.backtrace and result.cause is not None:
            cause = result.cause
            logger.error(
                f'{type(task).__name__} [{task.id}] failed with {type(cause).__name__}',
                exc_info=(type(cause), cause, cause.__traceback__),
            )

        if self.settings.seal_results and result.index == 0:
            task.context.seal()
            task.chain.seal()

        events = type(task).events
        events.publish(f'task.{result.status.value}', task=task, result=result)
        events.publish('task.executed', task=task, result=result)
