# taskrun/core/models/config.py
from __future__ import annotations

import logging
import os
from typing import Annotated, Any, Callable, Literal, Optional, Self, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from taskrun.core.errors import (
    ConfigurationError,
    ErrorCode,
    ValidationReport,
    raise_collected,
)
from taskrun.core.logging import set_default_level
from taskrun.core.types.status import HALTING_STATUSES, ResultStatus

ExceptionHandler = Callable[[Any, BaseException], None]

# True or 'raise' prohibits use; 'log' and 'warn' only report it. A callable
# receives the task instance and returns one of those (or a falsy value).
Deprecation = Union[bool, Literal['raise', 'log', 'warn'], Callable[[Any], Any], None]


def _as_tuple(value: Any) -> Any:
    """Accept a single item where a sequence is expected."""
    if value is None or isinstance(value, tuple):
        return value
    if isinstance(value, (list, set, frozenset)):
        return tuple(value)
    return (value,)


def _check_retry_on(report: ValidationReport, retry_on: tuple[Any, ...] | None) -> None:
    for entry in retry_on or ():
        if isinstance(entry, type) and issubclass(entry, BaseException):
            continue
        report.add(
            ConfigurationError(
                message='retry_on entries must be exception classes',
                code=ErrorCode.CONFIG_INVALID_RETRY,
                notes=[f'got {entry!r}'],
                help_text='use exception classes, e.g. retry_on=(TimeoutError, ConnectionError)',
            )
        )


def _check_breakpoints(
    report: ValidationReport, breakpoints: tuple[ResultStatus, ...] | None
) -> None:
    for status in breakpoints or ():
        if status in HALTING_STATUSES:
            continue
        report.add(
            ConfigurationError(
                message=f"'{status.value}' cannot be a breakpoint",
                code=ErrorCode.CONFIG_INVALID_BREAKPOINT,
                notes=[f'got breakpoints={[s.value for s in breakpoints or ()]}'],
                help_text="breakpoints may only contain 'skipped' and 'failed'",
            )
        )


class RuntimeConfig(BaseModel):
    """Process-wide defaults every task class inherits.

    Fields:
        seal_results: Seal task, result, context and chain on top-level finalization.
            Turn off only in tests that need to patch finished objects.
        breakpoints: Fault statuses that halt execution and propagate in strict mode.
        retries: Retry budget for generic exceptions raised by `work()`.
        retry_jitter: Seconds multiplied by the attempt number to delay each retry.
        retry_on: Exception classes eligible for retry (isinstance match).
        backtrace: Log the cause's traceback when a task fails.
        exception_handler: Called as `handler(task, exc)` after a generic exception
            was converted into a failed result.
        log_level: Level applied to every taskrun logger.
        deprecate: Deprecation policy applied when a task is instantiated.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra='forbid', frozen=True)

    seal_results: bool = True
    breakpoints: tuple[ResultStatus, ...] = (ResultStatus.FAILED,)
    retries: Annotated[int, Field(ge=0)] = 0
    retry_jitter: Annotated[float, Field(ge=0)] = 0.0
    retry_on: tuple[Any, ...] = (Exception,)
    backtrace: bool = False
    exception_handler: Optional[ExceptionHandler] = None
    log_level: int = logging.INFO
    deprecate: Deprecation = None

    @field_validator('breakpoints', 'retry_on', mode='before')
    @classmethod
    def _coerce_sequences(cls, value: Any) -> Any:
        return _as_tuple(value)

    @model_validator(mode='after')
    def validate_runtime(self) -> Self:
        report = ValidationReport('config')
        _check_retry_on(report, self.retry_on)
        _check_breakpoints(report, self.breakpoints)
        raise_collected(report)
        return self

    @classmethod
    def from_env(cls) -> RuntimeConfig:
        """Build a config from TASKRUN_* environment variables (unset keeps defaults)."""
        values: dict[str, Any] = {}
        env_map = {
            'TASKRUN_SEAL_RESULTS': 'seal_results',
            'TASKRUN_RETRIES': 'retries',
            'TASKRUN_RETRY_JITTER': 'retry_jitter',
            'TASKRUN_BACKTRACE': 'backtrace',
        }
        for env_name, field_name in env_map.items():
            raw = os.environ.get(env_name)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()

        level = os.environ.get('TASKRUN_LOG_LEVEL', '').strip().upper()
        if level:
            values['log_level'] = logging.getLevelName(level) if not level.isdigit() else int(level)

        return cls.model_validate(values)


class TaskSettings(BaseModel):
    """Per-task-class overrides of RuntimeConfig.

    Unset (None) fields fall through to the runtime configuration active at
    execution time, so `configure()` after class definition still applies.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra='forbid', frozen=True)

    seal_results: Optional[bool] = None
    breakpoints: Optional[tuple[ResultStatus, ...]] = None
    retries: Optional[Annotated[int, Field(ge=0)]] = None
    retry_jitter: Optional[Annotated[float, Field(ge=0)]] = None
    retry_on: Optional[tuple[Any, ...]] = None
    backtrace: Optional[bool] = None
    exception_handler: Optional[ExceptionHandler] = None
    deprecate: Deprecation = None

    @field_validator('breakpoints', 'retry_on', mode='before')
    @classmethod
    def _coerce_sequences(cls, value: Any) -> Any:
        return _as_tuple(value)

    @model_validator(mode='after')
    def validate_overrides(self) -> Self:
        report = ValidationReport('task settings')
        _check_retry_on(report, self.retry_on)
        _check_breakpoints(report, self.breakpoints)
        raise_collected(report)
        return self

    def overrides(self) -> dict[str, Any]:
        return {name: value for name, value in self if value is not None}

    def merge(self, **overrides: Any) -> TaskSettings:
        """Return new settings with `overrides` layered over these."""
        return TaskSettings.model_validate({**self.overrides(), **overrides})

    def resolve(self, config: RuntimeConfig) -> RuntimeConfig:
        return config.model_copy(update=self.overrides())


_configuration: RuntimeConfig | None = None


def get_configuration() -> RuntimeConfig:
    global _configuration
    if _configuration is None:
        _configuration = RuntimeConfig.from_env()
        set_default_level(_configuration.log_level)
    return _configuration


def configure(**overrides: Any) -> RuntimeConfig:
    """Replace the runtime configuration with `overrides` applied on the current one."""
    global _configuration
    _configuration = RuntimeConfig.model_validate({**dict(get_configuration()), **overrides})
    set_default_level(_configuration.log_level)
    return _configuration


def reset_configuration() -> RuntimeConfig:
    """Discard overrides and rebuild the configuration from the environment."""
    global _configuration
    _configuration = None
    return get_configuration()
