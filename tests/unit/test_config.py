"""Unit tests for RuntimeConfig, TaskSettings and the process-wide configuration."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from taskrun.core.errors import ConfigurationError, ErrorCode, MultipleValidationErrors
from taskrun.core.models.config import (
    RuntimeConfig,
    TaskSettings,
    configure,
    get_configuration,
    reset_configuration,
)
from taskrun.core.types.status import ResultStatus

pytestmark = pytest.mark.unit


class TestRuntimeConfig:
    def test_defaults(self) -> None:
        config = RuntimeConfig()
        assert config.seal_results is True
        assert config.breakpoints == (ResultStatus.FAILED,)
        assert config.retries == 0
        assert config.retry_jitter == 0.0
        assert config.retry_on == (Exception,)
        assert config.backtrace is False
        assert config.exception_handler is None
        assert config.deprecate is None

    @pytest.mark.parametrize('policy', [True, False, 'raise', 'log', 'warn'])
    def test_deprecation_modes(self, policy: object) -> None:
        assert RuntimeConfig(deprecate=policy).deprecate == policy

    def test_unknown_deprecation_mode_is_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            RuntimeConfig(deprecate='shout')

    def test_single_values_become_tuples(self) -> None:
        config = RuntimeConfig(breakpoints='skipped', retry_on=TimeoutError)
        assert config.breakpoints == (ResultStatus.SKIPPED,)
        assert config.retry_on == (TimeoutError,)

    def test_lists_become_tuples(self) -> None:
        config = RuntimeConfig(breakpoints=['skipped', 'failed'])
        assert config.breakpoints == (ResultStatus.SKIPPED, ResultStatus.FAILED)

    def test_success_is_not_a_breakpoint(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            RuntimeConfig(breakpoints=('success',))
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_BREAKPOINT

    def test_retry_on_requires_exception_classes(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            RuntimeConfig(retry_on=('TimeoutError',))
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_RETRY

    def test_several_problems_are_reported_together(self) -> None:
        with pytest.raises(MultipleValidationErrors) as exc_info:
            RuntimeConfig(retry_on=(42,), breakpoints=('success',))
        codes = {error.code for error in exc_info.value.report.errors}
        assert codes == {ErrorCode.CONFIG_INVALID_RETRY, ErrorCode.CONFIG_INVALID_BREAKPOINT}

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            RuntimeConfig(retries=-1)

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            RuntimeConfig(retires=2)

    def test_is_frozen(self) -> None:
        config = RuntimeConfig()
        with pytest.raises(PydanticValidationError):
            config.retries = 3  # type: ignore[misc]


class TestFromEnv:
    def test_reads_taskrun_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('TASKRUN_RETRIES', '3')
        monkeypatch.setenv('TASKRUN_RETRY_JITTER', '0.25')
        monkeypatch.setenv('TASKRUN_SEAL_RESULTS', 'false')
        monkeypatch.setenv('TASKRUN_BACKTRACE', '1')
        monkeypatch.setenv('TASKRUN_LOG_LEVEL', 'debug')

        config = RuntimeConfig.from_env()
        assert config.retries == 3
        assert config.retry_jitter == 0.25
        assert config.seal_results is False
        assert config.backtrace is True
        assert config.log_level == logging.DEBUG

    def test_blank_values_keep_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('TASKRUN_RETRIES', '  ')
        assert RuntimeConfig.from_env().retries == 0

    def test_numeric_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('TASKRUN_LOG_LEVEL', '40')
        assert RuntimeConfig.from_env().log_level == logging.ERROR


class TestTaskSettings:
    def test_unset_fields_fall_through(self) -> None:
        resolved = TaskSettings(retries=2).resolve(RuntimeConfig(retry_jitter=0.5))
        assert resolved.retries == 2
        assert resolved.retry_jitter == 0.5
        assert resolved.breakpoints == (ResultStatus.FAILED,)

    def test_empty_breakpoints_override(self) -> None:
        resolved = TaskSettings(breakpoints=()).resolve(RuntimeConfig())
        assert resolved.breakpoints == ()

    def test_merge_layers_overrides(self) -> None:
        base = TaskSettings(retries=2, backtrace=True)
        merged = base.merge(retries=5)
        assert merged.retries == 5
        assert merged.backtrace is True
        assert base.retries == 2

    def test_overrides_skip_unset(self) -> None:
        assert TaskSettings(retries=1).overrides() == {'retries': 1}

    def test_invalid_override(self) -> None:
        with pytest.raises(ConfigurationError):
            TaskSettings(breakpoints=('success',))


class TestGlobalConfiguration:
    def test_configure_and_reset(self) -> None:
        configure(retries=4)
        assert get_configuration().retries == 4

        configure(backtrace=True)
        assert get_configuration().retries == 4
        assert get_configuration().backtrace is True

        reset_configuration()
        assert get_configuration().retries == 0

    def test_configure_applies_log_level(self) -> None:
        from taskrun.core import logging as taskrun_logging

        original = taskrun_logging._default_level
        try:
            configure(log_level=logging.ERROR)
            assert taskrun_logging._default_level == logging.ERROR
        finally:
            taskrun_logging.set_default_level(original)
