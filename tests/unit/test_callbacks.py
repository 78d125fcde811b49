"""Unit tests for the callback registry."""

from __future__ import annotations

import pytest

from taskrun.core.callbacks import TYPES, CallbackRegistry, UnknownCallbackError
from taskrun.core.errors import ErrorCode
from taskrun.core.task import Task

pytestmark = pytest.mark.unit


class Audited(Task):
    def work(self) -> None:
        pass

    def record(self) -> None:
        self.context.setdefault('log', []).append('record')

    def is_muted(self) -> bool:
        return bool(self.context.muted)


def _log(task: Task) -> list[str]:
    return task.context.setdefault('log', [])


class TestTypes:
    def test_includes_lifecycle_status_and_state_hooks(self) -> None:
        for name in (
            'before_validation',
            'after_execution',
            'on_success',
            'on_failed',
            'on_interrupted',
            'on_complete',
            'on_good',
            'on_bad',
            'on_executed',
        ):
            assert name in TYPES

    def test_unknown_type_on_register(self) -> None:
        with pytest.raises(UnknownCallbackError) as exc_info:
            CallbackRegistry().register('on_maybe', lambda task: None)
        assert exc_info.value.code == ErrorCode.CALLBACK_UNKNOWN_TYPE

    def test_unknown_type_on_call(self) -> None:
        with pytest.raises(UnknownCallbackError):
            CallbackRegistry().call('on_maybe', Audited())

    def test_register_needs_callables(self) -> None:
        with pytest.raises(ValueError):
            CallbackRegistry().register('on_success')


class TestCall:
    def test_runs_in_registration_order(self) -> None:
        registry = CallbackRegistry()
        registry.register('on_success', lambda task: _log(task).append('first'))
        registry.register(
            'on_success',
            lambda task: _log(task).append('second'),
            lambda task: _log(task).append('third'),
        )

        task = Audited()
        registry.call('on_success', task)
        assert task.context.log == ['first', 'second', 'third']

    def test_method_name_callback(self) -> None:
        registry = CallbackRegistry().register('on_success', 'record')
        task = Audited()
        registry.call('on_success', task)
        assert task.context.log == ['record']

    def test_if_and_unless_gate_each_entry(self) -> None:
        registry = CallbackRegistry()
        registry.register('on_success', lambda task: _log(task).append('vip'), if_=lambda t: t.context.vip)
        registry.register('on_success', lambda task: _log(task).append('quiet'), unless='is_muted')

        vip = Audited({'vip': True})
        registry.call('on_success', vip)
        assert vip.context.log == ['vip', 'quiet']

        muted = Audited({'vip': True, 'muted': True})
        registry.call('on_success', muted)
        assert muted.context.log == ['vip']

        neither = Audited()
        registry.call('on_success', neither)
        assert neither.context.log == ['quiet']

    def test_registered_entries(self) -> None:
        registry = CallbackRegistry().register('on_failed', 'record', if_=True)
        (entry,) = registry.registered('on_failed')
        assert entry.callables == ('record',)
        assert entry.if_ is True
        assert registry.registered('on_skipped') == ()


class TestTaskRegistration:
    def test_registrations_do_not_leak_to_parents(self) -> None:
        class Parent(Task):
            pass

        class Child(Parent):
            pass

        Child.register_callback('on_success', lambda task: None)
        assert len(Child.callbacks.registered('on_success')) == 1
        assert Parent.callbacks.registered('on_success') == ()

    def test_subclasses_inherit_callbacks(self) -> None:
        class Parent(Task):
            pass

        Parent.register_callback('on_failed', 'record')

        class Child(Parent):
            pass

        assert len(Child.callbacks.registered('on_failed')) == 1

    def test_copy_is_independent(self) -> None:
        registry = CallbackRegistry().register('on_good', 'record')
        copied = registry.copy()
        copied.register('on_good', 'record')
        assert len(registry.registered('on_good')) == 1
        assert len(copied.registered('on_good')) == 2
