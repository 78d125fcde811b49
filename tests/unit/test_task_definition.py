"""Unit tests for Task class definition, construction and settings."""

from __future__ import annotations

import pytest

from taskrun.core.attributes.attribute import optional, required
from taskrun.core.chain import Chain
from taskrun.core.context import Context
from taskrun.core.errors import (
    ConfigurationError,
    ErrorCode,
    FrozenError,
    TaskDefinitionError,
    UndefinedMethodError,
)
from taskrun.core.models.config import configure
from taskrun.core.task import Task
from taskrun.core.types.status import ResultState, ResultStatus


class Noop(Task):
    def work(self) -> None:
        pass


@pytest.mark.unit
class TestAttributeConflicts:
    def test_instance_member_name_is_rejected(self) -> None:
        with pytest.raises(TaskDefinitionError) as exc_info:

            class Bad(Task):
                result = required()

        assert exc_info.value.code == ErrorCode.TASK_ATTRIBUTE_CONFLICT

    def test_task_method_name_is_rejected(self) -> None:
        with pytest.raises(TaskDefinitionError) as exc_info:

            class Bad(Task):
                execute = required()

        assert exc_info.value.code == ErrorCode.TASK_ATTRIBUTE_CONFLICT

    def test_private_name_is_rejected(self) -> None:
        with pytest.raises(TaskDefinitionError):

            class Bad(Task):
                secret = required(as_='_secret')

    def test_duplicate_exposed_name_is_rejected(self) -> None:
        with pytest.raises(TaskDefinitionError) as exc_info:

            class Bad(Task):
                first = required(as_='value')
                second = required(as_='value')

        assert exc_info.value.code == ErrorCode.TASK_ATTRIBUTE_CONFLICT

    def test_nested_name_conflicting_with_a_method(self) -> None:
        with pytest.raises(TaskDefinitionError):

            class Bad(Task):
                payload = required(children=[required('skip')])

    def test_register_attribute_after_definition(self) -> None:
        class Late(Task):
            pass

        Late.register_attribute(optional('region', default='eu'))
        assert Late().region == 'eu'
        assert Late.attribute_registry.method_names() == ['region']

    def test_register_attribute_needs_a_name(self) -> None:
        class Late(Task):
            pass

        with pytest.raises(TaskDefinitionError) as exc_info:
            Late.register_attribute(optional())
        assert exc_info.value.code == ErrorCode.TASK_INVALID_ATTRIBUTE


@pytest.mark.unit
class TestSettings:
    def test_defaults_come_from_the_runtime_configuration(self) -> None:
        settings = Noop.settings()
        assert settings.retries == 0
        assert settings.breakpoints == (ResultStatus.FAILED,)

    def test_class_keywords_override(self) -> None:
        class Flaky(Task, retries=2, retry_on=TimeoutError):
            pass

        settings = Flaky.settings()
        assert settings.retries == 2
        assert settings.retry_on == (TimeoutError,)

    def test_subclasses_inherit_and_extend(self) -> None:
        class Base(Task, retries=2):
            pass

        class Child(Base, backtrace=True):
            pass

        assert Child.settings().retries == 2
        assert Child.settings().backtrace is True
        assert Base.settings().backtrace is False

    def test_later_configuration_still_applies(self) -> None:
        class Base(Task, retries=2):
            pass

        configure(retry_jitter=0.5, retries=9)
        assert Base.settings().retry_jitter == 0.5
        assert Base.settings().retries == 2

    def test_invalid_value(self) -> None:
        with pytest.raises(TaskDefinitionError) as exc_info:

            class Bad(Task, retries=-1):
                pass

        assert exc_info.value.code == ErrorCode.TASK_INVALID_SETTINGS
        assert any('retries' in note for note in exc_info.value.notes)

    def test_unknown_setting(self) -> None:
        with pytest.raises(TaskDefinitionError) as exc_info:

            class Bad(Task, retires=1):
                pass

        assert exc_info.value.code == ErrorCode.TASK_INVALID_SETTINGS

    def test_retry_on_must_hold_exception_classes(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:

            class Bad(Task, retry_on=('nope',)):
                pass

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_RETRY


@pytest.mark.unit
class TestConstruction:
    def test_fresh_task(self) -> None:
        task = Noop({'a': 1})
        assert len(task.id) == 32
        assert isinstance(task.context, Context)
        assert task.context.a == 1
        assert task.result.state is ResultState.INITIALIZED
        assert task.chain.results == (task.result,)
        assert task.result.index == 0
        assert not task.errors

    def test_context_must_be_a_mapping(self) -> None:
        with pytest.raises(TypeError):
            Noop('nope')

    def test_parent_task_shares_context_and_chain(self) -> None:
        parent = Noop({'a': 1})
        child = Noop(parent)
        assert child.context is parent.context
        assert child.chain is parent.chain
        assert child.result.index == 1

    def test_result_shares_context_only(self) -> None:
        parent = Noop({'a': 1})
        child = Noop(parent.result)
        assert child.context is parent.context
        assert child.chain is not parent.chain
        assert child.result.index == 0

    def test_explicit_chain(self) -> None:
        chain = Chain()
        task = Noop(chain=chain)
        assert task.chain is chain

    def test_missing_work(self) -> None:
        class Empty(Task):
            pass

        with pytest.raises(UndefinedMethodError) as exc_info:
            Empty().work()
        assert exc_info.value.code == ErrorCode.TASK_UNDEFINED_WORK

    def test_sealed_task_rejects_assignment(self) -> None:
        task = Noop()
        task.note = 'ok'
        task.seal()
        assert task.sealed
        with pytest.raises(FrozenError):
            task.note = 'late'

    def test_to_dict_and_repr(self) -> None:
        task = Noop({'a': 1})
        data = task.to_dict()
        assert data['task'] == 'Noop'
        assert data['id'] == task.id
        assert data['chain_id'] == task.chain.id
        assert data['context'] == {'a': 1}
        assert data['errors'] == {}
        assert repr(task) == f'<Noop {task.id} initialized/success>'
