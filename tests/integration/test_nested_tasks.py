"""Integration tests for tasks run inside other tasks."""

from __future__ import annotations

import pytest

from taskrun.core.attributes.attribute import required
from taskrun.core.events import Event
from taskrun.core.faults import Failed
from taskrun.core.task import Task
from taskrun.core.types.status import ResultState, ResultStatus
from taskrun.core.worker import Worker

pytestmark = pytest.mark.integration


class Charge(Task):
    amount = required(types='integer', numeric={'min': 1})

    def work(self) -> None:
        self.context.charged = self.amount


class Notify(Task):
    def work(self) -> None:
        self.context.notified = True


class Decline(Task):
    def work(self) -> None:
        self.fail('card declined', code='E42')


class OutOfStock(Task, breakpoints=('skipped', 'failed')):
    def work(self) -> None:
        self.skip('out of stock')


class Checkout(Task):
    def work(self) -> None:
        Charge.execute(self)
        Notify.execute(self)


class TestChain:
    def test_nested_results_share_the_chain(self) -> None:
        result = Checkout.execute(amount=5)
        assert [type(r.task).__name__ for r in result.chain] == ['Checkout', 'Charge', 'Notify']
        assert [r.index for r in result.chain] == [0, 1, 2]
        assert len({r.chain.id for r in result.chain}) == 1

    def test_nested_tasks_share_the_context(self) -> None:
        result = Checkout.execute(amount=5)
        assert result.context.charged == 5
        assert result.context.notified is True
        assert all(r.context is result.context for r in result.chain)

    def test_everything_is_sealed_by_the_top_level_task(self) -> None:
        result = Checkout.execute(amount=5)
        assert all(r.sealed and r.task.sealed for r in result.chain)

    def test_nested_results_stay_open_until_the_parent_finishes(self) -> None:
        seen: list[bool] = []

        class Inspecting(Task):
            def work(self) -> None:
                nested = Notify.execute(self)
                seen.append(nested.sealed)

        Inspecting.execute()
        assert seen == [False]

    def test_independent_runs_never_share_a_chain(self) -> None:
        first = Checkout.execute(amount=1)
        second = Checkout.execute(amount=2)
        assert first.chain is not second.chain
        assert len(first.chain) == len(second.chain) == 3

    def test_finished_task_as_context_starts_a_new_chain(self) -> None:
        parent = Checkout({'amount': 5})
        Worker.execute(parent)
        assert parent.chain.sealed

        result = Notify.execute(parent)
        assert result.is_success()
        assert result.index == 0
        assert result.chain is not parent.chain
        assert len(parent.chain) == 3
        assert result.context is not parent.context
        assert result.context.charged == 5
        assert result.context.notified is True

    def test_every_nested_run_publishes_events(self, published: list[Event]) -> None:
        Checkout.execute(amount=5)
        executed = [event['task'] for event in published if event.name == 'task.executed']
        assert [type(task).__name__ for task in executed] == ['Charge', 'Notify', 'Checkout']


class TestPropagation:
    def test_nested_failure_is_returned_in_safe_mode(self) -> None:
        class Careful(Task):
            def work(self) -> None:
                nested = Decline.execute(self)
                self.context.nested_status = nested.status

        result = Careful.execute()
        assert result.is_success()
        assert result.context.nested_status is ResultStatus.FAILED

    def test_nested_invalid_input(self) -> None:
        result = Checkout.execute(amount=0)
        charge = result.chain[1]
        assert charge.is_failed()
        assert charge.metadata['messages'] == {'amount': ['must be greater than or equal to 1']}
        assert result.is_success()

    def test_throw_adopts_the_nested_failure(self) -> None:
        class Order(Task):
            def work(self) -> None:
                nested = Decline.execute(self)
                if nested.is_failed():
                    self.throw(nested)
                self.context.shipped = True

        result = Order.execute()
        assert result.state is ResultState.INTERRUPTED
        assert result.reason == 'card declined'
        assert result.metadata['code'] == 'E42'
        assert result.context.shipped is None

        declined = result.chain[1]
        assert result.caused_failure() is declined
        assert result.threw_failure() is declined
        assert result.is_thrown_failure()
        assert declined.is_caused_failure()
        assert result.outcome == 'interrupted'
        assert declined.outcome == 'failed'

    def test_strict_nested_failure_fails_the_parent(self) -> None:
        class Order(Task):
            def work(self) -> None:
                Decline.execute_strict(self)
                self.context.shipped = True

        result = Order.execute()
        assert result.is_failed()
        assert result.reason == 'card declined'
        assert result.metadata['code'] == 'E42'
        assert isinstance(result.cause, Failed)
        assert result.cause.raised_by(Decline)
        assert result.context.shipped is None

    def test_strict_nested_failure_reaches_a_strict_caller(self) -> None:
        class Order(Task):
            def work(self) -> None:
                Decline.execute_strict(self)

        with pytest.raises(Failed) as exc_info:
            Order.execute_strict()
        assert exc_info.value.raised_by(Decline)
        assert exc_info.value.result.task.chain[0].is_failed()

    def test_foreign_fault_outside_breakpoints_becomes_a_failure(self) -> None:
        class Order(Task):
            def work(self) -> None:
                OutOfStock.execute_strict(self)

        result = Order.execute()
        assert result.is_failed()
        assert result.reason == 'out of stock'
        assert result.chain[1].is_skipped()
