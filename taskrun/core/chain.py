"""Ordered trace of the results produced under one top-level invocation.

A chain is created with the top-level task and handed to nested tasks
explicitly (by passing the parent task as their context). Independent
top-level invocations therefore never share a chain, in any thread.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Iterator

from taskrun.core.errors import ErrorCode, FrozenError

if TYPE_CHECKING:
    from taskrun.core.result import Result


class Chain:
    """Append-only result list; a result's index is fixed when appended."""

    def __init__(self) -> None:
        self.id: str = uuid.uuid4().hex
        self._results: list['Result'] = []
        self._sealed = False

    @property
    def results(self) -> tuple['Result', ...]:
        return tuple(self._results)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def append(self, result: 'Result') -> int:
        """Append `result` and return its index."""
        if self._sealed:
            raise FrozenError(
                message=f'cannot append to sealed chain {self.id}',
                code=ErrorCode.RESULT_SEALED,
                help_text='start a new top-level task instead of reusing a finished one',
            )
        self._results.append(result)
        return len(self._results) - 1

    def index(self, result: 'Result') -> int:
        for position, candidate in enumerate(self._results):
            if candidate is result:
                return position
        raise ValueError('result does not belong to this chain')

    def seal(self) -> None:
        """Seal the chain together with every task and result it holds."""
        self._sealed = True
        for result in self._results:
            result.seal()
            result.task.seal()

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator['Result']:
        return iter(self._results)

    def __getitem__(self, position: int) -> 'Result':
        return self._results[position]

    def to_dict(self) -> dict[str, Any]:
        return {'id': self.id, 'results': [result.to_dict() for result in self._results]}

    def __repr__(self) -> str:
        return f'<Chain {self.id} results={len(self._results)}>'
