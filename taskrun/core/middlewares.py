"""
Middleware wrapping a task's lifecycle.

A middleware is a callable `mw(task, call_next, **options)`; it must call
`call_next(task)` to continue, and may skip it to short-circuit the run.
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from taskrun.core.result import Result
    from taskrun.core.task import Task

Next = Callable[['Task'], Any]
Middleware = Callable[..., Any]


class MiddlewareRegistry:
    def __init__(self, entries: Optional[list[tuple[Middleware, dict[str, Any]]]] = None) -> None:
        self._entries: list[tuple[Middleware, dict[str, Any]]] = list(entries or [])

    def copy(self) -> MiddlewareRegistry:
        return MiddlewareRegistry([(mw, dict(options)) for mw, options in self._entries])

    def register(self, middleware: Middleware, **options: Any) -> MiddlewareRegistry:
        self._entries.append((middleware, options))
        return self

    def unregister(self, middleware: Middleware) -> MiddlewareRegistry:
        self._entries = [entry for entry in self._entries if entry[0] is not middleware]
        return self

    def __len__(self) -> int:
        return len(self._entries)

    def call(self, task: 'Task', work: Next) -> Any:
        """Run `work(task)` inside every middleware; the first registered is outermost."""
        chain = work
        for middleware, options in reversed(self._entries):
            chain = _wrap(middleware, options, chain)
        return chain(task)


def _wrap(middleware: Middleware, options: dict[str, Any], call_next: Next) -> Next:
    def step(task: 'Task') -> Any:
        return middleware(task, call_next, **options)

    return step


class Runtime:
    """Records the wrapped run's duration in `metadata['runtime']` (milliseconds)."""

    def __call__(self, task: 'Task', call_next: Next) -> 'Result':
        started = time.monotonic()
        try:
            return call_next(task)
        finally:
            if not task.result.sealed:
                task.result.metadata['runtime'] = round((time.monotonic() - started) * 1000, 3)


class Correlate:
    """Tags the result with `metadata['correlation_id']`.

    The id is taken from the `id` option (a value or a `fn(task)`), then
    from `context.correlation_id`, and is generated otherwise.
    """

    def __call__(self, task: 'Task', call_next: Next, id: Any = None) -> 'Result':
        if callable(id):
            correlation_id = id(task)
        else:
            correlation_id = id or task.context.get('correlation_id') or uuid.uuid4().hex
        task.result.metadata['correlation_id'] = correlation_id
        return call_next(task)
