"""
Predicate and handler invocation against a task.

Callbacks, validators and workflow groups accept the same kinds of
conditions and handlers:
- None / bool: used as-is
- str: name of a method on the target, called with the arguments
- callable: called with the target followed by the arguments
"""

from __future__ import annotations

from typing import Any


def invoke(target: Any, handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call `handler` against `target`; strings name a method on the target."""
    match handler:
        case str():
            return getattr(target, handler)(*args, **kwargs)
        case _ if callable(handler):
            return handler(target, *args, **kwargs)
        case _:
            raise TypeError(f'cannot invoke {handler!r}')


def invoke_handler(target: Any, handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Like `invoke`, but plain callables do not receive the target."""
    if isinstance(handler, str):
        return getattr(target, handler)(*args, **kwargs)
    if not callable(handler):
        raise TypeError(f'cannot invoke {handler!r}')
    return handler(*args, **kwargs)


def _check(target: Any, condition: Any, *args: Any) -> bool:
    if condition is None or isinstance(condition, bool):
        return bool(condition)
    return bool(invoke(target, condition, *args))


def evaluate(target: Any, if_: Any = None, unless: Any = None, *args: Any) -> bool:
    """True when `if_` holds (or is unset) and `unless` does not."""
    if if_ is not None and not _check(target, if_, *args):
        return False
    if unless is not None and _check(target, unless, *args):
        return False
    return True
