"""
Declared task inputs.

An Attribute is declared as a class attribute of a Task subclass and acts
as a read-only descriptor: reading `task.<method_name>` resolves the value
through the memoized pipeline in `taskrun.core.attributes.value`.

    class CreateUser(Task):
        age = required(types='integer', numeric={'min': 0})
        email = optional(format={'with': r'@'})
        address = required(children=[required('city'), optional('zip', types='string')])
"""

from __future__ import annotations

import collections.abc as abc
import inspect
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional, Sequence

from taskrun.core.errors import ErrorCode, task_definition_error

if TYPE_CHECKING:
    from taskrun.core.task import Task


# --- sources ---


class Source:
    """Where the value containing an attribute comes from."""

    def resolve(self, task: 'Task') -> Any:
        raise NotImplementedError

    @property
    def label(self) -> str:
        """Used by `prefix=True` / `suffix=True` to build the method name."""
        raise NotImplementedError

    @staticmethod
    def build(value: Any) -> Source:
        match value:
            case Source():
                return value
            case str():
                return Accessor(value)
            case _ if callable(value):
                return Callable(value)
            case _:
                return Literal(value)


class Literal(Source):
    def __init__(self, value: Any) -> None:
        self.value = value

    def resolve(self, task: 'Task') -> Any:
        return self.value

    @property
    def label(self) -> str:
        return 'literal'

    def __repr__(self) -> str:
        return f'Literal({self.value!r})'


class Accessor(Source):
    """Reads a task member by name, calling it when it is a bound method."""

    def __init__(self, name: str) -> None:
        self.name = name

    def resolve(self, task: 'Task') -> Any:
        value = getattr(task, self.name)
        if inspect.ismethod(value):
            return value()
        return value

    @property
    def label(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f'Accessor({self.name!r})'


class Callable(Source):
    """Calls `fn(task)`."""

    def __init__(self, fn: abc.Callable[['Task'], Any]) -> None:
        self.fn = fn

    def resolve(self, task: 'Task') -> Any:
        return self.fn(task)

    @property
    def label(self) -> str:
        return getattr(self.fn, '__name__', 'callable')

    def __repr__(self) -> str:
        return f'Callable({self.label})'


DEFAULT_SOURCE = Accessor('context')


# --- attribute ---


def _types(value: str | Sequence[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _affix(value: bool | str | None, built: str) -> str:
    if value is True:
        return built
    return value or ''


class Attribute:
    """
    Static definition of one task input, shared by every instance of the task.

    Keyword options that are not attribute settings (`numeric=`, `format=`,
    `presence=`, ...) are kept in `options` and select validators by key.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        types: str | Sequence[str] | None = None,
        source: Any = None,
        required: bool = False,
        default: Any = None,
        transform: Any = None,
        as_: Optional[str] = None,
        prefix: bool | str | None = None,
        suffix: bool | str | None = None,
        children: Iterable[Attribute] = (),
        **options: Any,
    ) -> None:
        self.name = name
        self.types = _types(types)
        self._source = None if source is None else Source.build(source)
        self.is_required = required
        self.default = default
        self.transform = transform
        self.as_ = as_
        self.prefix = prefix
        self.suffix = suffix
        self.options: dict[str, Any] = options
        self.parent: Optional[Attribute] = None
        self.children: list[Attribute] = []
        for child in children:
            self.add_child(child)

    def add_child(self, child: Attribute) -> Attribute:
        if child.name is None:
            raise task_definition_error(
                'nested attributes need an explicit name',
                code=ErrorCode.TASK_INVALID_ATTRIBUTE,
                help_text="pass it first, e.g. required('city')",
            )
        child.parent = self
        self.children.append(child)
        return child

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    # --- derived definition ---

    @property
    def source(self) -> Source:
        if self.parent is not None:
            return Accessor(self.parent.method_name)
        return self._source or DEFAULT_SOURCE

    @property
    def method_name(self) -> str:
        if self.as_:
            return self.as_
        if self.name is None:
            raise ValueError('attribute has no name yet')
        label = self.source.label
        prefix = _affix(self.prefix, f'{label}_')
        suffix = _affix(self.suffix, f'_{label}')
        return f'{prefix}{self.name}{suffix}'

    def is_checked_as_required(self) -> bool:
        """Required, and not nested under an optional parent."""
        return self.is_required and (self.parent is None or self.parent.is_required)

    def walk(self) -> Iterator[Attribute]:
        """This attribute followed by its descendants, parents first."""
        yield self
        for child in self.children:
            yield from child.walk()

    # --- descriptor protocol ---

    def __get__(self, task: Optional['Task'], owner: type | None = None) -> Any:
        if task is None:
            return self
        from taskrun.core.attributes.value import AttributeValue

        return AttributeValue(self, task).resolve()

    def __set__(self, task: 'Task', value: Any) -> None:
        raise AttributeError(f"attribute '{self.method_name}' is read-only")

    def __repr__(self) -> str:
        kind = 'required' if self.is_required else 'optional'
        return f'<Attribute {self.name!r} {kind} types={list(self.types)} source={self.source!r}>'


def required(name: Optional[str] = None, **options: Any) -> Attribute:
    return Attribute(name, required=True, **options)


def optional(name: Optional[str] = None, **options: Any) -> Attribute:
    return Attribute(name, required=False, **options)
