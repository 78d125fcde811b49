# taskrun/core/attributes/registry.py
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator

from taskrun.core.attributes.attribute import Attribute
from taskrun.core.attributes.value import AttributeValue
from taskrun.core.errors import ErrorCode, task_definition_error

if TYPE_CHECKING:
    from taskrun.core.task import Task


class AttributeRegistry:
    """Declared attributes of one task class, in declaration order.

    Subclasses start from a `copy()` of their parent's registry, so
    inherited attributes resolve before the subclass's own.
    """

    def __init__(self, attributes: Iterable[Attribute] = ()) -> None:
        self._attributes: list[Attribute] = list(attributes)

    def copy(self) -> AttributeRegistry:
        return AttributeRegistry(self._attributes)

    def method_names(self) -> list[str]:
        return [node.method_name for attribute in self._attributes for node in attribute.walk()]

    def register(self, attribute: Attribute, owner: type | None = None) -> AttributeRegistry:
        """Add a top-level attribute; every method name in its tree must be unique."""
        taken = set(self.method_names())
        for node in attribute.walk():
            if node.method_name in taken:
                raise task_definition_error(
                    f"attribute '{node.method_name}' is already defined",
                    code=ErrorCode.TASK_ATTRIBUTE_CONFLICT,
                    obj=owner,
                    help_text='rename it or use as_= to expose it under another name',
                )
            taken.add(node.method_name)
        self._attributes.append(attribute)
        return self

    def deregister(self, *method_names: str) -> AttributeRegistry:
        """Remove attributes whose tree exposes any of `method_names`."""
        names = set(method_names)
        self._attributes = [
            attribute
            for attribute in self._attributes
            if not any(node.method_name in names for node in attribute.walk())
        ]
        return self

    def define_and_verify(self, task: 'Task') -> None:
        """Resolve every attribute (parents before children) into the task's cache."""
        for attribute in self._attributes:
            for node in attribute.walk():
                AttributeValue(node, task).resolve()

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __repr__(self) -> str:
        return f'AttributeRegistry({self.method_names()!r})'
