"""Per-attribute collection of unique resolution messages."""

from __future__ import annotations

from typing import Iterator


class Errors:
    """Mapping of attribute method name -> ordered set of messages.

    Adding the same message twice for one attribute keeps a single copy.
    """

    __slots__ = ('_messages',)

    def __init__(self) -> None:
        # dict keys double as an insertion-ordered set
        self._messages: dict[str, dict[str, None]] = {}

    def add(self, attribute: str, message: str) -> None:
        if not message:
            return
        self._messages.setdefault(attribute, {})[message] = None

    def for_attribute(self, attribute: str) -> bool:
        return bool(self._messages.get(attribute))

    def messages_for(self, attribute: str) -> list[str]:
        return list(self._messages.get(attribute, ()))

    def is_empty(self) -> bool:
        return not any(self._messages.values())

    def to_dict(self) -> dict[str, list[str]]:
        return {attribute: list(messages) for attribute, messages in self._messages.items()}

    def full_messages(self) -> list[str]:
        return [
            f'{attribute} {message}'
            for attribute, messages in self._messages.items()
            for message in messages
        ]

    def __str__(self) -> str:
        return '. '.join(self.full_messages())

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __contains__(self, attribute: object) -> bool:
        return isinstance(attribute, str) and self.for_attribute(attribute)

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __repr__(self) -> str:
        return f'Errors({self.to_dict()!r})'
