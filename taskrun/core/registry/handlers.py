# taskrun/core/registry/handlers.py
from __future__ import annotations

from typing import Dict, Generic, Iterator, MutableMapping, TypeVar

from taskrun.core.errors import ErrorCode, RegistryError

T = TypeVar('T')


class NotRegistered(RegistryError, KeyError):
    """Raised when a handler key is not present in a registry.

    Inherits from KeyError so MutableMapping.__contains__ works correctly
    (it catches KeyError to implement the ``in`` operator).
    """

    def __init__(self, kind: str, key: str, known: list[str] | None = None) -> None:
        RegistryError.__init__(
            self,
            message=f"unknown {kind} '{key}'",
            code=ErrorCode.HANDLER_NOT_REGISTERED,
            notes=[f"known {kind}s: {', '.join(known)}"] if known else [],
            help_text=f'register it first, e.g. registry.register({key!r}, handler)',
        )
        self.kind = kind
        self.key = key


class HandlerRegistry(MutableMapping[str, T], Generic[T]):
    """Registry mapping a type key -> handler.

    Registering an existing key replaces the handler, which is how
    built-in coercions and validators are overridden. Task classes work on
    their own `copy()` so registrations never leak into parent classes.
    """

    kind: str = 'handler'

    def __init__(self, initial: Dict[str, T] | None = None) -> None:
        self._data: Dict[str, T] = dict(initial or {})

    def __getitem__(self, key: str) -> T:
        try:
            return self._data[key]
        except KeyError:
            raise NotRegistered(self.kind, key, self.keys_list())

    def __setitem__(self, key: str, value: T) -> None:
        self._data[str(key)] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def register(self, key: str, handler: T) -> HandlerRegistry[T]:
        self[key] = handler
        return self

    def unregister(self, key: str) -> None:
        self._data.pop(key, None)

    def keys_list(self) -> list[str]:
        return list(self._data.keys())

    def copy(self) -> HandlerRegistry[T]:
        return type(self)(dict(self._data))
