"""Mutable input bag shared by a task and every task nested under it."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from taskrun.core.errors import ErrorCode, FrozenError


class Context(MutableMapping[str, Any]):
    """Mapping with attribute access.

    Missing keys read as None through attribute access (`ctx.missing`) but
    raise KeyError through item access, so `'key' in ctx` stays meaningful
    for required-attribute checks.
    """

    __slots__ = ('_data', '_sealed')

    def __init__(self, data: Mapping[str, Any] | None = None, **values: Any) -> None:
        object.__setattr__(self, '_data', {})
        object.__setattr__(self, '_sealed', False)
        for key, value in {**dict(data or {}), **values}.items():
            self._data[str(key)] = value

    @classmethod
    def build(cls, value: Any = None) -> Context:
        """Reuse an unsealed Context; wrap anything else in a fresh one."""
        if isinstance(value, Context) and not value.sealed:
            return value
        if value is None:
            return cls()
        if isinstance(value, Mapping):
            return cls(value)
        raise TypeError(f'context must be a mapping, got {type(value).__name__}')

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        object.__setattr__(self, '_sealed', True)

    def _ensure_mutable(self, key: str) -> None:
        if self._sealed:
            raise FrozenError(
                message=f"cannot modify sealed context (key '{key}')",
                code=ErrorCode.RESULT_SEALED,
            )

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._ensure_mutable(key)
        self._data[str(key)] = value

    def __delitem__(self, key: str) -> None:
        self._ensure_mutable(key)
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        return self._data.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f'Context({self._data!r})'
