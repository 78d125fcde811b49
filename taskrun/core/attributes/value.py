"""
Per-task resolution of one declared attribute.

Pipeline: cache -> source -> required check -> derive -> default ->
coerce -> transform -> validate -> memoize. Problems are recorded in
`task.errors` under the attribute's method name and never raised; the
cache then holds None for that attribute.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from taskrun.core.errors import CoercionError, ValidationError
from taskrun.core.locale import translate
from taskrun.core.logging import get_logger
from taskrun.core.registry.handlers import NotRegistered

if TYPE_CHECKING:
    from taskrun.core.attributes.attribute import Attribute
    from taskrun.core.task import Task

logger = get_logger('attributes')

_UNRESOLVED = object()


class AttributeValue:
    def __init__(self, attribute: 'Attribute', task: 'Task') -> None:
        self.attribute = attribute
        self.task = task

    @property
    def method_name(self) -> str:
        return self.attribute.method_name

    @property
    def cache(self) -> dict[str, Any]:
        return self.task._attributes

    def _record(self, message: str) -> None:
        self.task.errors.add(self.method_name, message)

    def _has_errors(self) -> bool:
        return self.task.errors.for_attribute(self.method_name)

    def resolve(self) -> Any:
        """Resolve once per task; later calls return the cached value (None on failure)."""
        if self.method_name in self.cache:
            return self.cache[self.method_name]
        value = self.generate()
        if value is not _UNRESOLVED:
            self.validate(value)
        resolved = None if value is _UNRESOLVED or self._has_errors() else value
        self.cache[self.method_name] = resolved
        return resolved

    # --- pipeline steps ---

    def generate(self) -> Any:
        sourced = self.source_value()
        if self._has_errors():
            return _UNRESOLVED

        derived = self.derive_value(sourced)
        if self._has_errors():
            return _UNRESOLVED

        coerced = self.coerce_value(derived)
        if self._has_errors():
            return _UNRESOLVED

        return self.transform_value(coerced)

    def source_value(self) -> Any:
        attribute = self.attribute
        source = attribute.source
        try:
            sourced = source.resolve(self.task)
        except Exception as e:
            logger.debug(f'{type(self.task).__name__}.{self.method_name}: source raised {e!r}')
            self._record(translate('attributes.undefined_source', method=source.label))
            return None

        if attribute.is_checked_as_required() and not self._exposes(sourced, attribute.name):
            self._record(translate('attributes.required'))
        return sourced

    @staticmethod
    def _exposes(sourced: Any, name: str) -> bool:
        match sourced:
            case Mapping():
                return name in sourced
            case _ if callable(sourced):
                return True
            case _:
                return hasattr(sourced, name)

    def derive_value(self, sourced: Any) -> Any:
        name = self.attribute.name
        try:
            match sourced:
                case None:
                    derived = None
                case Mapping():
                    derived = sourced.get(name)
                case _ if callable(sourced):
                    derived = sourced(name)
                case _:
                    derived = getattr(sourced, name, None)
                    if inspect.ismethod(derived):
                        derived = derived()
            if derived is None:
                derived = self.default_value()
        except Exception as e:
            logger.debug(f'{type(self.task).__name__}.{self.method_name}: derive raised {e!r}')
            self._record(translate('attributes.undefined_method', method=name))
            return None
        return derived

    def default_value(self) -> Any:
        default = self.attribute.default
        if callable(default):
            return default(self.task)
        return default

    def coerce_value(self, value: Any) -> Any:
        types = self.attribute.types
        if not types:
            return value
        if value is None and not self.attribute.is_required:
            return None

        registry = type(self.task).coercions
        last = len(types) - 1
        for position, type_key in enumerate(types):
            try:
                return registry.coerce(type_key, self.task, value, self.attribute.options)
            except NotRegistered:
                self._record(translate('coercions.unknown', type=type_key))
                return None
            except CoercionError as e:
                error = e
            except Exception as e:
                logger.warning(f'{type(self.task).__name__}.{self.method_name}: {type_key} coercion raised {e!r}')
                error = CoercionError(translate('coercions.raised', type=type_key, error=_describe(e)))
            if position != last:
                continue
            if last == 0:
                self._record(str(error))
            else:
                names = ', '.join(translate(f'types.{key}') for key in types)
                self._record(translate('coercions.into_any', types=names))
        return None

    def transform_value(self, value: Any) -> Any:
        transform = self.attribute.transform
        if value is None:
            return None
        try:
            match transform:
                case None:
                    return value
                case str():
                    method = getattr(value, transform, None)
                    return method() if callable(method) else value
                case _:
                    return transform(value)
        except Exception as e:
            logger.debug(f'{type(self.task).__name__}.{self.method_name}: transform raised {e!r}')
            self._record(translate('attributes.transform_failed', error=_describe(e)))
            return None

    def validate(self, value: Any) -> None:
        if self._has_errors():
            return
        if value is None and not self.attribute.is_required:
            return

        registry = type(self.task).validators
        for key, options in self.attribute.options.items():
            if key not in registry:
                continue
            if value is None and isinstance(options, dict) and options.get('allow_nil'):
                continue
            try:
                registry.validate(key, self.task, value, options)
            except ValidationError as e:
                self._record(str(e))
            except Exception as e:
                logger.warning(f'{type(self.task).__name__}.{self.method_name}: {key} validator raised {e!r}')
                self._record(translate('validators.raised', validator=key, error=_describe(e)))


def _describe(exc: Exception) -> str:
    return f'[{type(exc).__name__}] {exc}'
