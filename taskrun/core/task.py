# taskrun/core/task.py
from __future__ import annotations

import uuid
from typing import Any, ClassVar, Optional

from pydantic import ValidationError as PydanticValidationError

from taskrun.core.attributes.attribute import Attribute
from taskrun.core.attributes.errors import Errors
from taskrun.core.attributes.registry import AttributeRegistry
from taskrun.core.callbacks import CallbackRegistry
from taskrun.core.chain import Chain
from taskrun.core.coercions.registry import CoercionHandler, CoercionRegistry
from taskrun.core.context import Context
from taskrun.core.deprecation import restrict
from taskrun.core.errors import ErrorCode, FrozenError, UndefinedMethodError, task_definition_error
from taskrun.core.events import EventRegistry, default_registry
from taskrun.core.logging import get_logger
from taskrun.core.middlewares import Middleware, MiddlewareRegistry
from taskrun.core.models.config import RuntimeConfig, TaskSettings, get_configuration
from taskrun.core.result import Result
from taskrun.core.validators.registry import ValidatorHandler, ValidatorRegistry


class Task:
    """
    Base class for a unit of work.

    Subclasses declare inputs as `Attribute` class attributes, implement
    `work()`, and are run with `execute()` (failures become a failed
    result) or `execute_strict()` (halting faults are re-raised).

        class ChargeCard(Task, retries=2, retry_on=(TimeoutError,)):
            amount = required(types='big_decimal', numeric={'min': 0})

            def work(self) -> None:
                self.context.charge_id = gateway.charge(self.amount)

    Passing another task as the context runs the new task inside that
    task's context and chain:

        ChargeCard.execute(self)   # from within a parent task's work()
    """

    attribute_registry: ClassVar[AttributeRegistry] = AttributeRegistry()
    callbacks: ClassVar[CallbackRegistry] = CallbackRegistry()
    middlewares: ClassVar[MiddlewareRegistry] = MiddlewareRegistry()
    coercions: ClassVar[CoercionRegistry] = CoercionRegistry()
    validators: ClassVar[ValidatorRegistry] = ValidatorRegistry()
    events: ClassVar[EventRegistry] = default_registry()
    task_settings: ClassVar[TaskSettings] = TaskSettings()

    logger = get_logger('task')

    def __init_subclass__(cls, **settings: Any) -> None:
        super().__init_subclass__()
        cls.task_settings = _merge_settings(cls, settings)
        cls.attribute_registry = cls.attribute_registry.copy()
        cls.callbacks = cls.callbacks.copy()
        cls.middlewares = cls.middlewares.copy()
        cls.coercions = cls.coercions.copy()
        cls.validators = cls.validators.copy()

        for name, value in list(vars(cls).items()):
            if isinstance(value, Attribute):
                _install_attribute(cls, name, value)

    def __init__(self, context: Any = None, *, chain: Optional[Chain] = None) -> None:
        match context:
            case Task():
                # a finished top-level task hands over a copy of its context only
                if chain is None and not context.chain.sealed:
                    chain = context.chain
                context = context.context
            case Result():
                context = context.context

        self.id: str = uuid.uuid4().hex
        self.context: Context = Context.build(context)
        self.errors = Errors()
        self._attributes: dict[str, Any] = {}
        self.chain: Chain = chain or Chain()
        self.result = Result(self)
        restrict(self, self.settings().deprecate)
        self.chain.append(self.result)

    # --- execution ---

    @classmethod
    def execute(cls, context: Any = None, **values: Any) -> Result:
        """Run the task; ordinary failures are reported on the returned result."""
        from taskrun.core.worker import Worker

        return Worker.execute(cls._build(context, values))

    @classmethod
    def execute_strict(cls, context: Any = None, **values: Any) -> Result:
        """Run the task, re-raising halting faults and exceptions after finalization."""
        from taskrun.core.worker import Worker

        return Worker.execute(cls._build(context, values), strict=True)

    @classmethod
    def _build(cls, context: Any, values: dict[str, Any]) -> Task:
        task = cls(context)
        if values:
            task.context.update(values)
        return task

    def work(self) -> Any:
        raise UndefinedMethodError(
            message=f'undefined method {type(self).__name__}.work',
            code=ErrorCode.TASK_UNDEFINED_WORK,
            help_text=f'define work(self) on {type(self).__name__}',
        )

    @classmethod
    def settings(cls) -> RuntimeConfig:
        """Class overrides layered over the active runtime configuration."""
        return cls.task_settings.resolve(get_configuration())

    # --- outcome helpers ---

    def skip(self, reason: Optional[str] = None, *, halt: bool = True, **metadata: Any) -> None:
        self.result.skip(reason, halt=halt, **metadata)

    def fail(self, reason: Optional[str] = None, *, halt: bool = True, **metadata: Any) -> None:
        self.result.fail(reason, halt=halt, **metadata)

    def throw(self, result: Result, *, halt: bool = True, **metadata: Any) -> None:
        self.result.throw(result, halt=halt, **metadata)

    # --- sealing ---

    @property
    def sealed(self) -> bool:
        return self.__dict__.get('_sealed', False)

    def seal(self) -> None:
        object.__setattr__(self, '_sealed', True)

    def __setattr__(self, name: str, value: Any) -> None:
        if self.sealed:
            raise FrozenError(
                message=f"cannot set '{name}' on sealed task {type(self).__name__}",
                code=ErrorCode.RESULT_SEALED,
            )
        object.__setattr__(self, name, value)

    # --- class-level registration ---

    @classmethod
    def register_callback(
        cls, callback_type: str, *callables: Any, if_: Any = None, unless: Any = None
    ) -> None:
        cls.callbacks.register(callback_type, *callables, if_=if_, unless=unless)

    @classmethod
    def register_middleware(cls, middleware: Middleware, **options: Any) -> None:
        cls.middlewares.register(middleware, **options)

    @classmethod
    def register_coercion(cls, type_key: str, handler: CoercionHandler) -> None:
        cls.coercions.register(type_key, handler)

    @classmethod
    def register_validator(cls, type_key: str, handler: ValidatorHandler) -> None:
        cls.validators.register(type_key, handler)

    @classmethod
    def register_attribute(cls, attribute: Attribute) -> None:
        if attribute.name is None:
            raise task_definition_error(
                'attributes registered outside a class body need a name',
                code=ErrorCode.TASK_INVALID_ATTRIBUTE,
                obj=cls,
            )
        _install_attribute(cls, attribute.name, attribute)

    # --- presentation ---

    def to_dict(self) -> dict[str, Any]:
        return {
            'task': type(self).__name__,
            'id': self.id,
            'chain_id': self.chain.id,
            'context': self.context.to_dict(),
            'errors': self.errors.to_dict(),
        }

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.id} {self.result.state.value}/{self.result.status.value}>'


def _merge_settings(cls: type[Task], settings: dict[str, Any]) -> TaskSettings:
    if not settings:
        return cls.task_settings
    try:
        return cls.task_settings.merge(**settings)
    except PydanticValidationError as e:
        raise task_definition_error(
            f'invalid settings for task {cls.__name__}',
            code=ErrorCode.TASK_INVALID_SETTINGS,
            obj=cls,
            notes=[
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ],
            help_text=f'valid settings: {", ".join(TaskSettings.model_fields)}',
        ) from e


# Set on every instance in Task.__init__; a descriptor with one of these names would shadow them.
INSTANCE_MEMBERS = frozenset({'id', 'context', 'errors', 'chain', 'result'})


def _conflicting_member(cls: type[Task], method_name: str, attribute: Attribute) -> bool:
    if method_name in INSTANCE_MEMBERS or method_name.startswith('_'):
        return True
    for klass in cls.__mro__:
        member = vars(klass).get(method_name)
        if member is None or member is attribute or isinstance(member, Attribute):
            continue
        return True
    return False


def _install_attribute(cls: type[Task], declared_name: str, attribute: Attribute) -> None:
    """Register `attribute` and expose every node of its tree under its method name."""
    for node in attribute.walk():
        if _conflicting_member(cls, node.method_name, node):
            raise task_definition_error(
                f"{cls.__name__}.{node.method_name} is already defined",
                code=ErrorCode.TASK_ATTRIBUTE_CONFLICT,
                obj=cls,
                notes=[f'attribute {node.name!r} resolves to method name {node.method_name!r}'],
                help_text='pick another name, or expose it with as_=, prefix= or suffix=',
            )

    cls.attribute_registry.register(attribute, owner=cls)

    if attribute.method_name != declared_name and vars(cls).get(declared_name) is attribute:
        delattr(cls, declared_name)
    for node in attribute.walk():
        setattr(cls, node.method_name, node)
