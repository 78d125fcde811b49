"""taskrun - an in-process task execution runtime"""

# Install Rust-style error handler on import
from .core.errors import install_error_handler as _install_error_handler

_install_error_handler()

from .core.task import Task
from .core.workflow import Workflow, Group
from .core.worker import Worker
from .core.result import Result
from .core.chain import Chain
from .core.context import Context
from .core.faults import Fault, Skipped, Failed
from .core.repeator import Repeator
from .core.attributes.attribute import (
    Attribute,
    Source,
    Literal,
    Accessor,
    Callable,
    required,
    optional,
)
from .core.attributes.errors import Errors
from .core.callbacks import CallbackRegistry, UnknownCallbackError
from .core.middlewares import MiddlewareRegistry, Runtime, Correlate
from .core.events import Event, EventRegistry, subscribe, publish, listening
from .core.coercions.registry import CoercionRegistry
from .core.validators.registry import ValidatorRegistry
from .core.registry.handlers import HandlerRegistry, NotRegistered
from .core.models.config import (
    RuntimeConfig,
    TaskSettings,
    configure,
    get_configuration,
    reset_configuration,
)
from .core.types.status import ResultState, ResultStatus
from .core.locale import translate, set_translator
from .core.errors import (
    ErrorCode,
    TaskrunError,
    TaskDefinitionError,
    ConfigurationError,
    RegistryError,
    UndefinedMethodError,
    DeprecationError,
    FrozenError,
    TransitionError,
    CoercionError,
    ValidationError,
    ValidationReport,
    MultipleValidationErrors,
)

__all__ = [
    # Core
    'Task',
    'Workflow',
    'Group',
    'Worker',
    'Result',
    'Chain',
    'Context',
    'Repeator',
    # Faults
    'Fault',
    'Skipped',
    'Failed',
    # Attributes
    'Attribute',
    'Source',
    'Literal',
    'Accessor',
    'Callable',
    'required',
    'optional',
    'Errors',
    # Registries
    'CallbackRegistry',
    'UnknownCallbackError',
    'MiddlewareRegistry',
    'Runtime',
    'Correlate',
    'Event',
    'EventRegistry',
    'subscribe',
    'publish',
    'listening',
    'CoercionRegistry',
    'ValidatorRegistry',
    'HandlerRegistry',
    'NotRegistered',
    # Configuration
    'RuntimeConfig',
    'TaskSettings',
    'configure',
    'get_configuration',
    'reset_configuration',
    # Types
    'ResultState',
    'ResultStatus',
    # Locale
    'translate',
    'set_translator',
    # Errors
    'ErrorCode',
    'TaskrunError',
    'TaskDefinitionError',
    'ConfigurationError',
    'RegistryError',
    'UndefinedMethodError',
    'DeprecationError',
    'FrozenError',
    'TransitionError',
    'CoercionError',
    'ValidationError',
    'ValidationReport',
    'MultipleValidationErrors',
]
