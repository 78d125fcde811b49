"""Rust-style error display for taskrun definition/configuration errors.

Also hosts the runtime exception types raised while a task is resolved
and executed (coercion, validation, sealing, lifecycle transitions).
"""

from __future__ import annotations

import inspect
import linecache
import os
import sys
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

# Absolute path to the taskrun package directory.
# Used by _find_user_frame to tell library frames apart from user code.
_TASKRUN_PKG_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

_TRUTHY_ENV = ('1', 'true', 'yes')


class ErrorCode(str, Enum):
    """Error codes for definition/configuration errors.

    Organized by category:
    - E100-E199: Task and attribute definition errors
    - E200-E299: Config errors
    - E300-E399: Registry errors
    - E400-E499: Runtime lifecycle errors
    """

    # Task definition (E100-E199)
    TASK_ATTRIBUTE_CONFLICT = 'E100'
    TASK_UNDEFINED_WORK = 'E101'
    TASK_INVALID_SETTINGS = 'E102'
    TASK_INVALID_ATTRIBUTE = 'E103'
    WORKFLOW_INVALID_GROUP = 'E104'
    TASK_DEPRECATED = 'E105'

    # Config (E200-E299)
    CONFIG_INVALID_RETRY = 'E200'
    CONFIG_INVALID_BREAKPOINT = 'E201'

    # Registry (E300-E399)
    HANDLER_NOT_REGISTERED = 'E300'
    CALLBACK_UNKNOWN_TYPE = 'E301'

    # Runtime (E400-E499)
    RESULT_SEALED = 'E400'
    RESULT_INVALID_TRANSITION = 'E401'


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    DIM = '\033[2m'


class _NoColors:
    """No-op color codes for non-TTY output."""

    RESET = ''
    BOLD = ''
    RED = ''
    BLUE = ''
    CYAN = ''
    GREEN = ''
    DIM = ''


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in _TRUTHY_ENV


def _should_use_colors() -> bool:
    """Determine if colors should be used in output."""
    if _env_flag('TASKRUN_FORCE_COLOR'):
        return True

    # https://no-color.org/
    if os.environ.get('NO_COLOR') is not None:
        return False

    return hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()


def _should_show_verbose() -> bool:
    """Determine if the full traceback should follow the formatted error."""
    return _env_flag('TASKRUN_VERBOSE')


def _should_use_plain_errors() -> bool:
    """Determine if plain Python errors should be used instead of Rust-style."""
    return _env_flag('TASKRUN_PLAIN_ERRORS')


@dataclass
class SourceLocation:
    """Source code location information."""

    file: str
    line: int

    @classmethod
    def from_frame(cls, frame: Any) -> SourceLocation:
        return cls(file=frame.f_code.co_filename, line=frame.f_lineno)

    @classmethod
    def from_object(cls, obj: Any) -> SourceLocation | None:
        """Location of a function or class definition, None when unavailable."""
        code = getattr(obj, '__code__', None)
        if code is not None:
            return cls(file=code.co_filename, line=code.co_firstlineno)
        try:
            file = inspect.getsourcefile(obj)
            _, line = inspect.getsourcelines(obj)
        except (OSError, TypeError):
            return None
        if file is None:
            return None
        return cls(file=file, line=line)

    def get_source_line(self) -> str | None:
        line = linecache.getline(self.file, self.line)
        return line.rstrip('\n') if line else None

    def format_short(self) -> str:
        return f'{self.file}:{self.line}'


@dataclass
class TaskrunError(Exception):
    """Base exception for taskrun definition/configuration errors.

    Formats as:
        error[E100]: message
          --> file:line
           |
        12 | source line
           | ^^^^^^^^^^^
           = note: ...
           = help:
                ...
    """

    message: str
    code: ErrorCode | None = None
    location: SourceLocation | None = None
    notes: list[str] = field(default_factory=lambda: [])
    help_text: str | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

        if self.location is None:
            user_frame = _find_user_frame()
            if user_frame is not None:
                self.location = SourceLocation.from_frame(user_frame)

    def with_note(self, note: str) -> TaskrunError:
        self.notes.append(note)
        return self

    def with_help(self, help_text: str) -> TaskrunError:
        self.help_text = help_text
        return self

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        if use_colors is None:
            use_colors = _should_use_colors()

        c = _Colors if use_colors else _NoColors
        code_part = f'[{self.code.value}]' if self.code else ''
        lines: list[str] = [
            '',
            f'{c.BOLD}{c.RED}error{code_part}:{c.RESET} {self.message}',
        ]

        if self.location:
            lines.append(
                f'  {c.BLUE}-->{c.RESET} {c.CYAN}{self.location.format_short()}{c.RESET}'
            )
            source_line = self.location.get_source_line()
            if source_line:
                line_num = str(self.location.line)
                padding = ' ' * len(line_num)
                stripped = source_line.lstrip()
                underline = ' ' * (len(source_line) - len(stripped)) + '^' * len(stripped)
                lines.append(f'   {c.BLUE}{padding}|{c.RESET}')
                lines.append(f'   {c.BLUE}{line_num}|{c.RESET} {source_line}')
                lines.append(f'   {c.BLUE}{padding}|{c.RESET} {c.RED}{underline}{c.RESET}')

        for note in self.notes:
            first, *rest = note.split('\n')
            lines.append(f'   {c.BLUE}={c.RESET} {c.BOLD}{c.BLUE}note{c.RESET}: {first}')
            lines.extend(f'          {line}' for line in rest)

        if self.help_text:
            lines.append('')
            lines.append(f'   {c.BLUE}={c.RESET} {c.BOLD}{c.GREEN}help{c.RESET}:')
            lines.extend(f'        {line}' for line in self.help_text.split('\n'))

        return '\n'.join(lines)

    def __str__(self) -> str:
        # Plain text keeps the string safe for logs and result metadata.
        return self.format_rust_style(use_colors=False)


_original_excepthook = sys.excepthook


def _taskrun_excepthook(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_tb: Any,
) -> None:
    """Custom exception hook for TaskrunError exceptions."""
    if _should_use_plain_errors() or not isinstance(exc_value, TaskrunError):
        _original_excepthook(exc_type, exc_value, exc_tb)
        return

    print(exc_value.format_rust_style(), file=sys.stderr)

    if _should_show_verbose():
        c = _Colors if _should_use_colors() else _NoColors
        print(file=sys.stderr)
        print(f'{c.DIM}Full traceback (TASKRUN_VERBOSE=1):{c.RESET}', file=sys.stderr)
        traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.stderr)


def install_error_handler() -> None:
    """Install the custom exception hook for Rust-style error display."""
    sys.excepthook = _taskrun_excepthook


def uninstall_error_handler() -> None:
    """Restore the original exception hook."""
    sys.excepthook = _original_excepthook


# =============================================================================
# Definition / Configuration Errors
# =============================================================================


@dataclass
class TaskDefinitionError(TaskrunError):
    """Raised when a task, attribute or workflow definition is invalid."""

    pass


@dataclass
class ConfigurationError(TaskrunError):
    """Raised when runtime or task settings are invalid."""

    pass


@dataclass
class RegistryError(TaskrunError):
    """Raised when a handler/callback registry operation fails."""

    pass


@dataclass
class UndefinedMethodError(TaskDefinitionError):
    """Raised when a task class does not implement `work()`.

    Signals a programming error: the worker never retries it and always
    re-raises it to the caller.
    """

    pass


@dataclass
class DeprecationError(TaskrunError):
    """Raised when a task whose `deprecate` setting prohibits use is instantiated."""

    pass


@dataclass
class FrozenError(TaskrunError):
    """Raised when a sealed task, result, context or chain is mutated."""

    pass


@dataclass
class TransitionError(TaskrunError):
    """Raised when a result state/status transition is not allowed."""

    pass


# =============================================================================
# Resolution Errors (recorded into task errors, never propagated)
# =============================================================================


class CoercionError(Exception):
    """Raised by a coercion handler when a value cannot be converted."""


class ValidationError(Exception):
    """Raised by a validator handler when a value breaks its constraint."""


# =============================================================================
# Phase-Gated Error Collection
# =============================================================================


class ValidationReport:
    """Collects multiple TaskrunError instances within a validation phase."""

    def __init__(self, phase_name: str) -> None:
        self.phase_name: str = phase_name
        self.errors: list[TaskrunError] = []

    def add(self, error: TaskrunError) -> None:
        self.errors.append(error)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        """Format all collected errors, then append an aborting summary."""
        if use_colors is None:
            use_colors = _should_use_colors()

        c = _Colors if use_colors else _NoColors
        parts = [error.format_rust_style(use_colors=use_colors) for error in self.errors]
        parts.append(
            f'\n{c.BOLD}{c.RED}error{c.RESET}: aborting due to {len(self.errors)} previous errors'
        )
        return '\n'.join(parts)

    def __str__(self) -> str:
        return self.format_rust_style(use_colors=False)


@dataclass
class MultipleValidationErrors(TaskrunError):
    """Wraps a ValidationReport containing 2+ errors."""

    report: ValidationReport = field(default_factory=lambda: ValidationReport(''))

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f'aborting due to {len(self.report.errors)} previous errors'
        # Location is per-error in the report
        Exception.__init__(self, self.message)

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        return self.report.format_rust_style(use_colors=use_colors)

    def __str__(self) -> str:
        return self.format_rust_style(use_colors=False)


def raise_collected(report: ValidationReport) -> None:
    """Raise collected errors.

    - 0 errors: no-op
    - 1 error: raises the original error (preserves except clauses)
    - 2+ errors: raises MultipleValidationErrors wrapping the report
    """
    count = len(report.errors)
    if count == 0:
        return
    if count == 1:
        raise report.errors[0]
    raise MultipleValidationErrors(
        message=f'aborting due to {count} previous errors',
        report=report,
    )


# =============================================================================
# Helpers
# =============================================================================


def _find_user_frame() -> Any | None:
    """Find the first frame outside of taskrun internals."""
    frame = inspect.currentframe()

    while frame is not None:
        filename = frame.f_code.co_filename
        if (
            not filename.startswith('<')
            and not filename.startswith(_TASKRUN_PKG_DIR)
            and '/site-packages/' not in filename
        ):
            return frame
        frame = frame.f_back

    return None


def task_definition_error(
    message: str,
    *,
    code: ErrorCode | None = None,
    obj: Callable[..., Any] | type | None = None,
    notes: list[str] | None = None,
    help_text: str | None = None,
) -> TaskDefinitionError:
    """Create a TaskDefinitionError located at the offending function or class."""
    location = SourceLocation.from_object(obj) if obj is not None else None

    return TaskDefinitionError(
        message=message,
        code=code,
        location=location,
        notes=notes or [],
        help_text=help_text,
    )
