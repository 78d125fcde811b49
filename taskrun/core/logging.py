# taskrun/core/logging.py
"""
Component loggers for taskrun.

Every logger is named `taskrun.<component>` and writes one line per record:

    [12:04:31] [worker]     [INFO]    task=Greet id=... state=complete status=success

Records logged with `extra={'status': ...}` color their message by result
status instead of plain white.
"""

import logging
import sys
from datetime import datetime

# Changed by set_default_level(), which also retunes existing loggers
_default_level: int = logging.INFO

RESET = '\033[0m'
TIME_COLOR = '\033[94m'
TEXT_COLOR = '\033[97m'

LEVEL_COLORS = {
    'DEBUG': '\033[90m',
    'INFO': '\033[92m',
    'WARNING': '\033[93m',
    'ERROR': '\033[91m',
    'CRITICAL': '\033[1;91m',
}

STATUS_COLORS = {
    'success': '\033[92m',
    'skipped': '\033[93m',
    'failed': '\033[91m',
}


class ColoredFormatter(logging.Formatter):
    """Aligned `[time] [component] [level] message` lines."""

    component_width = 13  # [attributes] is 12 chars
    level_width = 10  # [WARNING] is 9 chars

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        component = f'[{record.name.rpartition(".")[2]}]'.ljust(self.component_width)
        level = f'[{record.levelname}]'.ljust(self.level_width)

        level_color = LEVEL_COLORS.get(record.levelname, TEXT_COLOR)
        message_color = STATUS_COLORS.get(getattr(record, 'status', None), TEXT_COLOR)

        line = (
            f'{TIME_COLOR}[{stamp}]{RESET} '
            f'{TEXT_COLOR}{component}{RESET}'
            f'{level_color}{level}{RESET}'
            f'{message_color}{record.getMessage()}{RESET}'
        )
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def set_default_level(level: int) -> None:
    """Set the level of every taskrun logger, existing and future."""
    global _default_level
    _default_level = level

    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not name.startswith('taskrun.') or not isinstance(logger, logging.Logger):
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def get_logger(component_name: str) -> logging.Logger:
    """Logger for one taskrun component, configured once."""
    logger = logging.getLogger(f'taskrun.{component_name}')

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColoredFormatter())
        handler.setLevel(_default_level)
        logger.addHandler(handler)
        logger.setLevel(_default_level)
        logger.propagate = False

    return logger
