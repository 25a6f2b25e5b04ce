"""
treefs Logger Module

Structured logging for the simulated file system:
- Per-component loggers ('vfs', 'persistence', 'shell', ...)
- Contextual key=value data attached to each record
- Console output on stderr so it never mixes with command output
- Optional log file

Version: 1.0.0
"""

import logging
import sys
import threading
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional, Any


class LogLevel(IntEnum):
    """Log level enumeration with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def from_name(cls, name: str) -> 'LogLevel':
        """Look up a level by case-insensitive name."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {name}") from None


class LogFormatter(logging.Formatter):
    """
    Custom log formatter.

    Produces lines like:
        [2026-01-01 12:00:00.123] DEBUG    [vfs] Created file {ino=3 name=notes}
    """

    # ANSI color codes for terminal output
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, stream=None):
        super().__init__()
        self.use_colors = use_colors and self._supports_color(stream or sys.stderr)

    @staticmethod
    def _supports_color(stream) -> bool:
        """Check if the stream is a terminal."""
        if not hasattr(stream, 'isatty'):
            return False
        return stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        timestamp = datetime.fromtimestamp(record.created).strftime(
            '%Y-%m-%d %H:%M:%S.%f'
        )[:-3]

        level = record.levelname

        if self.use_colors and level in self.COLORS:
            level_display = f"{self.COLORS[level]}{level:8s}{self.RESET}"
        else:
            level_display = f"{level:8s}"

        components = [f"[{timestamp}]", level_display]

        if hasattr(record, 'subsystem'):
            components.append(f"[{record.subsystem}]")

        components.append(str(record.getMessage()))

        if hasattr(record, 'context') and record.context:
            context_str = " ".join(f"{k}={v}" for k, v in record.context.items())
            components.append(f"{{{context_str}}}")

        message = " ".join(components)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class Logger:
    """
    Component logger.

    One instance exists per component name; asking for the same name
    twice returns the same object.

    Example:
        >>> log = Logger('vfs')
        >>> log.info("Tree reset", context={'nodes': 1})
    """

    _instances: dict[str, 'Logger'] = {}
    _lock = threading.Lock()
    _initialized = False
    _global_level: int = LogLevel.WARNING

    def __new__(cls, subsystem: str = 'treefs') -> 'Logger':
        """Get or create a logger for a component."""
        with cls._lock:
            if subsystem not in cls._instances:
                instance = super().__new__(cls)
                instance._subsystem = subsystem
                instance._logger = logging.getLogger(f'treefs.{subsystem}')
                cls._instances[subsystem] = instance
            return cls._instances[subsystem]

    @property
    def name(self) -> str:
        return self._subsystem

    @classmethod
    def initialize(
        cls,
        level: int = LogLevel.WARNING,
        log_file: Optional[str] = None,
        use_colors: bool = True
    ) -> None:
        """
        Install handlers on the 'treefs' logger.

        Only the first call has an effect.

        Args:
            level: Minimum log level to capture
            log_file: Optional file path for log output
            use_colors: Whether to use ANSI colors in console output
        """
        with cls._lock:
            if cls._initialized:
                return

            cls._global_level = level

            root_logger = logging.getLogger('treefs')
            root_logger.setLevel(level)

            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(
                LogFormatter(use_colors=use_colors, stream=sys.stderr)
            )
            root_logger.addHandler(console_handler)

            if log_file:
                file_path = Path(log_file)
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_file, encoding='utf-8')
                file_handler.setLevel(level)
                file_handler.setFormatter(LogFormatter(use_colors=False))
                root_logger.addHandler(file_handler)

            cls._initialized = True

    def _log(
        self,
        level: int,
        message: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Internal logging method."""
        extra = {
            'subsystem': self._subsystem,
            'context': context or {},
        }
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log a debug message."""
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log an error message."""
        self._log(LogLevel.ERROR, message, context)


def get_logger(subsystem: str) -> Logger:
    """
    Get a logger for the specified component.

    Args:
        subsystem: Name of the component (e.g., 'vfs', 'shell')

    Returns:
        Logger instance for the component
    """
    return Logger(subsystem)
