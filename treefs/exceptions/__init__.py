"""
treefs Exception Hierarchy

Architecture:
    FileSystemException
    ├── NodeNotFoundError
    ├── PermissionDeniedError
    ├── NotAFileError
    ├── NotADirectoryError
    ├── InvalidModeError
    └── PersistenceError
        ├── PersistenceIOError
        └── MalformedRecordError
    ShellException
    ├── UnknownCommandError
    ├── UsageError
    └── HistoryIndexError
    ConfigException
    ├── ConfigLoadError
    └── ConfigValidationError
"""

from .fs_exceptions import (
    FileSystemException,
    NodeNotFoundError,
    PermissionDeniedError,
    NotAFileError,
    NotADirectoryError,
    InvalidModeError,
    PersistenceError,
    PersistenceIOError,
    MalformedRecordError,
)

from .shell_exceptions import (
    ShellException,
    UnknownCommandError,
    UsageError,
    HistoryIndexError,
)

from .config_exceptions import (
    ConfigException,
    ConfigLoadError,
    ConfigValidationError,
)

__all__ = [
    # Filesystem exceptions
    "FileSystemException",
    "NodeNotFoundError",
    "PermissionDeniedError",
    "NotAFileError",
    "NotADirectoryError",
    "InvalidModeError",
    "PersistenceError",
    "PersistenceIOError",
    "MalformedRecordError",
    # Shell exceptions
    "ShellException",
    "UnknownCommandError",
    "UsageError",
    "HistoryIndexError",
    # Config exceptions
    "ConfigException",
    "ConfigLoadError",
    "ConfigValidationError",
]
