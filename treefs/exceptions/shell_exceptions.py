"""
Shell Exceptions

Exceptions raised while interpreting command lines.

Version: 1.0.0
"""

from typing import Optional, Any


class ShellException(Exception):
    """
    Base exception for command interpretation errors.

    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
        context: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or 5000
        self.context = context or {}

    def __str__(self) -> str:
        return f"[Error {self.error_code}] {self.message}"


class UnknownCommandError(ShellException):
    """
    The first word of a line names no command.

    Example:
        >>> raise UnknownCommandError("frobnicate")
    """

    def __init__(self, command: str) -> None:
        super().__init__(
            message=f"Unknown command: {command}",
            error_code=5001,
            context={"command": command}
        )
        self.command = command


class UsageError(ShellException):
    """A command was given the wrong arguments."""

    def __init__(self, command: str, usage: str) -> None:
        super().__init__(
            message=f"usage: {usage}",
            error_code=5002,
            context={"command": command}
        )
        self.command = command
        self.usage = usage


class HistoryIndexError(ShellException):
    """
    A replay index does not address a history entry.

    Example:
        >>> raise HistoryIndexError(7, size=3)
    """

    def __init__(self, index: Any, size: int) -> None:
        super().__init__(
            message=f"Invalid command index: {index}",
            error_code=5003,
            context={"index": index, "size": size}
        )
        self.index = index
        self.size = size
