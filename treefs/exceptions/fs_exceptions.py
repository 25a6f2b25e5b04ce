"""
Filesystem Exceptions

Exceptions raised by the tree engine, the permission model and the
persistence codec. All of them are recoverable: the shell turns them
into a user-visible message and keeps running.

Version: 1.0.0
"""

from typing import Optional, Any


class FileSystemException(Exception):
    """
    Base exception for all filesystem-related errors.

    Attributes:
        message: Human-readable error description
        path: Name or path associated with the error (if applicable)
        error_code: Numeric error code for programmatic handling
        context: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.error_code = error_code or 4000
        self.context = context or {}
        if path:
            self.context["path"] = path

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.path:
            base = f"{base} (path={self.path})"
        return base


class NodeNotFoundError(FileSystemException):
    """
    A name did not resolve within the expected scope.

    The scope is either the current directory (``directory``) or the
    whole tree (``tree``).

    Example:
        >>> raise NodeNotFoundError("notes")
    """

    def __init__(
        self,
        name: str,
        scope: str = "directory",
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["scope"] = scope
        super().__init__(
            message=f"Item not found: {name}",
            path=name,
            error_code=4001,
            context=ctx
        )
        self.name = name
        self.scope = scope


class PermissionDeniedError(FileSystemException):
    """
    The owner bit required by an operation is not set.

    Example:
        >>> raise PermissionDeniedError("script.sh", operation="execute")
    """

    def __init__(
        self,
        path: str,
        operation: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(
            message="Permission denied",
            path=path,
            error_code=4003,
            context=ctx
        )
        self.operation = operation


class NotAFileError(FileSystemException):
    """
    A content operation was attempted on a directory.

    Example:
        >>> raise NotAFileError("docs")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Not a file: {path}",
            path=path,
            error_code=4008,
            context=context
        )


class NotADirectoryError(FileSystemException):
    """
    A directory operation was attempted on a file.

    Example:
        >>> raise NotADirectoryError("notes")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Not a directory: {path}",
            path=path,
            error_code=4009,
            context=context
        )


class InvalidModeError(FileSystemException):
    """Permission text is not a valid octal mask."""

    def __init__(
        self,
        mode: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["mode"] = mode
        super().__init__(
            message=f"Invalid mode: {mode}",
            error_code=4010,
            context=ctx
        )
        self.mode = mode


class PersistenceError(FileSystemException):
    """Base exception for save/load failures."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            path=path,
            error_code=error_code or 4100,
            context=context
        )


class PersistenceIOError(PersistenceError):
    """
    The state file could not be opened for saving or loading.

    Example:
        >>> raise PersistenceIOError("/tmp/state.txt", operation="load")
    """

    def __init__(
        self,
        path: str,
        operation: str,
        reason: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["operation"] = operation
        if reason:
            ctx["reason"] = reason
        super().__init__(
            message=f"Error opening file for {operation}: {path}",
            path=path,
            error_code=4101,
            context=ctx
        )
        self.operation = operation
        self.reason = reason


class MalformedRecordError(PersistenceError):
    """
    A persisted line does not parse into a node record.

    Example:
        >>> raise MalformedRecordError(3, "x y", reason="too few fields")
    """

    def __init__(
        self,
        line_number: int,
        line: str,
        reason: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["line"] = line_number
        ctx["reason"] = reason
        super().__init__(
            message=f"Malformed record on line {line_number}: {reason}",
            error_code=4102,
            context=ctx
        )
        self.line_number = line_number
        self.line = line
        self.reason = reason
