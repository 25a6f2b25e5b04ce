"""
Configuration Exceptions

Exceptions related to loading and validating configuration.

Version: 1.0.0
"""

from typing import Optional, Any


class ConfigException(Exception):
    """
    Base exception for configuration errors.

    Example:
        >>> raise ConfigException("Bad configuration", error_code=1000)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or 1000
        self.context = context or {}

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({context_str})"
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code})"
        )


class ConfigLoadError(ConfigException):
    """The configuration file is missing, unreadable or not valid JSON."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message, error_code=1001, context=ctx)
        self.path = path


class ConfigValidationError(ConfigException):
    """A configuration key or value is invalid."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        super().__init__(message, error_code=1002, context=ctx)
        self.key = key
