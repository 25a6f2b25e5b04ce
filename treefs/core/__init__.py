"""
treefs Core Module

Configuration shared by every component.
"""

from .config_loader import (
    Config,
    ConfigLoader,
    FilesystemConfig,
    PersistenceConfig,
    LoggingConfig,
    ShellConfig,
    get_config,
)

__all__ = [
    'Config',
    'ConfigLoader',
    'FilesystemConfig',
    'PersistenceConfig',
    'LoggingConfig',
    'ShellConfig',
    'get_config',
]
