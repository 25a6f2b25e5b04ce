"""
treefs Shell Module

Provides the interactive command interpreter:
- Command parsing
- Built-in commands
- Command history and replay
"""

from .parser import CommandParser, ParsedCommand, Token
from .history import CommandHistory
from .builtins import BuiltinCommands, CommandResult
from .shell import Shell, create_shell

__all__ = [
    'CommandParser',
    'ParsedCommand',
    'Token',
    'CommandHistory',
    'BuiltinCommands',
    'CommandResult',
    'Shell',
    'create_shell',
]
