"""
treefs - An In-Memory Hierarchical File System Simulation

A tree of files and directories with owner permissions, an inode table,
a flat save/load format and a line-oriented command shell, implemented
in Python 3.10+ using only the standard library.
"""

__version__ = "1.0.0"

# Import main components for convenience
from .filesystem.vfs import VirtualFileSystem
from .shell.shell import Shell, create_shell

__all__ = [
    'VirtualFileSystem',
    'Shell',
    'create_shell',
]
