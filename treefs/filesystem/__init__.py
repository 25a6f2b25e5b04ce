"""
treefs Virtual File System Module

Provides the simulated file system:
- Node tree with parent/child ids
- Inode table keyed by stable ids
- Owner permission model
- Save/load codec
"""

from .permissions import Permission, parse_mode, format_mode, symbolic
from .node import Node, NodeKind
from .inode_table import InodeTable, ROOT_INO
from .vfs import VirtualFileSystem
from .persistence import StateCodec, NodeRecord, LoadReport, save_state, load_state

__all__ = [
    # Permissions
    'Permission',
    'parse_mode',
    'format_mode',
    'symbolic',
    # Nodes
    'Node',
    'NodeKind',
    'InodeTable',
    'ROOT_INO',
    # VFS
    'VirtualFileSystem',
    # Persistence
    'StateCodec',
    'NodeRecord',
    'LoadReport',
    'save_state',
    'load_state',
]
