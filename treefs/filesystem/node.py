"""
Node Module

The tree element of the simulated file system. A node is a file or a
directory; structure is expressed through ids, never object references:
each node stores the id of its parent and the ids of its children, and
the InodeTable owns the nodes themselves.

Version: 1.0.0
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any, List

from .permissions import Permission, format_mode, symbolic


class NodeKind(Enum):
    """Kinds of node."""
    FILE = 1
    DIRECTORY = 2

    @property
    def label(self) -> str:
        return "DIR" if self is NodeKind.DIRECTORY else "FILE"


@dataclass
class Node:
    """
    A file or directory.

    ``size`` is derived from ``content`` and cannot be set directly.
    ``created_at`` is fixed when the node is built.
    """

    ino: int
    name: str
    kind: NodeKind
    permissions: Permission = Permission.DEFAULT_FILE
    parent: Optional[int] = None
    created_at: float = field(default_factory=time.time)

    _content: str = field(default="", repr=False)

    # Directories only: child ids in insertion order
    children: List[int] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.is_directory and self._content:
            raise ValueError("Directories cannot carry content")

    @property
    def is_directory(self) -> bool:
        return self.kind == NodeKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind == NodeKind.FILE

    @property
    def content(self) -> str:
        return self._content

    @property
    def size(self) -> int:
        """UTF-8 byte length of the content; always 0 for directories."""
        if self.is_directory:
            return 0
        return len(self._content.encode('utf-8', errors='surrogatepass'))

    def write(self, content: str) -> int:
        """
        Replace the file content.

        Returns:
            New size in bytes
        """
        if not self.is_file:
            raise ValueError("Not a file")
        self._content = content
        return self.size

    def chmod(self, permissions: Permission) -> None:
        """Replace the permission mask wholesale."""
        self.permissions = permissions

    # Directory operations

    def add_child(self, ino: int) -> None:
        """Append a child id."""
        if not self.is_directory:
            raise ValueError("Not a directory")
        self.children.append(ino)

    def remove_child(self, ino: int) -> None:
        """Remove a child id."""
        if not self.is_directory:
            raise ValueError("Not a directory")
        self.children.remove(ino)

    def to_dict(self) -> dict[str, Any]:
        """Convert node to dictionary for display."""
        return {
            'ino': self.ino,
            'name': self.name,
            'type': self.kind.label,
            'mode': format_mode(self.permissions),
            'symbolic': symbolic(self.permissions, self.is_directory),
            'size': self.size,
            'parent': self.parent,
            'created': time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(self.created_at)),
        }
