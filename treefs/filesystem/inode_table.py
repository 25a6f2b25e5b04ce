"""
Inode Table

The registry of every node in the tree, keyed by a stable integer id.
Id 0 is the root; ids handed out by ``allocate`` start at 1, increase
monotonically and are never reused.
"""

import threading
from typing import Iterator, Optional, List, Tuple

from .node import Node


ROOT_INO = 0


class InodeTable:
    """
    Arena of nodes keyed by id.

    Example:
        >>> table = InodeTable()
        >>> ino = table.allocate()
        >>> table.add(Node(ino=ino, name='notes', kind=NodeKind.FILE))
    """

    def __init__(self):
        self._nodes: dict[int, Node] = {}
        self._next_ino = ROOT_INO + 1
        self._lock = threading.Lock()

    @property
    def next_ino(self) -> int:
        return self._next_ino

    def allocate(self) -> int:
        """Reserve a new id."""
        with self._lock:
            ino = self._next_ino
            self._next_ino += 1
            return ino

    def add(self, node: Node) -> None:
        """
        Register a node under its id.

        Raises:
            ValueError: If the id is already registered
        """
        with self._lock:
            if node.ino in self._nodes:
                raise ValueError(f"Inode {node.ino} already registered")
            self._nodes[node.ino] = node
            if node.ino >= self._next_ino:
                self._next_ino = node.ino + 1

    def advance(self, next_ino: int) -> None:
        """Move the counter forward to ``next_ino``; never moves it back."""
        with self._lock:
            self._next_ino = max(self._next_ino, next_ino)

    def get(self, ino: int) -> Optional[Node]:
        return self._nodes.get(ino)

    def remove(self, ino: int) -> Optional[Node]:
        with self._lock:
            return self._nodes.pop(ino, None)

    def items(self) -> List[Tuple[int, Node]]:
        """All (id, node) pairs in ascending id order."""
        return sorted(self._nodes.items())

    def __getitem__(self, ino: int) -> Node:
        return self._nodes[ino]

    def __contains__(self, ino: object) -> bool:
        return ino in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._nodes))
