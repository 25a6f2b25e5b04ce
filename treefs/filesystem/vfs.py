"""
Virtual File System (VFS) Module

The tree engine:
- Root and current-directory cursor
- Creation, rename and recursive removal of nodes
- Owner permission enforcement for read/write/execute
- Depth-first listing, find and search
- Path reconstruction from parent links

Names always resolve against the direct children of the current
directory: first match, case-sensitive, exact equality. Sibling names
are not required to be unique.

Version: 1.0.0
"""

import threading
from typing import Optional, Any, Iterator, List, Tuple, Union

from .inode_table import InodeTable, ROOT_INO
from .node import Node, NodeKind
from .permissions import (
    Permission,
    can_read,
    can_write,
    can_execute,
    parse_mode,
    format_mode,
)
from treefs.core.config_loader import get_config
from treefs.exceptions import (
    NodeNotFoundError,
    PermissionDeniedError,
    NotAFileError,
    NotADirectoryError,
)
from treefs.logger import get_logger


class VirtualFileSystem:
    """
    In-memory file system tree.

    Example:
        >>> vfs = VirtualFileSystem()
        >>> vfs.create_directory('docs')
        >>> vfs.change_directory('docs')
        >>> vfs.create_file('notes', 'hello')
        >>> vfs.current_path()
        '/docs'
    """

    def __init__(
        self,
        file_mode: Union[str, int, Permission, None] = None,
        dir_mode: Union[str, int, Permission, None] = None
    ):
        self._logger = get_logger('vfs')
        config = get_config()
        self._file_mode = parse_mode(
            config.filesystem.default_file_mode if file_mode is None else file_mode
        )
        self._dir_mode = parse_mode(
            config.filesystem.default_dir_mode if dir_mode is None else dir_mode
        )
        self._lock = threading.RLock()
        self._inodes = InodeTable()
        self._cwd = ROOT_INO
        self._create_root()

    def _create_root(self) -> Node:
        root = Node(
            ino=ROOT_INO,
            name='/',
            kind=NodeKind.DIRECTORY,
            permissions=self._dir_mode
        )
        self._inodes.add(root)
        return root

    @property
    def inode_table(self) -> InodeTable:
        return self._inodes

    @property
    def root(self) -> Node:
        return self._inodes[ROOT_INO]

    @property
    def cwd(self) -> Node:
        """The current directory node."""
        return self._inodes[self._cwd]

    @property
    def default_file_mode(self) -> Permission:
        return self._file_mode

    @property
    def default_dir_mode(self) -> Permission:
        return self._dir_mode

    def replace_table(self, table: InodeTable) -> None:
        """
        Swap in a fully built inode table and move the cursor to root.

        Raises:
            ValueError: If the table has no directory at the root id
        """
        root = table.get(ROOT_INO)
        if root is None or not root.is_directory:
            raise ValueError("Inode table has no root directory")
        with self._lock:
            self._inodes = table
            self._cwd = ROOT_INO
        self._logger.info("Inode table replaced", context={'nodes': len(table)})

    # Name resolution

    def _child(self, name: str) -> Optional[Node]:
        """First direct child of the current directory called ``name``."""
        for ino in self.cwd.children:
            child = self._inodes[ino]
            if child.name == name:
                return child
        return None

    def _require_child(self, name: str) -> Node:
        child = self._child(name)
        if child is None:
            raise NodeNotFoundError(name)
        return child

    def stat(self, name: str) -> Node:
        """
        Get the node of a direct child.

        Raises:
            NodeNotFoundError: If no child has that name
        """
        return self._require_child(name)

    def exists(self, name: str) -> bool:
        return self._child(name) is not None

    # Structural operations

    def _create(
        self,
        name: str,
        kind: NodeKind,
        permissions: Permission,
        content: str = ""
    ) -> Node:
        with self._lock:
            parent = self.cwd
            node = Node(
                ino=self._inodes.allocate(),
                name=name,
                kind=kind,
                permissions=permissions,
                parent=parent.ino,
                _content=content
            )
            self._inodes.add(node)
            parent.add_child(node.ino)

        self._logger.debug(
            f"Created {kind.name.lower()}",
            context={'ino': node.ino, 'name': name, 'parent': parent.ino}
        )
        return node

    def create_file(self, name: str, content: str = "") -> Node:
        """
        Create a file in the current directory.

        Args:
            name: Name of the new file
            content: Initial content

        Returns:
            The new node
        """
        return self._create(name, NodeKind.FILE, self._file_mode, content)

    def create_directory(self, name: str) -> Node:
        """
        Create a directory in the current directory.

        Args:
            name: Name of the new directory

        Returns:
            The new node
        """
        return self._create(name, NodeKind.DIRECTORY, self._dir_mode)

    def rename(self, old_name: str, new_name: str) -> Node:
        """
        Rename a direct child in place.

        Raises:
            NodeNotFoundError: If no child is called ``old_name``
        """
        with self._lock:
            node = self._require_child(old_name)
            node.name = new_name

        self._logger.debug(
            "Renamed node",
            context={'ino': node.ino, 'old': old_name, 'new': new_name}
        )
        return node

    def remove(self, name: str) -> List[int]:
        """
        Delete a direct child and its entire subtree.

        Every removed id leaves the inode table.

        Returns:
            Removed ids, the child first

        Raises:
            NodeNotFoundError: If no child has that name
        """
        with self._lock:
            node = self._require_child(name)
            removed = [node.ino] + [ino for _, _, ino in self._walk(node.ino)]
            self.cwd.remove_child(node.ino)
            for ino in removed:
                self._inodes.remove(ino)

        self._logger.debug(
            "Removed subtree",
            context={'name': name, 'ino': node.ino, 'count': len(removed)}
        )
        return removed

    def change_directory(self, target: str) -> Node:
        """
        Move the cursor.

        Args:
            target: '..' for the parent, '/' for the root, otherwise the
                name of a child directory

        Returns:
            The new current directory

        Raises:
            NodeNotFoundError: If no child has that name
            NotADirectoryError: If the child is a file
        """
        with self._lock:
            if target == '..':
                parent = self.cwd.parent
                if parent is not None:
                    self._cwd = parent
            elif target == '/':
                self._cwd = ROOT_INO
            else:
                node = self._require_child(target)
                if not node.is_directory:
                    raise NotADirectoryError(target)
                self._cwd = node.ino
            return self.cwd

    # Traversal

    def _walk(self, start: int) -> Iterator[Tuple[int, str, int]]:
        """
        Depth-first pre-order walk below ``start``.

        Yields:
            (depth, path, ino) for every descendant; depth 0 is a direct
            child of ``start``
        """
        base = '' if start == ROOT_INO else self.path_of(start)
        stack = [(0, base, ino) for ino in reversed(self._inodes[start].children)]

        while stack:
            depth, parent_path, ino = stack.pop()
            node = self._inodes[ino]
            path = f"{parent_path}/{node.name}"
            yield depth, path, ino
            if node.is_directory:
                stack.extend(
                    (depth + 1, path, child) for child in reversed(node.children)
                )

    def list(self) -> List[Node]:
        """Direct children of the current directory in insertion order."""
        return [self._inodes[ino] for ino in self.cwd.children]

    def list_recursive(self) -> List[Tuple[int, Node]]:
        """Every node below the current directory as (depth, node), pre-order."""
        return [(depth, self._inodes[ino]) for depth, _, ino in self._walk(self._cwd)]

    def find(self, name: str) -> List[Node]:
        """Every node in the tree called ``name``, pre-order from the root."""
        return [
            self._inodes[ino]
            for _, _, ino in self._walk(ROOT_INO)
            if self._inodes[ino].name == name
        ]

    def search(self, name: str) -> List[Tuple[str, Node]]:
        """Like ``find``, with the full path of each match."""
        return [
            (path, self._inodes[ino])
            for _, path, ino in self._walk(ROOT_INO)
            if self._inodes[ino].name == name
        ]

    def path_of(self, ino: int) -> str:
        """
        Reconstruct the path of a node by walking parent links.

        Raises:
            NodeNotFoundError: If the id is not registered
        """
        node = self._inodes.get(ino)
        if node is None:
            raise NodeNotFoundError(str(ino), scope="tree")

        parts: List[str] = []
        while node.parent is not None:
            parts.append(node.name)
            node = self._inodes[node.parent]

        if not parts:
            return '/'
        return '/' + '/'.join(reversed(parts))

    def current_path(self) -> str:
        """Path of the current directory; the root is '/'."""
        return self.path_of(self._cwd)

    # Permission-gated operations

    def set_permissions(self, name: str, mode: Union[str, int, Permission]) -> Node:
        """
        Replace a child's permission mask.

        Args:
            name: Child name
            mode: Octal text ("755"), an integer mask or a Permission

        Raises:
            NodeNotFoundError: If no child has that name
            InvalidModeError: If the mode is not a valid mask
        """
        permissions = parse_mode(mode)
        with self._lock:
            node = self._require_child(name)
            node.chmod(permissions)

        self._logger.debug(
            "Changed permissions",
            context={'ino': node.ino, 'mode': format_mode(permissions)}
        )
        return node

    def read(self, name: str) -> str:
        """
        Read a file's content.

        Raises:
            NodeNotFoundError: If no child has that name
            NotAFileError: If the child is a directory
            PermissionDeniedError: If the owner read bit is clear
        """
        with self._lock:
            node = self._require_child(name)
            if not node.is_file:
                raise NotAFileError(name)
            if not can_read(node.permissions):
                raise PermissionDeniedError(name, operation="read")
            return node.content

    def write(self, name: str, content: str) -> Node:
        """
        Replace a file's content; the size follows.

        Raises:
            NodeNotFoundError: If no child has that name
            NotAFileError: If the child is a directory
            PermissionDeniedError: If the owner write bit is clear
        """
        with self._lock:
            node = self._require_child(name)
            if not node.is_file:
                raise NotAFileError(name)
            if not can_write(node.permissions):
                raise PermissionDeniedError(name, operation="write")
            size = node.write(content)

        self._logger.debug("Wrote file", context={'ino': node.ino, 'size': size})
        return node

    def execute(self, name: str) -> Node:
        """
        Check that a child may be executed. Nothing is run.

        Raises:
            NodeNotFoundError: If no child has that name
            PermissionDeniedError: If the owner execute bit is clear
        """
        with self._lock:
            node = self._require_child(name)
            if not can_execute(node.permissions):
                raise PermissionDeniedError(name, operation="execute")

        self._logger.debug("Executed node", context={'ino': node.ino})
        return node

    # Introspection

    def inodes(self) -> List[Tuple[int, Node]]:
        """Every registered (id, node) pair in ascending id order."""
        return self._inodes.items()

    def get_stats(self) -> dict[str, Any]:
        """Get filesystem statistics."""
        nodes = [node for _, node in self._inodes.items()]
        return {
            'total_inodes': len(nodes),
            'files': sum(1 for node in nodes if node.is_file),
            'directories': sum(1 for node in nodes if node.is_directory),
            'total_size': sum(node.size for node in nodes),
            'next_ino': self._inodes.next_ino,
        }
