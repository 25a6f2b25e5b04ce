"""
Tree Engine Tests

Covers nodes, the inode table and the VirtualFileSystem operations.
"""

import threading
import unittest

from treefs.core.config_loader import ConfigLoader
from treefs.exceptions import (
    NodeNotFoundError,
    PermissionDeniedError,
    NotAFileError,
    NotADirectoryError,
    InvalidModeError,
)
from treefs.filesystem.inode_table import InodeTable, ROOT_INO
from treefs.filesystem.node import Node, NodeKind
from treefs.filesystem.permissions import Permission, format_mode
from treefs.filesystem.vfs import VirtualFileSystem


def reachable(vfs: VirtualFileSystem) -> set:
    """Ids reachable from the root by following child links."""
    seen = set()
    stack = [ROOT_INO]
    while stack:
        ino = stack.pop()
        seen.add(ino)
        stack.extend(vfs.inode_table[ino].children)
    return seen


class TestNode(unittest.TestCase):
    """Test the Node data model."""

    def test_size_is_utf8_length(self):
        node = Node(ino=1, name='notes', kind=NodeKind.FILE, _content='héllo')
        self.assertEqual(node.size, 6)
        self.assertEqual(node.write('abc'), 3)
        self.assertEqual(node.size, 3)

    def test_directory_size_is_zero(self):
        node = Node(ino=1, name='docs', kind=NodeKind.DIRECTORY)
        self.assertEqual(node.size, 0)
        self.assertTrue(node.is_directory)

    def test_directory_rejects_content(self):
        with self.assertRaises(ValueError):
            Node(ino=1, name='docs', kind=NodeKind.DIRECTORY, _content='x')

    def test_file_rejects_children(self):
        node = Node(ino=1, name='notes', kind=NodeKind.FILE)
        with self.assertRaises(ValueError):
            node.add_child(2)

    def test_labels(self):
        self.assertEqual(NodeKind.DIRECTORY.label, "DIR")
        self.assertEqual(NodeKind.FILE.label, "FILE")

    def test_to_dict(self):
        node = Node(ino=4, name='notes', kind=NodeKind.FILE, parent=0, _content='hi')
        info = node.to_dict()
        self.assertEqual(info['ino'], 4)
        self.assertEqual(info['type'], 'FILE')
        self.assertEqual(info['mode'], '644')
        self.assertEqual(info['symbolic'], '-rw-r--r--')
        self.assertEqual(info['size'], 2)


class TestInodeTable(unittest.TestCase):
    """Test the id registry."""

    def test_allocate_is_monotonic(self):
        table = InodeTable()
        self.assertEqual(table.allocate(), 1)
        self.assertEqual(table.allocate(), 2)
        self.assertEqual(table.next_ino, 3)

    def test_add_duplicate(self):
        table = InodeTable()
        table.add(Node(ino=0, name='/', kind=NodeKind.DIRECTORY))
        with self.assertRaises(ValueError):
            table.add(Node(ino=0, name='/', kind=NodeKind.DIRECTORY))

    def test_add_bumps_counter(self):
        table = InodeTable()
        table.add(Node(ino=9, name='x', kind=NodeKind.FILE))
        self.assertEqual(table.allocate(), 10)

    def test_advance_never_moves_back(self):
        table = InodeTable()
        table.advance(20)
        table.advance(5)
        self.assertEqual(table.next_ino, 20)

    def test_counter_cannot_rewind(self):
        """Removing every node leaves the counter where it was."""
        table = InodeTable()
        table.add(Node(ino=0, name='/', kind=NodeKind.DIRECTORY))
        ino = table.allocate()
        table.add(Node(ino=ino, name='x', kind=NodeKind.FILE, parent=0))
        table.remove(ino)
        self.assertFalse(hasattr(table, 'reset'))
        self.assertEqual(table.allocate(), ino + 1)

    def test_items_sorted(self):
        table = InodeTable()
        for ino in (5, 2, 7):
            table.add(Node(ino=ino, name=str(ino), kind=NodeKind.FILE))
        self.assertEqual([ino for ino, _ in table.items()], [2, 5, 7])
        self.assertEqual(list(table), [2, 5, 7])
        self.assertIn(5, table)
        self.assertEqual(len(table), 3)


class TestVirtualFileSystem(unittest.TestCase):
    """Test structural operations and traversal."""

    def setUp(self):
        ConfigLoader().reset()
        self.vfs = VirtualFileSystem()

    def test_initial_state(self):
        self.assertEqual(self.vfs.current_path(), '/')
        self.assertEqual(self.vfs.root.ino, ROOT_INO)
        self.assertIsNone(self.vfs.root.parent)
        self.assertTrue(self.vfs.root.is_directory)
        self.assertEqual(len(self.vfs.inode_table), 1)

    def test_default_modes(self):
        self.assertEqual(self.vfs.create_file('f').permissions, Permission.DEFAULT_FILE)
        self.assertEqual(self.vfs.create_directory('d').permissions, Permission.DEFAULT_DIR)

    def test_configured_modes(self):
        ConfigLoader().set('filesystem.default_file_mode', '600')
        vfs = VirtualFileSystem()
        self.assertEqual(format_mode(vfs.create_file('f').permissions), '600')

        vfs = VirtualFileSystem(file_mode='640', dir_mode=0o700)
        self.assertEqual(format_mode(vfs.create_file('f').permissions), '640')
        self.assertEqual(format_mode(vfs.create_directory('d').permissions), '700')

    def test_create_registers_ids(self):
        docs = self.vfs.create_directory('docs')
        notes = self.vfs.create_file('notes', 'hello')
        self.assertEqual(docs.ino, 1)
        self.assertEqual(notes.ino, 2)
        self.assertEqual(notes.parent, ROOT_INO)
        self.assertEqual(self.vfs.root.children, [1, 2])
        self.assertIs(self.vfs.inode_table[2], notes)

    def test_duplicate_names_allowed(self):
        first = self.vfs.create_file('a', 'one')
        self.vfs.create_file('a', 'two')
        self.assertEqual(len(self.vfs.list()), 2)
        self.assertIs(self.vfs.stat('a'), first)

    def test_nested_path(self):
        self.vfs.create_directory('a')
        self.vfs.change_directory('a')
        self.vfs.create_directory('b')
        self.vfs.change_directory('b')
        self.assertEqual(self.vfs.current_path(), '/a/b')

    def test_cd_round_trip(self):
        self.vfs.create_directory('x')
        before = self.vfs.current_path()
        self.vfs.change_directory('x')
        self.vfs.change_directory('..')
        self.assertEqual(self.vfs.current_path(), before)

    def test_cd_parent_at_root(self):
        self.vfs.change_directory('..')
        self.assertEqual(self.vfs.current_path(), '/')

    def test_cd_root(self):
        self.vfs.create_directory('a')
        self.vfs.change_directory('a')
        self.vfs.create_directory('b')
        self.vfs.change_directory('b')
        self.vfs.change_directory('/')
        self.assertIs(self.vfs.cwd, self.vfs.root)

    def test_cd_errors_keep_cursor(self):
        self.vfs.create_file('notes')
        with self.assertRaises(NotADirectoryError):
            self.vfs.change_directory('notes')
        with self.assertRaises(NodeNotFoundError):
            self.vfs.change_directory('missing')
        self.assertEqual(self.vfs.current_path(), '/')

    def test_rename(self):
        self.vfs.create_file('old', 'x')
        node = self.vfs.rename('old', 'new')
        self.assertEqual(node.name, 'new')
        self.assertFalse(self.vfs.exists('old'))
        self.assertTrue(self.vfs.exists('new'))

    def test_rename_missing(self):
        with self.assertRaises(NodeNotFoundError) as ctx:
            self.vfs.rename('nope', 'x')
        self.assertEqual(ctx.exception.message, "Item not found: nope")

    def test_remove_subtree(self):
        self.vfs.create_directory('a')
        self.vfs.change_directory('a')
        self.vfs.create_file('f1')
        self.vfs.create_directory('b')
        self.vfs.change_directory('b')
        self.vfs.create_file('f2')
        self.vfs.change_directory('/')

        removed = self.vfs.remove('a')

        self.assertEqual(removed[0], 1)
        self.assertEqual(sorted(removed), [1, 2, 3, 4])
        self.assertEqual(len(self.vfs.inode_table), 1)
        self.assertEqual(self.vfs.root.children, [])

    def test_remove_missing(self):
        with self.assertRaises(NodeNotFoundError):
            self.vfs.remove('ghost')

    def test_ids_not_reused(self):
        self.vfs.create_file('a')
        self.vfs.remove('a')
        self.assertEqual(self.vfs.create_file('b').ino, 2)

    def test_registry_matches_reachable(self):
        """After any mix of creates and removes, registry == reachable set."""
        self.vfs.create_directory('a')
        self.vfs.create_file('x')
        self.vfs.change_directory('a')
        self.vfs.create_directory('b')
        self.vfs.create_file('y')
        self.vfs.change_directory('b')
        self.vfs.create_file('z')
        self.vfs.change_directory('/')
        self.vfs.remove('x')
        self.vfs.change_directory('a')
        self.vfs.remove('b')
        self.vfs.create_file('w')

        self.assertEqual(set(self.vfs.inode_table), reachable(self.vfs))
        for ino, node in self.vfs.inodes():
            if node.parent is not None:
                siblings = self.vfs.inode_table[node.parent].children
                self.assertEqual(siblings.count(ino), 1)

    def test_list_insertion_order(self):
        for name in ('c', 'a', 'b'):
            self.vfs.create_file(name)
        self.assertEqual([n.name for n in self.vfs.list()], ['c', 'a', 'b'])

    def test_list_recursive_preorder(self):
        self.vfs.create_directory('a')
        self.vfs.create_file('z')
        self.vfs.change_directory('a')
        self.vfs.create_file('inner')
        self.vfs.change_directory('/')

        listing = [(depth, node.name) for depth, node in self.vfs.list_recursive()]
        self.assertEqual(listing, [(0, 'a'), (1, 'inner'), (0, 'z')])

    def test_find_and_search(self):
        self.vfs.create_directory('docs')
        self.vfs.change_directory('docs')
        self.vfs.create_file('notes', 'hello')
        self.vfs.change_directory('/')
        self.vfs.create_file('notes')

        found = self.vfs.find('notes')
        self.assertEqual(len(found), 2)
        self.assertEqual(found[0].parent, 1)

        paths = [path for path, _ in self.vfs.search('notes')]
        self.assertEqual(paths, ['/docs/notes', '/notes'])
        self.assertEqual(self.vfs.find('missing'), [])

    def test_path_of(self):
        self.vfs.create_directory('a')
        self.vfs.change_directory('a')
        node = self.vfs.create_file('f')
        self.assertEqual(self.vfs.path_of(node.ino), '/a/f')
        self.assertEqual(self.vfs.path_of(ROOT_INO), '/')
        with self.assertRaises(NodeNotFoundError):
            self.vfs.path_of(99)

    def test_replace_table_requires_root(self):
        with self.assertRaises(ValueError):
            self.vfs.replace_table(InodeTable())

    def test_stats(self):
        self.vfs.create_directory('d')
        self.vfs.create_file('f', 'abcd')
        stats = self.vfs.get_stats()
        self.assertEqual(stats['total_inodes'], 3)
        self.assertEqual(stats['files'], 1)
        self.assertEqual(stats['directories'], 2)
        self.assertEqual(stats['total_size'], 4)
        self.assertEqual(stats['next_ino'], 3)


class TestPermissionGatedOperations(unittest.TestCase):
    """Test read, write, execute and chmod."""

    def setUp(self):
        ConfigLoader().reset()
        self.vfs = VirtualFileSystem()
        self.vfs.create_file('notes', 'hello')

    def test_write_then_read(self):
        node = self.vfs.write('notes', 'new text')
        self.assertEqual(self.vfs.read('notes'), 'new text')
        self.assertEqual(node.size, len('new text'))

    def test_read_denied(self):
        self.vfs.set_permissions('notes', '200')
        with self.assertRaises(PermissionDeniedError) as ctx:
            self.vfs.read('notes')
        self.assertEqual(ctx.exception.operation, 'read')

    def test_write_denied_leaves_content(self):
        self.vfs.set_permissions('notes', '444')
        with self.assertRaises(PermissionDeniedError):
            self.vfs.write('notes', 'changed')
        self.assertEqual(self.vfs.stat('notes').content, 'hello')

    def test_execute_denied_on_default_file(self):
        """A 644 file cannot be executed and nothing changes."""
        before = self.vfs.stat('notes').to_dict()
        with self.assertRaises(PermissionDeniedError):
            self.vfs.execute('notes')
        self.assertEqual(self.vfs.stat('notes').to_dict(), before)

    def test_execute_allowed(self):
        self.vfs.set_permissions('notes', '755')
        self.assertEqual(self.vfs.execute('notes').name, 'notes')

    def test_execute_directory(self):
        self.vfs.create_directory('bin')
        self.assertEqual(self.vfs.execute('bin').name, 'bin')

    def test_content_ops_on_directory(self):
        self.vfs.create_directory('docs')
        with self.assertRaises(NotAFileError):
            self.vfs.read('docs')
        with self.assertRaises(NotAFileError):
            self.vfs.write('docs', 'x')

    def test_chmod_invalid(self):
        with self.assertRaises(InvalidModeError):
            self.vfs.set_permissions('notes', '9z')
        self.assertEqual(self.vfs.stat('notes').permissions, Permission.DEFAULT_FILE)

    def test_chmod_missing(self):
        with self.assertRaises(NodeNotFoundError):
            self.vfs.set_permissions('ghost', '644')

    def test_read_and_execute_wait_for_lock(self):
        """Permission checks run under the engine lock like mutations do."""
        self.vfs.set_permissions('notes', '755')
        for operation in (self.vfs.read, self.vfs.execute):
            with self.subTest(operation=operation.__name__):
                done = threading.Event()
                worker = threading.Thread(
                    target=lambda: (operation('notes'), done.set())
                )
                with self.vfs._lock:
                    worker.start()
                    self.assertFalse(done.wait(0.1))
                worker.join(timeout=5)
                self.assertTrue(done.is_set())


if __name__ == '__main__':
    unittest.main()
