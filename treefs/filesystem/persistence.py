"""
Filesystem Persistence

Saves the whole tree to a text file and rebuilds it from one.

Each node is one line, fields separated by single spaces:

    <id> <parent_id|-> <name> <is_dir 0|1> <size> <mode> <created_at>[ <content>]

- ``name`` is percent-encoded, so it never contains a space or newline.
- ``mode`` is three octal digits.
- Files always carry the content field (possibly empty) as the rest of
  the line. Backslash, newline and carriage return are escaped; every
  other character, spaces included, is written as is.
- Directories never carry content.

The explicit parent id makes parent linkage unambiguous. Records are
written in ascending id order, so children come back in the order they
were created.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Iterable, List, Tuple
from urllib.parse import quote, unquote

from .inode_table import InodeTable, ROOT_INO
from .node import Node, NodeKind
from .permissions import parse_mode, format_mode
from .vfs import VirtualFileSystem
from treefs.core.config_loader import get_config
from treefs.exceptions import (
    InvalidModeError,
    MalformedRecordError,
    PersistenceIOError,
)
from treefs.logger import get_logger


FORMAT_HEADER = "# treefs-state 1"
NO_PARENT = "-"

_ESCAPES = {'\\': '\\\\', '\n': '\\n', '\r': '\\r'}
_UNESCAPES = {'\\': '\\', 'n': '\n', 'r': '\r'}

_logger = get_logger('persistence')


def escape_content(content: str) -> str:
    """Escape the characters that would break a one-line record."""
    return ''.join(_ESCAPES.get(char, char) for char in content)


def unescape_content(text: str) -> str:
    """
    Reverse ``escape_content``.

    Raises:
        ValueError: On an unknown or dangling escape sequence
    """
    result = []
    chars = iter(text)
    for char in chars:
        if char != '\\':
            result.append(char)
            continue
        escaped = next(chars, None)
        if escaped is None or escaped not in _UNESCAPES:
            raise ValueError(f"bad escape sequence: \\{escaped or ''}")
        result.append(_UNESCAPES[escaped])
    return ''.join(result)


@dataclass
class NodeRecord:
    """One persisted node."""
    ino: int
    parent: Optional[int]
    name: str
    is_directory: bool
    size: int
    mode: str
    created_at: float
    content: Optional[str] = None


@dataclass
class LoadReport:
    """Outcome of a load: how many records were kept and why others were not."""
    path: str
    accepted: int = 0
    skipped: int = 0
    errors: List[MalformedRecordError] = field(default_factory=list)

    def skip(self, error: MalformedRecordError) -> None:
        self.skipped += 1
        self.errors.append(error)


class StateCodec:
    """
    Converts between nodes and record lines.

    Example:
        >>> codec = StateCodec()
        >>> codec.encode(node)
        '3 1 notes 0 5 644 1700000000.0 hello'
    """

    FIELD_COUNT = 7

    def encode(self, node: Node) -> str:
        """Render one node as a record line (without newline)."""
        parent = NO_PARENT if node.parent is None else str(node.parent)
        fields = [
            str(node.ino),
            parent,
            quote(node.name, safe=''),
            '1' if node.is_directory else '0',
            str(node.size),
            format_mode(node.permissions),
            repr(float(node.created_at)),
        ]
        line = ' '.join(fields)
        if node.is_file:
            line = f"{line} {escape_content(node.content)}"
        return line

    def encode_all(self, nodes: Iterable[Node], next_ino: Optional[int] = None) -> List[str]:
        header = FORMAT_HEADER if next_ino is None else f"{FORMAT_HEADER} next_ino={next_ino}"
        return [header] + [self.encode(node) for node in nodes]

    @staticmethod
    def decode_header(line: str) -> Optional[int]:
        """Return the saved id counter of a header line, if it has one."""
        if not line.startswith(FORMAT_HEADER):
            return None
        for token in line[len(FORMAT_HEADER):].split():
            key, _, value = token.partition("=")
            if key == "next_ino" and value.isdigit():
                return int(value)
        return None

    def decode(self, line: str, line_number: int = 0) -> NodeRecord:
        """
        Parse one record line.

        Raises:
            MalformedRecordError: If the line does not hold a valid record
        """
        def malformed(reason: str) -> MalformedRecordError:
            return MalformedRecordError(line_number, line, reason)

        parts = line.split(' ', self.FIELD_COUNT)
        if len(parts) < self.FIELD_COUNT:
            raise malformed(f"expected at least {self.FIELD_COUNT} fields, got {len(parts)}")

        ino_text, parent_text, name_text, dir_text, size_text, mode_text, created_text = (
            parts[:self.FIELD_COUNT]
        )
        content_text = parts[self.FIELD_COUNT] if len(parts) > self.FIELD_COUNT else None

        try:
            ino = int(ino_text)
            size = int(size_text)
        except ValueError:
            raise malformed("id and size must be integers") from None
        if ino < 0:
            raise malformed("negative id")

        if parent_text == NO_PARENT:
            parent = None
        else:
            try:
                parent = int(parent_text)
            except ValueError:
                raise malformed("parent id must be an integer or '-'") from None

        if dir_text not in ('0', '1'):
            raise malformed("is_directory must be 0 or 1")
        is_directory = dir_text == '1'

        try:
            mode = format_mode(parse_mode(mode_text))
        except InvalidModeError:
            raise malformed(f"invalid mode {mode_text!r}") from None

        try:
            created_at = float(created_text)
        except ValueError:
            raise malformed("created_at must be a number") from None

        name = unquote(name_text)

        content = None
        if is_directory:
            if content_text:
                raise malformed("directory record carries content")
        else:
            try:
                content = unescape_content(content_text or '')
            except ValueError as e:
                raise malformed(str(e)) from None

        return NodeRecord(
            ino=ino,
            parent=parent,
            name=name,
            is_directory=is_directory,
            size=size,
            mode=mode,
            created_at=created_at,
            content=content,
        )


def _split_lines(text: str) -> List[Tuple[int, str]]:
    lines = []
    for number, raw in enumerate(text.split('\n'), 1):
        line = raw[:-1] if raw.endswith('\r') else raw
        if line.strip():
            lines.append((number, line))
    return lines


def build_table(
    text: str,
    report: LoadReport,
    default_dir_mode: str = "755",
    strict: bool = False,
    codec: Optional[StateCodec] = None
) -> InodeTable:
    """
    Rebuild an inode table from the text of a state file.

    Malformed records are skipped and recorded in ``report``, or raised
    at once when ``strict`` is set.

    Raises:
        MalformedRecordError: In strict mode, on the first bad record
    """
    codec = codec or StateCodec()

    def reject(error: MalformedRecordError) -> None:
        if strict:
            raise error
        _logger.warning(
            "Skipping malformed record",
            context={'line': error.line_number, 'reason': error.reason}
        )
        report.skip(error)

    records: dict[int, Tuple[int, str, NodeRecord]] = {}
    saved_next_ino: Optional[int] = None

    for number, line in _split_lines(text):
        if line.startswith('#'):
            saved_next_ino = codec.decode_header(line) or saved_next_ino
            continue
        try:
            record = codec.decode(line, number)
        except MalformedRecordError as e:
            reject(e)
            continue

        if record.ino in records:
            reject(MalformedRecordError(number, line, f"duplicate id {record.ino}"))
            continue
        if record.ino == ROOT_INO and (record.parent is not None or not record.is_directory):
            reject(MalformedRecordError(number, line, "root must be a directory without parent"))
            continue
        if record.ino != ROOT_INO and record.parent is None:
            reject(MalformedRecordError(number, line, "missing parent id"))
            continue

        records[record.ino] = (number, line, record)

    table = InodeTable()
    root_entry = records.get(ROOT_INO)
    if root_entry is None:
        table.add(Node(
            ino=ROOT_INO,
            name='/',
            kind=NodeKind.DIRECTORY,
            permissions=parse_mode(default_dir_mode)
        ))
    else:
        root_record = root_entry[2]
        table.add(Node(
            ino=ROOT_INO,
            name='/',
            kind=NodeKind.DIRECTORY,
            permissions=parse_mode(root_record.mode),
            created_at=root_record.created_at
        ))
        report.accepted += 1

    # Parents always carry lower ids than their children.
    pending = sorted(ino for ino in records if ino != ROOT_INO)
    for ino in pending:
        number, line, record = records[ino]
        parent = table.get(record.parent)
        if parent is None:
            reject(MalformedRecordError(number, line, f"unknown parent {record.parent}"))
            continue
        if not parent.is_directory:
            reject(MalformedRecordError(number, line, f"parent {record.parent} is not a directory"))
            continue
        node = _record_to_node(record)
        table.add(node)
        parent.add_child(node.ino)
        report.accepted += 1

    if saved_next_ino is not None:
        table.advance(saved_next_ino)

    return table


def _record_to_node(record: NodeRecord) -> Node:
    return Node(
        ino=record.ino,
        name=record.name,
        kind=NodeKind.DIRECTORY if record.is_directory else NodeKind.FILE,
        permissions=parse_mode(record.mode),
        parent=record.parent,
        created_at=record.created_at,
        _content=record.content or '',
    )


def save_state(vfs: VirtualFileSystem, path: Optional[str] = None) -> int:
    """
    Write every registered node to the state file.

    Args:
        vfs: File system to save
        path: Target file; defaults to ``persistence.state_file``

    Returns:
        Number of records written

    Raises:
        PersistenceIOError: If the file cannot be written or the tree
            holds text the configured encoding cannot represent
    """
    config = get_config().persistence
    target = Path(path or config.state_file)
    try:
        lines = StateCodec().encode_all(
            (node for _, node in vfs.inodes()),
            next_ino=vfs.inode_table.next_ino
        )
        target.write_text('\n'.join(lines) + '\n', encoding=config.encoding)
    except (OSError, UnicodeError) as e:
        _logger.error("Save failed", context={'path': str(target), 'error': e})
        raise PersistenceIOError(str(target), operation="saving", reason=str(e)) from e

    count = len(lines) - 1
    _logger.info("Saved filesystem", context={'path': str(target), 'records': count})
    return count


def load_state(
    vfs: VirtualFileSystem,
    path: Optional[str] = None,
    strict: Optional[bool] = None
) -> LoadReport:
    """
    Replace the tree of ``vfs`` with the one stored in the state file.

    The current tree is kept when the file cannot be read or, in strict
    mode, when a record is malformed. On success the cursor moves to the
    root and new ids continue after the highest loaded id.

    Args:
        vfs: File system to load into
        path: Source file; defaults to ``persistence.state_file``
        strict: Abort on the first malformed record; defaults to
            ``persistence.strict_load``

    Returns:
        LoadReport with accepted and skipped record counts

    Raises:
        PersistenceIOError: If the file cannot be read
        MalformedRecordError: In strict mode, on the first bad record
    """
    config = get_config().persistence
    source = Path(path or config.state_file)
    if strict is None:
        strict = config.strict_load

    try:
        text = source.read_text(encoding=config.encoding)
    except (OSError, UnicodeDecodeError) as e:
        _logger.error("Load failed", context={'path': str(source), 'error': e})
        raise PersistenceIOError(str(source), operation="loading", reason=str(e)) from e

    report = LoadReport(path=str(source))
    table = build_table(
        text,
        report,
        default_dir_mode=format_mode(vfs.default_dir_mode),
        strict=strict
    )
    vfs.replace_table(table)

    _logger.info(
        "Loaded filesystem",
        context={'path': str(source), 'accepted': report.accepted, 'skipped': report.skipped}
    )
    return report
