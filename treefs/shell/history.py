"""
Command History

Append-only log of accepted command lines, indexed from 0.
"""

from typing import Iterator, List, Tuple

from treefs.exceptions import HistoryIndexError


class CommandHistory:
    """
    Ordered log of command text.

    Entries are only ever appended; replaying an entry goes back through
    the shell, which appends the replayed text as a new entry.
    """

    def __init__(self):
        self._entries: List[str] = []

    def append(self, line: str) -> int:
        """
        Record a command line.

        Returns:
            Index of the new entry
        """
        self._entries.append(line)
        return len(self._entries) - 1

    def get(self, index: int) -> str:
        """
        Get the entry at ``index``.

        Raises:
            HistoryIndexError: If the index is negative or past the end
        """
        if not 0 <= index < len(self._entries):
            raise HistoryIndexError(index, size=len(self._entries))
        return self._entries[index]

    def entries(self) -> List[Tuple[int, str]]:
        return list(enumerate(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
