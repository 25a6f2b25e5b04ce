"""
Command Parser Module

Parses command lines into a command word and its arguments.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Optional, List


QUOTES = ('"', "'")


@dataclass
class Token:
    """A parsed word with its position in the source line."""
    value: str
    start: int
    end: int


@dataclass
class ParsedCommand:
    """A parsed command line."""
    command: str
    args: List[str] = field(default_factory=list)
    line: str = ""
    tokens: List[Token] = field(default_factory=list, repr=False)

    def rest_after(self, arg_index: int) -> str:
        """
        Raw text following argument ``arg_index``.

        Leading whitespace is dropped; if what remains is a single quoted
        string, the quotes are dropped too. Used for content arguments,
        which may contain any amount of whitespace.
        """
        token_index = arg_index + 1
        if token_index >= len(self.tokens):
            return ""

        rest = self.line[self.tokens[token_index].end:].lstrip()
        if len(rest) >= 2 and rest[0] in QUOTES and rest[-1] == rest[0]:
            inner = rest[1:-1]
            if rest[0] not in inner:
                return inner
        return rest


class CommandParser:
    """
    Parses command lines.

    Handles:
    - Command and arguments separated by whitespace
    - Quoted strings
    - Escape sequences
    - Comment lines starting with '#'

    Example:
        >>> parser = CommandParser()
        >>> cmd = parser.parse('touch notes "hello world"')
        >>> cmd.args
        ['notes', 'hello world']
    """

    def parse(self, line: str) -> Optional[ParsedCommand]:
        """
        Parse a command line.

        Args:
            line: Command line string

        Returns:
            ParsedCommand or None if the line is empty or a comment
        """
        line = line.strip()

        if not line or line.startswith('#'):
            return None

        tokens = self._tokenize(line)

        if not tokens:
            return None

        return ParsedCommand(
            command=tokens[0].value,
            args=[t.value for t in tokens[1:]],
            line=line,
            tokens=tokens
        )

    def _tokenize(self, line: str) -> List[Token]:
        """Convert a line into tokens."""
        tokens: List[Token] = []
        current = ""
        start: Optional[int] = None
        in_quote = None
        i = 0

        while i < len(line):
            char = line[i]

            # Handle quotes
            if char in QUOTES and in_quote is None:
                in_quote = char
                if start is None:
                    start = i
                i += 1
                continue

            if char == in_quote:
                in_quote = None
                i += 1
                continue

            # Handle escape
            if char == '\\' and i + 1 < len(line):
                if start is None:
                    start = i
                current += line[i + 1]
                i += 2
                continue

            # Inside quotes, just add character
            if in_quote:
                current += char
                i += 1
                continue

            # Handle whitespace
            if char.isspace():
                if start is not None:
                    tokens.append(Token(current, start, i))
                    current = ""
                    start = None
                i += 1
                continue

            # Regular character
            if start is None:
                start = i
            current += char
            i += 1

        # Don't forget last token
        if start is not None:
            tokens.append(Token(current, start, len(line)))

        return tokens
