"""
Permission Model

Permission bits for simulated nodes. The mask keeps the familiar
three-digit octal layout (owner, group, other) but only the owner
digit is enforced: read is octal 4, write 2, execute 1.
"""

from enum import Flag
from typing import Union

from treefs.exceptions import InvalidModeError


class Permission(Flag):
    """File permission bits."""
    # Owner permissions
    OWNER_READ = 0o400
    OWNER_WRITE = 0o200
    OWNER_EXEC = 0o100

    # Group permissions
    GROUP_READ = 0o040
    GROUP_WRITE = 0o020
    GROUP_EXEC = 0o010

    # Other permissions
    OTHER_READ = 0o004
    OTHER_WRITE = 0o002
    OTHER_EXEC = 0o001

    NONE = 0

    # Common combinations
    OWNER_RW = OWNER_READ | OWNER_WRITE
    OWNER_RWX = OWNER_READ | OWNER_WRITE | OWNER_EXEC

    # Default permissions
    DEFAULT_FILE = OWNER_RW | GROUP_READ | OTHER_READ
    DEFAULT_DIR = OWNER_RWX | GROUP_READ | GROUP_EXEC | OTHER_READ | OTHER_EXEC


def can_read(permissions: Permission) -> bool:
    return bool(permissions & Permission.OWNER_READ)


def can_write(permissions: Permission) -> bool:
    return bool(permissions & Permission.OWNER_WRITE)


def can_execute(permissions: Permission) -> bool:
    return bool(permissions & Permission.OWNER_EXEC)


def parse_mode(mode: Union[str, int, Permission]) -> Permission:
    """
    Convert a mode into a Permission.

    Args:
        mode: Octal text such as "644", an integer mask or a Permission

    Returns:
        Permission holding exactly the given bits

    Raises:
        InvalidModeError: If the text is not octal or the mask exceeds 0o777
    """
    if isinstance(mode, Permission):
        return mode

    if isinstance(mode, bool):
        raise InvalidModeError(str(mode))

    if isinstance(mode, int):
        value = mode
    else:
        text = str(mode).strip()
        if not text:
            raise InvalidModeError(text)
        try:
            value = int(text, 8)
        except ValueError:
            raise InvalidModeError(text) from None

    if not 0 <= value <= 0o777:
        raise InvalidModeError(str(mode))

    return Permission(value)


def format_mode(permissions: Permission) -> str:
    """Render a Permission as three octal digits, e.g. '755'."""
    return f"{permissions.value:03o}"


def symbolic(permissions: Permission, is_directory: bool = False) -> str:
    """Render a Permission as 'drwxr-xr-x' style text."""
    chars = ['d' if is_directory else '-']
    for shift in (6, 3, 0):
        triad = (permissions.value >> shift) & 0o7
        chars.append('r' if triad & 0o4 else '-')
        chars.append('w' if triad & 0o2 else '-')
        chars.append('x' if triad & 0o1 else '-')
    return ''.join(chars)
