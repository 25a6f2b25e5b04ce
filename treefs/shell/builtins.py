"""
Shell Built-in Commands

Every command the shell understands. Handlers call into the tree
engine and return a CommandResult; they never print.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Optional, Callable, List

from .parser import ParsedCommand
from treefs.exceptions import (
    FileSystemException,
    ShellException,
    UsageError,
    HistoryIndexError,
)
from treefs.filesystem.permissions import format_mode
from treefs.filesystem.persistence import save_state, load_state
from treefs.core.config_loader import get_config


@dataclass
class CommandResult:
    """Outcome of one command line."""
    command: str
    status: int = 0
    output: List[str] = field(default_factory=list)
    error: Optional[Exception] = None
    exit_requested: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return getattr(self.error, 'message', str(self.error))

    def lines(self) -> List[str]:
        """Output followed by the error message, if any."""
        if self.error is None:
            return list(self.output)
        return self.output + [self.error_message]


HELP_TEXT = """\
File Operations:
  touch <name> [content]   Create a file
  mkdir <name>             Create a directory
  mv <old> <new>           Rename an entry of the current directory
  rm <name>                Remove an entry and everything below it
  ls [-R]                  List the current directory (recursively with -R)
  cd <name>|..|/           Change directory
  pwd                      Print the current path
  chmod <name> <mode>      Set permissions from octal text, e.g. 644
  stat <name>              Show node details
  read <name>              Print a file's content
  write <name> <content>   Replace a file's content
  execute <name>           Execute a file (simulated)

Search:
  find <name>              Find entries by name anywhere in the tree
  search <name>            Same, printing full paths

State:
  inode                    Dump the inode table
  save [path]              Save the tree
  load [path]              Load a saved tree

Shell:
  history                  Show command history
  run <index>              Re-run a history entry
  help                     Display this help
  exit                     Leave the shell"""


class BuiltinCommands:
    """
    Built-in shell commands.

    Lines whose command is in ``UNRECORDED`` never enter the history.
    ``run`` is one of them: the replayed line records itself.
    """

    UNRECORDED = frozenset({'history', 'run', 'exit'})

    def __init__(self, shell):
        """
        Initialize built-in commands.

        Args:
            shell: The shell instance
        """
        self._shell = shell
        self._commands: dict[str, Callable[[ParsedCommand], CommandResult]] = {
            'touch': self.cmd_touch,
            'mkdir': self.cmd_mkdir,
            'mv': self.cmd_mv,
            'rm': self.cmd_rm,
            'ls': self.cmd_ls,
            'cd': self.cmd_cd,
            'pwd': self.cmd_pwd,
            'chmod': self.cmd_chmod,
            'stat': self.cmd_stat,
            'find': self.cmd_find,
            'search': self.cmd_search,
            'inode': self.cmd_inode,
            'history': self.cmd_history,
            'save': self.cmd_save,
            'load': self.cmd_load,
            'read': self.cmd_read,
            'write': self.cmd_write,
            'execute': self.cmd_execute,
            'run': self.cmd_run,
            'help': self.cmd_help,
            'exit': self.cmd_exit,
        }

    def is_builtin(self, name: str) -> bool:
        """Check if a command is built-in."""
        return name in self._commands

    def is_recorded(self, name: str) -> bool:
        return name in self._commands and name not in self.UNRECORDED

    def execute(self, cmd: ParsedCommand) -> CommandResult:
        """
        Execute a built-in command.

        Filesystem and shell errors become part of the result.

        Raises:
            UsageError: If the arguments do not fit the command
        """
        handler = self._commands[cmd.command]
        try:
            return handler(cmd)
        except UsageError:
            raise
        except (FileSystemException, ShellException) as e:
            return CommandResult(cmd.command, status=1, error=e)

    @staticmethod
    def _require(cmd: ParsedCommand, count: int, usage: str) -> None:
        if len(cmd.args) < count:
            raise UsageError(cmd.command, usage)

    @property
    def _vfs(self):
        return self._shell.vfs

    # Command implementations

    def cmd_touch(self, cmd: ParsedCommand) -> CommandResult:
        """Create a file; the rest of the line is its content."""
        self._require(cmd, 1, "touch <name> [content]")
        self._vfs.create_file(cmd.args[0], cmd.rest_after(0))
        return CommandResult('touch')

    def cmd_mkdir(self, cmd: ParsedCommand) -> CommandResult:
        """Create a directory."""
        self._require(cmd, 1, "mkdir <name>")
        name = cmd.args[0]
        self._vfs.create_directory(name)
        return CommandResult(
            'mkdir',
            output=[f"Directory created: {name} in {self._vfs.current_path()}"]
        )

    def cmd_mv(self, cmd: ParsedCommand) -> CommandResult:
        """Rename an entry."""
        self._require(cmd, 2, "mv <old> <new>")
        self._vfs.rename(cmd.args[0], cmd.args[1])
        return CommandResult('mv')

    def cmd_rm(self, cmd: ParsedCommand) -> CommandResult:
        """Remove an entry recursively."""
        self._require(cmd, 1, "rm <name>")
        self._vfs.remove(cmd.args[0])
        return CommandResult('rm')

    def cmd_ls(self, cmd: ParsedCommand) -> CommandResult:
        """List directory contents."""
        if cmd.args and cmd.args != ['-R']:
            raise UsageError('ls', "ls [-R]")

        if cmd.args:
            output = [
                f"{'  ' * depth}{node.kind.label} {node.name}"
                for depth, node in self._vfs.list_recursive()
            ]
        else:
            output = [f"{node.kind.label} {node.name}" for node in self._vfs.list()]
        return CommandResult('ls', output=output)

    def cmd_cd(self, cmd: ParsedCommand) -> CommandResult:
        """Change directory."""
        self._require(cmd, 1, "cd <name>|..|/")
        self._vfs.change_directory(cmd.args[0])
        return CommandResult('cd')

    def cmd_pwd(self, cmd: ParsedCommand) -> CommandResult:
        """Print working directory."""
        return CommandResult('pwd', output=[self._vfs.current_path()])

    def cmd_chmod(self, cmd: ParsedCommand) -> CommandResult:
        """Change permissions."""
        self._require(cmd, 2, "chmod <name> <mode>")
        name = cmd.args[0]
        node = self._vfs.set_permissions(name, cmd.args[1])
        return CommandResult(
            'chmod',
            output=[f"Changed permissions to {format_mode(node.permissions)} for '{name}'"]
        )

    def cmd_stat(self, cmd: ParsedCommand) -> CommandResult:
        """Show node details."""
        self._require(cmd, 1, "stat <name>")
        info = self._vfs.stat(cmd.args[0]).to_dict()
        return CommandResult(
            'stat',
            output=[f"{key}: {value}" for key, value in info.items()]
        )

    def cmd_find(self, cmd: ParsedCommand) -> CommandResult:
        """Find entries by name anywhere in the tree."""
        self._require(cmd, 1, "find <name>")
        name = cmd.args[0]
        matches = self._vfs.find(name)
        if not matches:
            return CommandResult(
                'find',
                output=[f"No files or directories found with the name: {name}"]
            )
        return CommandResult(
            'find',
            output=[f"Found: {node.kind.label} {node.name}" for node in matches]
        )

    def cmd_search(self, cmd: ParsedCommand) -> CommandResult:
        """Find entries by name, printing full paths."""
        self._require(cmd, 1, "search <name>")
        name = cmd.args[0]
        matches = self._vfs.search(name)
        if not matches:
            return CommandResult(
                'search',
                output=[f"No files or directories found with the name: {name}"]
            )
        return CommandResult(
            'search',
            output=["Found files or directories:"] + [path for path, _ in matches]
        )

    def cmd_inode(self, cmd: ParsedCommand) -> CommandResult:
        """Dump the inode table."""
        return CommandResult(
            'inode',
            output=[
                f"ID: {ino}, Name: {node.name}, Type: {node.kind.label}"
                for ino, node in self._vfs.inodes()
            ]
        )

    def cmd_history(self, cmd: ParsedCommand) -> CommandResult:
        """Display command history."""
        return CommandResult(
            'history',
            output=[f"{index}: {line}" for index, line in self._shell.history.entries()]
        )

    def cmd_save(self, cmd: ParsedCommand) -> CommandResult:
        """Save the tree to the state file."""
        path = cmd.args[0] if cmd.args else get_config().persistence.state_file
        count = save_state(self._vfs, path)
        return CommandResult(
            'save',
            output=[
                f"Saving filesystem to {path}",
                f"Filesystem saved successfully ({count} records)",
            ]
        )

    def cmd_load(self, cmd: ParsedCommand) -> CommandResult:
        """Replace the tree with the saved one."""
        path = cmd.args[0] if cmd.args else get_config().persistence.state_file
        report = load_state(self._vfs, path)
        output = [
            f"Filesystem loaded from {path}: "
            f"{report.accepted} records accepted, {report.skipped} skipped"
        ]
        output.extend(
            f"  line {error.line_number}: {error.reason}" for error in report.errors
        )
        return CommandResult('load', output=output)

    def cmd_read(self, cmd: ParsedCommand) -> CommandResult:
        """Print a file's content."""
        self._require(cmd, 1, "read <name>")
        content = self._vfs.read(cmd.args[0])
        return CommandResult('read', output=[f"Reading file: {content}"])

    def cmd_write(self, cmd: ParsedCommand) -> CommandResult:
        """Replace a file's content."""
        self._require(cmd, 1, "write <name> <content>")
        self._vfs.write(cmd.args[0], cmd.rest_after(0))
        return CommandResult('write')

    def cmd_execute(self, cmd: ParsedCommand) -> CommandResult:
        """Execute a file (simulated)."""
        self._require(cmd, 1, "execute <name>")
        node = self._vfs.execute(cmd.args[0])
        return CommandResult('execute', output=[f"Executing file: {node.name}"])

    def cmd_run(self, cmd: ParsedCommand) -> CommandResult:
        """Re-run a history entry through the normal entry point."""
        self._require(cmd, 1, "run <index>")
        history = self._shell.history
        try:
            index = int(cmd.args[0])
        except ValueError:
            raise HistoryIndexError(cmd.args[0], size=len(history)) from None

        line = history.get(index)
        replayed = self._shell.execute(line)
        return CommandResult(
            'run',
            status=replayed.status,
            output=[f"Executing command from history: {line}"] + replayed.output,
            error=replayed.error,
            exit_requested=replayed.exit_requested
        )

    def cmd_help(self, cmd: ParsedCommand) -> CommandResult:
        """Display help information."""
        return CommandResult('help', output=HELP_TEXT.splitlines())

    def cmd_exit(self, cmd: ParsedCommand) -> CommandResult:
        """Exit the shell."""
        self._shell.request_exit()
        return CommandResult('exit', exit_requested=True)
