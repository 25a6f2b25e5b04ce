"""
treefs Shell Module

The interactive command-line shell for treefs.

Version: 1.0.0
"""

from typing import Optional, List

from .parser import CommandParser, ParsedCommand
from .builtins import BuiltinCommands, CommandResult
from .history import CommandHistory
from treefs.core.config_loader import get_config
from treefs.exceptions import UnknownCommandError, UsageError
from treefs.filesystem.vfs import VirtualFileSystem
from treefs.logger import get_logger


class Shell:
    """
    treefs Interactive Shell.

    Provides:
    - Command parsing
    - Built-in commands
    - Command history and replay

    Example:
        >>> shell = Shell()
        >>> shell.execute('mkdir docs').output
        ['Directory created: docs in /']
    """

    def __init__(
        self,
        vfs: Optional[VirtualFileSystem] = None,
        history: Optional[CommandHistory] = None
    ):
        self._vfs = vfs if vfs is not None else VirtualFileSystem()
        self._history = history if history is not None else CommandHistory()
        self._logger = get_logger('shell')
        self._parser = CommandParser()
        self._builtins = BuiltinCommands(self)
        self._running = False
        self._exiting = False

    @property
    def vfs(self) -> VirtualFileSystem:
        return self._vfs

    @property
    def history(self) -> CommandHistory:
        return self._history

    @property
    def parser(self) -> CommandParser:
        return self._parser

    @property
    def exiting(self) -> bool:
        return self._exiting

    def run(self) -> None:
        """
        Run the interactive shell.

        This is the main REPL loop.
        """
        self._running = True
        self._exiting = False

        config = get_config()
        print(config.shell.welcome_message)

        while self._running and not self._exiting:
            try:
                line = input(self._get_prompt())
            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print("^C")
                continue

            result = self.execute(line)
            for text in result.lines():
                print(text)

        self._running = False

    def _get_prompt(self) -> str:
        """Generate the shell prompt."""
        return f"{self._vfs.current_path()}{get_config().shell.prompt_suffix}"

    def execute(self, line: str) -> CommandResult:
        """
        Execute one command line.

        Live input and history replay both come through here. The line is
        recorded once it has been dispatched to a known command whose
        arguments parsed, even if the command itself failed.

        Args:
            line: Command line string

        Returns:
            The command's result
        """
        cmd = self._parser.parse(line)

        if cmd is None:
            return CommandResult('')

        if not self._builtins.is_builtin(cmd.command):
            self._logger.debug("Unknown command", context={'command': cmd.command})
            return CommandResult(
                cmd.command, status=127, error=UnknownCommandError(cmd.command)
            )

        try:
            result = self._builtins.execute(cmd)
        except UsageError as e:
            return CommandResult(cmd.command, status=2, error=e)

        if self._builtins.is_recorded(cmd.command):
            self._record(cmd)

        if result.error is not None:
            self._logger.debug(
                "Command failed",
                context={'command': cmd.command, 'error': result.error_message}
            )
        return result

    def _record(self, cmd: ParsedCommand) -> None:
        index = self._history.append(cmd.line)
        self._logger.debug("Recorded command", context={'index': index, 'line': cmd.line})

    def request_exit(self) -> None:
        """Request the shell to exit."""
        self._exiting = True

    def run_script(self, script: str) -> List[CommandResult]:
        """
        Run a script (multiple commands).

        Stops after an ``exit``.

        Args:
            script: Script content

        Returns:
            The result of every executed line
        """
        results: List[CommandResult] = []

        for line in script.split('\n'):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            result = self.execute(line)
            results.append(result)
            if result.exit_requested:
                break

        return results


def create_shell(vfs: Optional[VirtualFileSystem] = None) -> Shell:
    """Factory function to create a shell."""
    return Shell(vfs)
