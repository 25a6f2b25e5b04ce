#!/usr/bin/env python3
"""
treefs - An In-Memory Hierarchical File System Simulation

This is the main entry point for treefs.

Startup sequence:
1. Load configuration
2. Apply command-line overrides
3. Initialize logging
4. Start the shell, interactively or on a script

Version: 1.0.0
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, List

from treefs.core.config_loader import ConfigLoader
from treefs.exceptions import ConfigException
from treefs.logger import Logger, LogLevel, get_logger
from treefs.shell.shell import Shell


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the treefs command."""
    p = argparse.ArgumentParser(
        prog="treefs",
        description="In-memory hierarchical file system with a command shell.",
    )
    p.add_argument(
        "-c", "--config",
        dest="config_path",
        default=None,
        help="JSON configuration file.",
    )
    p.add_argument(
        "-f", "--state-file",
        dest="state_file",
        default=None,
        help="File used by 'save' and 'load' when no path is given.",
    )
    p.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        choices=[level.name for level in LogLevel],
        type=str.upper,
        help="Minimum level of log messages written to stderr.",
    )
    p.add_argument(
        "-s", "--script",
        dest="script_path",
        default=None,
        help="Run the commands in this file instead of starting the prompt.",
    )
    return p


def configure(args: argparse.Namespace) -> None:
    """
    Load configuration and initialize logging.

    Raises:
        ConfigException: If the configuration file or an override is invalid
    """
    loader = ConfigLoader()
    if args.config_path:
        loader.load(args.config_path)
    if args.state_file:
        loader.set('persistence.state_file', args.state_file)
    if args.log_level:
        loader.set('logging.level', args.log_level)

    logging_config = loader.config.logging
    Logger.initialize(
        level=LogLevel.from_name(logging_config.level),
        log_file=logging_config.log_file,
        use_colors=logging_config.use_colors
    )


def run_script(shell: Shell, script_path: str) -> int:
    """
    Run a file of commands, printing their output.

    Returns:
        0 if every command succeeded, 1 otherwise
    """
    try:
        script = Path(script_path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        print(f"treefs: cannot read script {script_path}: {e}", file=sys.stderr)
        return 1

    exit_code = 0
    for result in shell.run_script(script):
        for text in result.lines():
            print(text)
        if not result.ok:
            exit_code = 1
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for treefs.

    Args:
        argv: Command-line arguments, defaulting to ``sys.argv[1:]``

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        configure(args)
    except ConfigException as e:
        print(f"treefs: {e}", file=sys.stderr)
        return 1

    logger = get_logger('main')
    logger.info("Starting treefs", context={'script': args.script_path})

    shell = Shell()

    if args.script_path:
        return run_script(shell, args.script_path)

    try:
        shell.run()
    except KeyboardInterrupt:
        print("\n\nInterrupted")
    return 0


if __name__ == '__main__':
    sys.exit(main())
