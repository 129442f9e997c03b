"""
Unified CLI Error Handling
==========================

Provides consistent error reporting and exit codes for the CLI.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Compilation, assembly, or link error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report error on stderr and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback for internal errors

    Raises:
        SystemExit: Always
    """
    from emojicc.compiler.errors import CompileError, InternalCompilerError
    from emojicc.errors import ToolchainError

    if isinstance(error, InternalCompilerError):
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)

    elif isinstance(error, CompileError):
        # Already formatted with "file:line:col: error:"
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, ToolchainError):
        click.echo(f"Link error: {error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
