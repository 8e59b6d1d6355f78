"""
CLI Failure Reporting
=====================

Maps the failures of the `ot3d` commands to messages and exit codes.

Exit Codes
----------
    0  success
    1  encode failed: empty image, diagnostics in strict mode, or an
       unknown field/tag type reaching the library
    2  usage error (raised by click itself before a command runs)
    3  input file unreadable: a values file or tag image that is not
       UTF-8, not valid JSON, the wrong shape, or cannot be opened
    4  unexpected internal error

Encode diagnostics are not failures; they are printed as warnings and
only change the exit code in strict mode.

Copyright (c) 2026 OpenTag3D Contributors
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn, Optional

import click

from opentag3d.errors import ImageFormatError, OpenTag3DError, ValuesFileError


class ExitCode(IntEnum):
    """Exit codes of the `ot3d` commands."""
    SUCCESS = 0
    ENCODE_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    INTERNAL_ERROR = 4


# Library errors that mean "the file you gave me is bad"
INPUT_ERRORS = (ValuesFileError, ImageFormatError)


def fail(message: str, code: ExitCode = ExitCode.ENCODE_ERROR) -> NoReturn:
    """Print an error to stderr and exit."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def exit_code_for(error: Exception) -> ExitCode:
    """Pick the exit code for an exception raised inside a command."""
    if isinstance(error, INPUT_ERRORS):
        return ExitCode.INPUT_ERROR
    if isinstance(error, OpenTag3DError):
        return ExitCode.ENCODE_ERROR
    if isinstance(error, (OSError, UnicodeDecodeError)):
        return ExitCode.INPUT_ERROR
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: Optional[str] = None,
) -> NoReturn:
    """
    Report an exception raised inside a command and exit.

    Args:
        error: The exception that was raised
        verbose: Print the traceback of internal errors
        error_type: Prefix for the message (e.g. "Encoding" gives
            "Encoding error: ...")

    Raises:
        SystemExit: Always
    """
    code = exit_code_for(error)

    if code is ExitCode.INTERNAL_ERROR:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
    else:
        prefix = f"{error_type} error" if error_type else "Error"
        click.echo(f"{prefix}: {error}", err=True)

    sys.exit(code)
