"""Utility modules for lockctl.

This module exports commonly used utility functions.
"""

from lockctl.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from lockctl.utils.shell import CommandResult, command_exists, first_available, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "first_available",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
