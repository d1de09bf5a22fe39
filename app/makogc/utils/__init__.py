"""Utility modules for makogc.

This module exports commonly used utility functions.
"""

from makogc.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from makogc.utils.logging_setup import setup_logging

__all__ = [
    "console",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "setup_logging",
]
