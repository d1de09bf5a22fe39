"""Root logger configuration for the CLI.

Library modules only obtain loggers; handlers are attached here, once,
when a command starts.
"""

import logging

from rich.logging import RichHandler

from makogc.utils.formatting import err_console

_configured = False


def resolve_level(verbose: bool = False, quiet: bool = False) -> int:
    """Map the global CLI flags to a logging level. Quiet wins."""
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Attach a RichHandler on stderr to the root logger.

    Calling this again only adjusts the level.

    Args:
        verbose: Log at DEBUG.
        quiet: Log at WARNING, overriding verbose.
    """
    global _configured
    level = resolve_level(verbose=verbose, quiet=quiet)
    root = logging.getLogger()
    if not _configured:
        handler = RichHandler(
            console=err_console,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        _configured = True
    root.setLevel(level)
