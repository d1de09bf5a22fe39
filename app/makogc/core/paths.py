"""Well-known locations for makogc.

The object store root and the ledger file are fixed system locations on a
mako node. The optional configuration file follows the XDG Base Directory
Specification:

- Config: ~/.config/makogc/config.toml
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "makogc"

DEFAULT_STORE_ROOT = Path("/manta")
DEFAULT_LEDGER_PATH = Path("/var/tmp/bytes_processed")

# Name recorded in every ledger line; consumers of the ledger key on it
DEFAULT_PROGRAM_NAME = "mako_gc.sh"

# First path component below the store root for the versioned layout
VERSIONED_LAYOUT_MARKER = "v2"

STORE_ROOT_ENV = "MAKO_STORE_ROOT"
LEDGER_PATH_ENV = "MAKO_LEDGER_PATH"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/makogc/ (or XDG_CONFIG_HOME/makogc/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/makogc/config.toml.
    """
    return get_config_dir() / "config.toml"

