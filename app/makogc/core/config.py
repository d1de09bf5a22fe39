"""Configuration file I/O.

This module provides the GcConfig model and functions for loading and
saving it in TOML format. Every field has a default matching the fixed
locations on a mako node, so the file is optional.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from makogc.core.paths import (
    DEFAULT_LEDGER_PATH,
    DEFAULT_PROGRAM_NAME,
    DEFAULT_STORE_ROOT,
    LEDGER_PATH_ENV,
    STORE_ROOT_ENV,
    VERSIONED_LAYOUT_MARKER,
    get_config_path,
)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when configuration content is invalid."""


class GcConfig(BaseModel):
    """Effective configuration for the reclaimer and the rollup.

    Attributes:
        store_root: Root directory of the object store.
        ledger_path: Append-only byte accounting ledger.
        program_name: Name written into each ledger line.
        versioned_marker: Directory marking the versioned path layout.
    """

    model_config = ConfigDict(extra="forbid")

    store_root: Annotated[Path, Field(description="Object store root")] = DEFAULT_STORE_ROOT
    ledger_path: Annotated[Path, Field(description="Byte ledger file")] = DEFAULT_LEDGER_PATH
    program_name: Annotated[str, Field(description="Ledger program tag")] = DEFAULT_PROGRAM_NAME
    versioned_marker: Annotated[
        str, Field(description="Versioned layout marker")
    ] = VERSIONED_LAYOUT_MARKER

    @field_validator("store_root", "ledger_path")
    @classmethod
    def validate_absolute(cls, v: Path) -> Path:
        """Paths must be absolute."""
        if not v.is_absolute():
            msg = f"path must be absolute: {v}"
            raise ValueError(msg)
        return v

    @field_validator("program_name", "versioned_marker")
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Tokens must be non-empty and free of whitespace and slashes."""
        if not v or any(c.isspace() for c in v) or "/" in v:
            msg = f"must be a single non-empty token, got {v!r}"
            raise ValueError(msg)
        return v


def load_config(path: Path | None = None) -> GcConfig:
    """Load and validate the configuration.

    A missing file yields the defaults. The MAKO_STORE_ROOT and
    MAKO_LEDGER_PATH environment variables override file values.

    Args:
        path: Path to the configuration file. If None, uses the default path.

    Returns:
        Validated GcConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file exists but cannot be read.
    """
    config_path = path or get_config_path()

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config: {e}") from e

    store_root = os.environ.get(STORE_ROOT_ENV)
    if store_root:
        data["store_root"] = store_root
    ledger_path = os.environ.get(LEDGER_PATH_ENV)
    if ledger_path:
        data["ledger_path"] = ledger_path

    try:
        return GcConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def save_config(config: GcConfig, path: Path | None = None) -> Path:
    """Save the configuration to a TOML file.

    The file is written to a temporary file in the same directory and
    moved into place with os.replace(). The temporary file is cleaned up
    on failure.

    Args:
        config: The GcConfig object to save.
        path: Destination path. If None, uses the default config path.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = config.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
