"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

ACCOUNT_A = "0b4e2f9a-1c3d-4e5f-8a9b-0c1d2e3f4a5b"
ACCOUNT_B = "7d8e9f0a-2b3c-4d5e-9f6a-1b2c3d4e5f6a"


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    """Empty object store root."""
    root = tmp_path / "manta"
    root.mkdir()
    return root


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    """Ledger location in a writable directory (file not created)."""
    return tmp_path / "bytes_processed"


@pytest.fixture
def make_object(store_root: Path) -> Callable[..., Path]:
    """Create an object file of a given size below the store root."""

    def _make(*parts: str, size: int = 0) -> Path:
        path = store_root.joinpath(*parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        return path

    return _make


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the real config dir and env overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.delenv("MAKO_STORE_ROOT", raising=False)
    monkeypatch.delenv("MAKO_LEDGER_PATH", raising=False)
