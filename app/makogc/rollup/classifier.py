"""Account attribution for object store paths.

Two layouts coexist below the store root:

- legacy:    <root>/<account>/...
- versioned: <root>/v2/<account>/...

The marker is checked on every call since both layouts can be present on
one node at the same time.
"""

from pathlib import PurePath

from makogc.core.paths import VERSIONED_LAYOUT_MARKER


class PathClassificationError(ValueError):
    """Raised when a path cannot be attributed to an account."""


def classify_path(
    path: str | PurePath,
    store_root: str | PurePath,
    marker: str = VERSIONED_LAYOUT_MARKER,
) -> str:
    """Return the account owning a file under the store root.

    Args:
        path: Absolute path of a file in the object store.
        store_root: Absolute object store root.
        marker: First component that identifies the versioned layout.

    Returns:
        The account identifier.

    Raises:
        PathClassificationError: If the path is not below the store root or
            has no account component.
    """
    try:
        parts = PurePath(path).relative_to(store_root).parts
    except ValueError as e:
        msg = f"{path} is not under the object store root {store_root}"
        raise PathClassificationError(msg) from e

    if parts and parts[0] == marker:
        parts = parts[1:]

    # The account must be a directory, never the file itself
    if len(parts) < 2:
        msg = f"{path} has no account component"
        raise PathClassificationError(msg)

    return parts[0]
