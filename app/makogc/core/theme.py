"""Console styles for makogc output.

Named styles live in the bundled data/theme.toml under [styles] and are
referenced from markup as ``[bytes]``, ``[warning]`` and so on.
"""

import tomllib
from functools import cache
from importlib import resources

from rich.theme import Theme

THEME_RESOURCE = "theme.toml"


def load_styles() -> dict[str, str]:
    """Read the named styles from the bundled theme.

    Returns:
        Mapping of style name to Rich style definition.
    """
    text = resources.files("makogc.data").joinpath(THEME_RESOURCE).read_text(encoding="utf-8")
    styles = tomllib.loads(text).get("styles", {})
    return {str(name): str(style) for name, style in styles.items()}


@cache
def get_theme() -> Theme:
    """Rich theme built from the bundled styles, loaded once."""
    return Theme(load_styles())
