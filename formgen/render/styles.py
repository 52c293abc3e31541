"""Theme style sheets shipped as package data."""

from functools import lru_cache
from importlib import resources

THEMES = ("dark", "light")


@lru_cache(maxsize=len(THEMES))
def stylesheet(theme: str = "dark") -> str:
    """Base rules followed by the theme's color variables.

    Raises:
        ValueError: If the theme is unknown
    """
    if theme not in THEMES:
        raise ValueError(f"Unknown theme '{theme}', expected one of {', '.join(THEMES)}")
    folder = resources.files(__package__).joinpath("themes")
    return "\n".join(
        folder.joinpath(name).read_text("utf-8") for name in (f"{theme}.css", "base.css")
    )
