"""Built-in five-shade palettes, exposed as ``@palette`` colors and themes."""

from __future__ import annotations

from typing import NamedTuple

from tablebook.contracts.book import HeaderStyle, Style, Theme
from tablebook.engine.registry import DefinitionResolver


class StandardPalette(NamedTuple):
    darkest: str  # group.back
    dark: str  # header.back
    base: str  # tab, and the bare @palette color
    light: str
    lightest: str  # data.back


SHADES = StandardPalette._fields

STANDARD_PALETTES: dict[str, StandardPalette] = {
    # Reds
    "pink": StandardPalette("#741F3F", "#C0315A", "#E84E76", "#FFA3B9", "#FFD6E0"),
    "cranberry": StandardPalette("#4C0D1C", "#721026", "#A31432", "#E6A1A9", "#F4C2C9"),
    "red": StandardPalette("#660000", "#880000", "#C32222", "#F19999", "#F8C5C5"),
    # Oranges and yellows
    "rust": StandardPalette("#752203", "#993311", "#BD4022", "#E99275", "#F4C7B7"),
    "orange": StandardPalette("#8C4A04", "#C66A05", "#F08200", "#FFBB7F", "#FFE0C2"),
    "yellow": StandardPalette("#856500", "#BF9000", "#E6AC1E", "#FFE494", "#FFF2C4"),
    # Greens
    "green": StandardPalette("#294E13", "#38761D", "#4B9022", "#A7CF9B", "#D6E8CE"),
    "forest": StandardPalette("#1D3B0A", "#2B5811", "#3B7517", "#9BCE8A", "#D4EBCB"),
    "sage": StandardPalette("#38471F", "#596F34", "#788F4A", "#B8CBA3", "#DCEADF"),
    "moss": StandardPalette("#2E462D", "#445E3F", "#5A7752", "#A8BBA2", "#D9E3D6"),
    # Blues
    "slate": StandardPalette("#2A4545", "#366060", "#507878", "#AFC6C6", "#DEE8E8"),
    "teal": StandardPalette("#004548", "#006E6E", "#008F8F", "#8CD1CD", "#D1F0EC"),
    "cyan": StandardPalette("#0C343D", "#134F5C", "#1B657A", "#89BEC6", "#CBE5E8"),
    "blue": StandardPalette("#042850", "#0A3D7D", "#1155AA", "#82B0E1", "#C7DEF2"),
    "azure": StandardPalette("#073763", "#0B5394", "#1763B8", "#8BB6DE", "#CEE2F0"),
    "cerulean": StandardPalette("#005B99", "#0077CC", "#0095FF", "#99D6FF", "#CCE9FF"),
    # Purples
    "lavender": StandardPalette("#3F3677", "#5F51B7", "#776CCF", "#B5AAE6", "#DAD5F2"),
    "indigo": StandardPalette("#20124D", "#351C75", "#483CA4", "#A69FC4", "#D5D0E3"),
    "purple": StandardPalette("#2D0A53", "#4B0082", "#6A0DAD", "#B68EFF", "#E6D5FF"),
    "plum": StandardPalette("#4E1A45", "#6C3483", "#8E4FA8", "#C69DD1", "#E7D0EA"),
    "mauve": StandardPalette("#682F42", "#8D4659", "#A85475", "#E09FB0", "#F5D4DC"),
    # Neutrals
    "coral": StandardPalette("#762F2F", "#AF4A4A", "#D36868", "#FFB3AB", "#FFE0DC"),
    "terracotta": StandardPalette("#713F2D", "#9C5F4E", "#C87561", "#F2AE9C", "#FAD9CE"),
    "bronze": StandardPalette("#5D4037", "#895D4D", "#A6705F", "#D1B19E", "#EAD6C7"),
    "sand": StandardPalette("#6A5D47", "#8C755D", "#B5937A", "#D9C2AB", "#EDE0D2"),
    "taupe": StandardPalette("#483C32", "#6B5D4F", "#857667", "#C4B5A6", "#E5DBD1"),
    "gray": StandardPalette("#3B3B3B", "#656565", "#7E7E7E", "#BFBFBF", "#E8E8E8"),
    "charcoal": StandardPalette("#2A2A2A", "#4D4D4D", "#676767", "#B3B3B3", "#E2E2E2"),
}


def palette_color(name: str) -> str | None:
    """Resolve ``palette`` or ``palette:shade``; None when the palette is unknown.

    Raises LookupError for an unknown shade of a known palette.
    """
    palette_name, _, shade = name.partition(":")
    palette = STANDARD_PALETTES.get(palette_name)
    if palette is None:
        return None
    if not shade:
        return palette.base
    if shade not in SHADES:
        raise LookupError(f"Invalid color '{shade}' for palette '{palette_name}'")
    return getattr(palette, shade)


def palette_theme(name: str) -> Theme | None:
    palette = STANDARD_PALETTES.get(name)
    if palette is None:
        return None
    return Theme(
        tab=palette.base,
        group=HeaderStyle(back=palette.darkest),
        header=HeaderStyle(back=palette.dark),
        data=Style(back=palette.lightest),
    )


def standard_palette_resolver(themes: bool = True, colors: bool = True) -> DefinitionResolver:
    return DefinitionResolver(
        colors=palette_color if colors else None,
        themes=palette_theme if themes else None,
    )
