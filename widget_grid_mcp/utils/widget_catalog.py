"""
Widget catalog lookups.

The catalog maps a widget type to its default and minimum size. The packing
engine never reads it directly; callers use these helpers to build rects and
the min-size table each operation takes.
"""

from widget_grid_mcp.config import LAYOUT_PRESETS, WIDGET_CATALOG
from widget_grid_mcp.utils.grid_types import GridRect, LayoutInputError, MinSizeTable


def get_widget_size(widget_type: str) -> dict[str, int]:
    """Returns the catalog entry for a widget type.

    Raises:
        LayoutInputError: If the type is not in the catalog.
    """
    try:
        return dict(WIDGET_CATALOG[widget_type])
    except KeyError:
        known = ", ".join(sorted(WIDGET_CATALOG))
        raise LayoutInputError(f"Unknown widget type {widget_type!r} (known: {known})") from None


def build_min_size_table(widget_types: dict[str, str]) -> MinSizeTable:
    """Builds a min-size table from `{rect_id: widget_type}`."""
    table = {}
    for rect_id, widget_type in widget_types.items():
        size = get_widget_size(widget_type)
        table[rect_id] = (size["min_w"], size["min_h"])
    return table


def create_layout_item(rect_id: str, widget_type: str, x: int, y: int) -> GridRect:
    """Creates a rect of the catalog's default size for a widget type."""
    size = get_widget_size(widget_type)
    return GridRect(
        id=rect_id,
        x=x,
        y=y,
        w=size["w"],
        h=size["h"],
        min_w=size["min_w"],
        min_h=size["min_h"],
    )


def load_preset(name: str) -> list[GridRect]:
    """Returns a fresh copy of a named preset layout.

    Raises:
        LayoutInputError: If the preset does not exist.
    """
    preset = LAYOUT_PRESETS.get(name)
    if preset is None:
        known = ", ".join(sorted(LAYOUT_PRESETS))
        raise LayoutInputError(f"Unknown preset {name!r} (known: {known})")
    return [GridRect.from_dict(item) for item in preset["layout"]]
