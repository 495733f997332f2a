"""
Layout tools for the widget grid MCP server.

Each tool takes a plain-JSON layout (a list of rect dicts), the grid
dimensions and operation arguments, runs one packing operation and returns a
JSON-ready dict. Every result carries `success`; failures add an `error`
message and, for infeasible operations, a `reason` code.
"""

import logging
from typing import Any

from fastmcp import FastMCP

from widget_grid_mcp.config import GRID_DEFAULTS, LAYOUT_PRESETS
from widget_grid_mcp.utils.auto_adjust import calculate_auto_adjust
from widget_grid_mcp.utils.coordinate_converter import CoordinateConverter
from widget_grid_mcp.utils.grid_types import (
    FailureReason,
    GridBounds,
    GridRect,
    LayoutInputError,
    MinSizeTable,
)
from widget_grid_mcp.utils.occupancy import create_occupancy_grid
from widget_grid_mcp.utils.placement import (
    find_all_fits,
    find_best_near,
    find_empty_regions,
    find_first_fit,
    get_rect_at,
)
from widget_grid_mcp.utils.push_resolver import calculate_push
from widget_grid_mcp.utils.repacker import repack_optimal
from widget_grid_mcp.utils.resize_manager import calculate_resize_space
from widget_grid_mcp.utils.swap_engine import (
    calculate_multi_swap,
    calculate_multi_swap_preview,
    calculate_swap,
)
from widget_grid_mcp.utils.viewport import calculate_max_dimensions, validate_layout
from widget_grid_mcp.utils.widget_catalog import (
    build_min_size_table,
    create_layout_item,
    get_widget_size,
    load_preset,
)


def _parse_layout(
    layout: list[dict[str, Any]],
    cols: int | None,
    max_rows: int | None,
    require_valid: bool = True,
) -> tuple[list[GridRect], GridBounds]:
    """Convert tool arguments into rects and bounds.

    Args:
        layout: Widget rects as JSON dicts
        cols: Grid columns, or None for the default
        max_rows: Grid rows, or None for the default
        require_valid: Reject layouts with overlapping or out-of-grid rects

    Raises:
        LayoutInputError: If the layout or the grid dimensions are malformed,
            or `require_valid` is set and the layout breaks an invariant
    """
    cols = GRID_DEFAULTS["cols"] if cols is None else cols
    max_rows = GRID_DEFAULTS["default_max_rows"] if max_rows is None else max_rows
    if cols < 1 or max_rows < 1:
        raise LayoutInputError(f"Grid dimensions must be positive, got {cols}x{max_rows}")
    if not isinstance(layout, list):
        raise LayoutInputError("layout must be a list of widget rects")

    rects = [GridRect.from_dict(item) for item in layout]
    ids = [rect.id for rect in rects]
    if len(set(ids)) != len(ids):
        raise LayoutInputError("layout contains duplicate widget ids")
    bounds = GridBounds(cols, max_rows)

    if require_valid:
        issues = validate_layout(rects, bounds)
        if issues:
            outside = any(not bounds.contains(r.x, r.y, r.w, r.h) for r in rects)
            raise LayoutInputError(
                f"Invalid layout: {'; '.join(issues)}",
                FailureReason.OUT_OF_BOUNDS if outside else FailureReason.INFEASIBLE,
            )
    return rects, bounds


def _check_size(w: int, h: int, bounds: GridBounds) -> None:
    """Reject a requested widget size that cannot exist on the grid."""
    if w < 1 or h < 1 or w > bounds.cols or h > bounds.max_rows:
        raise LayoutInputError(
            f"A {w}x{h} widget does not fit a {bounds.cols}x{bounds.max_rows} grid",
            FailureReason.OUT_OF_BOUNDS,
        )


def _require_ids(rects: list[GridRect], *rect_ids: str) -> None:
    known = {rect.id for rect in rects}
    for rect_id in rect_ids:
        if rect_id not in known:
            raise LayoutInputError(
                f"Widget {rect_id!r} is not in the layout", FailureReason.UNKNOWN_ID
            )


def _min_size_table(
    min_sizes: dict[str, Any] | None, widget_types: dict[str, str] | None
) -> MinSizeTable:
    """Catalog minimums for `widget_types`, overridden by explicit `min_sizes`."""
    if widget_types is not None and not isinstance(widget_types, dict):
        raise LayoutInputError("widget_types must map widget ids to widget types")
    table = build_min_size_table(widget_types or {})
    table.update(_parse_min_sizes(min_sizes))
    return table


def _parse_min_sizes(min_sizes: dict[str, Any] | None) -> MinSizeTable:
    """Accepts `{id: {"minW": .., "minH": ..}}` or `{id: [min_w, min_h]}`."""
    table = {}
    for rect_id, value in (min_sizes or {}).items():
        if isinstance(value, dict):
            min_w = value.get("min_w", value.get("minW"))
            min_h = value.get("min_h", value.get("minH"))
        elif isinstance(value, (list, tuple)) and len(value) == 2:
            min_w, min_h = value
        else:
            raise LayoutInputError(f"Invalid minimum size for {rect_id!r}: {value!r}")
        if not isinstance(min_w, int) or not isinstance(min_h, int):
            raise LayoutInputError(f"Minimum size for {rect_id!r} must be integers")
        table[rect_id] = (min_w, min_h)
    return table


def _dump(layout: list[GridRect]) -> list[dict[str, Any]]:
    return [rect.to_dict() for rect in layout]


def _error(message: str, reason: FailureReason | None = None) -> dict[str, Any]:
    logging.info(f"Layout tool failed: {message}")
    result = {"success": False, "error": message}
    if reason is not None:
        result["reason"] = reason.value
    return result


def find_fit_positions(
    layout: list[dict[str, Any]],
    w: int,
    h: int,
    cols: int | None = None,
    max_rows: int | None = None,
    exclude_id: str | None = None,
) -> dict[str, Any]:
    """List every position where a widget of size (w, h) can be dropped.

    The result also splits the free cells into rectangular regions, so a
    client can show the open areas of the grid.
    """
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
        _check_size(w, h, bounds)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    grid = create_occupancy_grid(rects, bounds, exclude_id)
    positions = find_all_fits(grid, w, h)
    first = find_first_fit(grid, w, h)
    return {
        "success": True,
        "count": len(positions),
        "positions": [zone.to_dict() for zone in positions],
        "first_fit": {"x": first[0], "y": first[1]} if first else None,
        "free_regions": [zone.to_dict() for zone in find_empty_regions(grid)],
    }


def find_drop_position(
    layout: list[dict[str, Any]],
    w: int,
    h: int,
    target_x: int,
    target_y: int,
    cols: int | None = None,
    max_rows: int | None = None,
    exclude_id: str | None = None,
) -> dict[str, Any]:
    """Find the free position closest to a target cell for a widget of size (w, h)."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
        _check_size(w, h, bounds)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    grid = create_occupancy_grid(rects, bounds, exclude_id)
    position = find_best_near(grid, target_x, target_y, w, h)
    if position is None:
        return _error(f"No free position for a {w}x{h} widget", FailureReason.INFEASIBLE)
    return {"success": True, "position": {"x": position[0], "y": position[1]}}


def push_widgets(
    layout: list[dict[str, Any]],
    x: int,
    y: int,
    w: int,
    h: int,
    cols: int | None = None,
    max_rows: int | None = None,
    exclude_id: str | None = None,
) -> dict[str, Any]:
    """Clear a zone by pushing the widgets that overlap it."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    result = calculate_push(rects, x, y, w, h, bounds, exclude_id)
    if not result.can_push:
        return _error(f"Cannot clear zone ({x}, {y}, {w}, {h})", result.reason)
    return {"success": True, "layout": _dump(result.layout), "pushed_widgets": result.pushed_ids}


def resize_widget(
    layout: list[dict[str, Any]],
    widget_id: str,
    x: int,
    y: int,
    w: int,
    h: int,
    cols: int | None = None,
    max_rows: int | None = None,
    min_sizes: dict[str, Any] | None = None,
    widget_types: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Resize a widget, moving or shrinking the widgets it grows into.

    Neighbours never shrink below their minimum size. Minimums come from
    `min_sizes`, then from the catalog entry named in `widget_types`, then
    from each rect's own `min_w`/`min_h`.
    """
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
        table = _min_size_table(min_sizes, widget_types)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    result = calculate_resize_space(rects, widget_id, x, y, w, h, bounds, table)
    if not result.can_resize:
        return _error(f"Cannot resize {widget_id} to ({x}, {y}, {w}, {h})", result.reason)
    return {
        "success": True,
        "layout": _dump(result.layout),
        "moved_widgets": result.moved_ids,
        "shrunk_widgets": result.shrunk_ids,
    }


def swap_widgets(
    layout: list[dict[str, Any]],
    source_id: str,
    target_id: str,
    cols: int | None = None,
    max_rows: int | None = None,
) -> dict[str, Any]:
    """Swap the positions of two widgets, keeping their sizes."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
        _require_ids(rects, source_id, target_id)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    swapped = calculate_swap(rects, source_id, target_id, bounds)
    if swapped is None:
        return _error(f"Cannot swap {source_id} and {target_id}", FailureReason.INFEASIBLE)
    return {"success": True, "layout": _dump(swapped)}


def group_swap_widgets(
    layout: list[dict[str, Any]],
    source_id: str,
    target_x: int,
    target_y: int,
    cols: int | None = None,
    max_rows: int | None = None,
) -> dict[str, Any]:
    """Drop a widget over several others and re-home every displaced widget."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
        _require_ids(rects, source_id)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    preview = calculate_multi_swap_preview(rects, source_id, target_x, target_y, bounds)
    swapped = calculate_multi_swap(rects, preview, bounds) if preview else None
    if swapped is None:
        return _error(
            f"Cannot move {source_id} to ({target_x}, {target_y}) by group swap",
            FailureReason.INFEASIBLE,
        )
    return {"success": True, "layout": _dump(swapped), "displaced_widgets": preview.target_ids}


def repack_widgets(
    layout: list[dict[str, Any]],
    cols: int | None = None,
    max_rows: int | None = None,
) -> dict[str, Any]:
    """Re-lay out every widget from scratch in the most compact arrangement."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    packed = repack_optimal(rects, bounds)
    if packed is None:
        return _error("Widgets do not fit in the grid", FailureReason.INFEASIBLE)
    return {
        "success": True,
        "layout": _dump(packed),
        "extent": max((rect.bottom for rect in packed), default=0),
    }


def add_widget(
    layout: list[dict[str, Any]],
    widget_id: str,
    widget_type: str | None = None,
    w: int | None = None,
    h: int | None = None,
    cols: int | None = None,
    max_rows: int | None = None,
    min_sizes: dict[str, Any] | None = None,
    widget_types: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Add a widget, shrinking and repacking existing widgets if needed.

    The size comes from the widget catalog when `widget_type` is given,
    otherwise from `w` and `h`. Existing widgets keep the minimums given by
    `min_sizes` or, failing that, by their catalog type in `widget_types`.
    """
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
        table = _min_size_table(min_sizes, widget_types)
        if widget_type is not None:
            new_rect = create_layout_item(widget_id, widget_type, 0, 0)
        elif w is not None and h is not None:
            new_rect = GridRect(widget_id, 0, 0, w, h)
        else:
            raise LayoutInputError("Either widget_type or both w and h are required")
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    if any(rect.id == widget_id for rect in rects):
        return _error(f"Widget id {widget_id!r} is already in the layout")

    result = calculate_auto_adjust(rects, new_rect.w, new_rect.h, bounds, table)
    if not result.can_add:
        return _error(f"No room for a {new_rect.w}x{new_rect.h} widget", result.reason)

    x, y = result.new_position
    placed = GridRect(
        new_rect.id, x, y, new_rect.w, new_rect.h, new_rect.min_w, new_rect.min_h
    )
    logging.info(f"add_widget placed {widget_id} at ({x}, {y}) via {result.strategy}")
    return {
        "success": True,
        "layout": _dump(result.layout + [placed]),
        "position": {"x": x, "y": y},
        "shrunk_widgets": result.shrunk_ids,
        "strategy": result.strategy,
    }


def check_layout(
    layout: list[dict[str, Any]],
    cols: int | None = None,
    max_rows: int | None = None,
) -> dict[str, Any]:
    """Check a layout for overlaps and out-of-bounds widgets."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows, require_valid=False)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    issues = validate_layout(rects, bounds)
    return {"success": True, "valid": not issues, "issues": issues}


def max_dimensions(
    layout: list[dict[str, Any]],
    cols: int | None = None,
    max_rows: int | None = None,
) -> dict[str, Any]:
    """Compute how far each widget can grow before touching a neighbour."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    limits = calculate_max_dimensions(rects, bounds)
    return {
        "success": True,
        "limits": {rect_id: {"max_w": w, "max_h": h} for rect_id, (w, h) in limits.items()},
    }


def grid_coords_from_pixels(
    rel_x: float,
    rel_y: float,
    container_width: float,
    container_height: float,
) -> dict[str, Any]:
    """Convert a pointer position inside the grid container to a cell."""
    converter = CoordinateConverter()
    max_rows = converter.rows_for_height(container_height)
    cell = converter.pixel_to_grid(rel_x, rel_y, container_width, max_rows)
    return {
        "success": True,
        "max_rows": max_rows,
        "cell": {"x": cell[0], "y": cell[1]} if cell else None,
    }


def widget_at_cell(
    layout: list[dict[str, Any]],
    x: int,
    y: int,
    cols: int | None = None,
    max_rows: int | None = None,
    exclude_id: str | None = None,
) -> dict[str, Any]:
    """Find the widget covering a grid cell, e.g. the target under a drag."""
    try:
        rects, bounds = _parse_layout(layout, cols, max_rows)
    except LayoutInputError as e:
        return _error(str(e), e.reason)

    if not bounds.contains(x, y, 1, 1):
        return _error(f"Cell ({x}, {y}) is outside the grid", FailureReason.OUT_OF_BOUNDS)
    rect = get_rect_at(rects, x, y, exclude_id)
    return {"success": True, "widget": rect.to_dict() if rect else None}


def pixel_box(
    x: int,
    y: int,
    w: int,
    h: int,
    container_width: float,
) -> dict[str, Any]:
    """Convert a cell rectangle to its pixel box inside the grid container."""
    converter = CoordinateConverter()
    if w < 1 or h < 1 or x < 0 or y < 0 or x + w > converter.cols:
        return _error(
            f"Rect ({x}, {y}, {w}, {h}) is outside the {converter.cols}-column grid",
            FailureReason.OUT_OF_BOUNDS,
        )
    left, top, width, height = converter.grid_to_pixel(x, y, w, h, container_width)
    return {"success": True, "box": {"left": left, "top": top, "width": width, "height": height}}


def widget_size(widget_type: str) -> dict[str, Any]:
    """Look up the catalog size of a widget type."""
    try:
        return {"success": True, "size": get_widget_size(widget_type)}
    except LayoutInputError as e:
        return _error(str(e), e.reason)


def layout_preset(name: str) -> dict[str, Any]:
    """Return a named starter layout."""
    try:
        layout = load_preset(name)
    except LayoutInputError as e:
        return _error(str(e), e.reason)
    return {
        "success": True,
        "name": LAYOUT_PRESETS[name]["name"],
        "description": LAYOUT_PRESETS[name]["description"],
        "layout": _dump(layout),
    }


def register_layout_tools(mcp: FastMCP) -> None:
    """Register widget layout tools with the MCP server.

    Args:
        mcp: The FastMCP server instance
    """

    @mcp.tool(name="find_fit_positions")
    def find_fit_positions_tool(
        layout: list[dict[str, Any]],
        w: int,
        h: int,
        cols: int | None = None,
        max_rows: int | None = None,
        exclude_id: str | None = None,
    ) -> dict[str, Any]:
        """List every position where a widget of size (w, h) fits."""
        return find_fit_positions(layout, w, h, cols, max_rows, exclude_id)

    @mcp.tool(name="find_drop_position")
    def find_drop_position_tool(
        layout: list[dict[str, Any]],
        w: int,
        h: int,
        target_x: int,
        target_y: int,
        cols: int | None = None,
        max_rows: int | None = None,
        exclude_id: str | None = None,
    ) -> dict[str, Any]:
        """Find the free position closest to a target cell."""
        return find_drop_position(layout, w, h, target_x, target_y, cols, max_rows, exclude_id)

    @mcp.tool(name="push_widgets")
    def push_widgets_tool(
        layout: list[dict[str, Any]],
        x: int,
        y: int,
        w: int,
        h: int,
        cols: int | None = None,
        max_rows: int | None = None,
        exclude_id: str | None = None,
    ) -> dict[str, Any]:
        """Clear a zone by pushing overlapping widgets aside."""
        logging.info(f"Executing push_widgets for zone ({x}, {y}, {w}, {h})")
        return push_widgets(layout, x, y, w, h, cols, max_rows, exclude_id)

    @mcp.tool(name="resize_widget")
    def resize_widget_tool(
        layout: list[dict[str, Any]],
        widget_id: str,
        x: int,
        y: int,
        w: int,
        h: int,
        cols: int | None = None,
        max_rows: int | None = None,
        min_sizes: dict[str, Any] | None = None,
        widget_types: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Resize a widget, moving or shrinking its neighbours as needed."""
        logging.info(f"Executing resize_widget for {widget_id}")
        return resize_widget(
            layout, widget_id, x, y, w, h, cols, max_rows, min_sizes, widget_types
        )

    @mcp.tool(name="swap_widgets")
    def swap_widgets_tool(
        layout: list[dict[str, Any]],
        source_id: str,
        target_id: str,
        cols: int | None = None,
        max_rows: int | None = None,
    ) -> dict[str, Any]:
        """Swap two widgets' positions, keeping their sizes."""
        logging.info(f"Executing swap_widgets for {source_id} and {target_id}")
        return swap_widgets(layout, source_id, target_id, cols, max_rows)

    @mcp.tool(name="group_swap_widgets")
    def group_swap_widgets_tool(
        layout: list[dict[str, Any]],
        source_id: str,
        target_x: int,
        target_y: int,
        cols: int | None = None,
        max_rows: int | None = None,
    ) -> dict[str, Any]:
        """Move a widget over several others, re-homing the displaced ones."""
        logging.info(f"Executing group_swap_widgets for {source_id}")
        return group_swap_widgets(layout, source_id, target_x, target_y, cols, max_rows)

    @mcp.tool(name="repack_layout")
    def repack_layout_tool(
        layout: list[dict[str, Any]],
        cols: int | None = None,
        max_rows: int | None = None,
    ) -> dict[str, Any]:
        """Re-lay out all widgets in the most compact arrangement."""
        return repack_widgets(layout, cols, max_rows)

    @mcp.tool(name="add_widget")
    def add_widget_tool(
        layout: list[dict[str, Any]],
        widget_id: str,
        widget_type: str | None = None,
        w: int | None = None,
        h: int | None = None,
        cols: int | None = None,
        max_rows: int | None = None,
        min_sizes: dict[str, Any] | None = None,
        widget_types: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Add a widget, making room by repacking and shrinking if needed."""
        logging.info(f"Executing add_widget for {widget_id}")
        return add_widget(
            layout, widget_id, widget_type, w, h, cols, max_rows, min_sizes, widget_types
        )

    @mcp.tool(name="validate_layout")
    def validate_layout_tool(
        layout: list[dict[str, Any]],
        cols: int | None = None,
        max_rows: int | None = None,
    ) -> dict[str, Any]:
        """Check a layout for overlaps and out-of-bounds widgets."""
        return check_layout(layout, cols, max_rows)

    @mcp.tool(name="compute_max_dimensions")
    def compute_max_dimensions_tool(
        layout: list[dict[str, Any]],
        cols: int | None = None,
        max_rows: int | None = None,
    ) -> dict[str, Any]:
        """Compute resize limits for every widget."""
        return max_dimensions(layout, cols, max_rows)

    @mcp.tool(name="grid_coords_from_pixels")
    def grid_coords_from_pixels_tool(
        rel_x: float,
        rel_y: float,
        container_width: float,
        container_height: float,
    ) -> dict[str, Any]:
        """Convert a pointer position in pixels to a grid cell."""
        return grid_coords_from_pixels(rel_x, rel_y, container_width, container_height)

    @mcp.tool(name="get_widget_at")
    def get_widget_at_tool(
        layout: list[dict[str, Any]],
        x: int,
        y: int,
        cols: int | None = None,
        max_rows: int | None = None,
        exclude_id: str | None = None,
    ) -> dict[str, Any]:
        """Find the widget covering a grid cell."""
        return widget_at_cell(layout, x, y, cols, max_rows, exclude_id)

    @mcp.tool(name="grid_to_pixels")
    def grid_to_pixels_tool(
        x: int,
        y: int,
        w: int,
        h: int,
        container_width: float,
    ) -> dict[str, Any]:
        """Convert a cell rectangle to its pixel box."""
        return pixel_box(x, y, w, h, container_width)

    @mcp.tool(name="get_widget_size")
    def get_widget_size_tool(widget_type: str) -> dict[str, Any]:
        """Look up the default and minimum size of a widget type."""
        return widget_size(widget_type)

    @mcp.tool(name="get_layout_preset")
    def get_layout_preset_tool(name: str) -> dict[str, Any]:
        """Return a named starter layout (trading, analysis or compact)."""
        return layout_preset(name)
