"""
Space management for resizing a rect.

When a rect grows into cells held by other rects, those rects are first
relocated to free space elsewhere (Phase 1). Any rect that cannot move is
then shrunk away from the growing rect (Phase 2), never below its minimum
size. The resize is all-or-nothing: if one rect cannot be accommodated the
input layout is returned untouched.
"""

from dataclasses import replace
import logging

from widget_grid_mcp.utils.grid_types import (
    FailureReason,
    GridBounds,
    GridRect,
    GridZone,
    MinSizeTable,
    ResizeSpaceResult,
    find_rect,
    min_size_for,
)
from widget_grid_mcp.utils.occupancy import create_occupancy_grid
from widget_grid_mcp.utils.placement import find_first_fit

logger = logging.getLogger(__name__)


def _shrink_options(rect: GridRect, zone: GridZone) -> list[tuple[str, dict[str, int], int]]:
    """Candidate cuts that clear `zone` from `rect`, in tie-break order.

    Each entry is `(edge, changes, cut)` where `changes` is the field update
    for `dataclasses.replace` and `cut` the number of cells removed along
    the affected axis.
    """
    cut_left = zone.x + zone.w - rect.x
    cut_top = zone.y + zone.h - rect.y
    cut_right = rect.right - zone.x
    cut_bottom = rect.bottom - zone.y

    options = []
    if cut_left > 0:
        options.append(("left", {"x": rect.x + cut_left, "w": rect.w - cut_left}, cut_left))
    if cut_top > 0:
        options.append(("top", {"y": rect.y + cut_top, "h": rect.h - cut_top}, cut_top))
    if cut_right > 0:
        options.append(("right", {"w": rect.w - cut_right}, cut_right))
    if cut_bottom > 0:
        options.append(("bottom", {"h": rect.h - cut_bottom}, cut_bottom))
    return options


def shrink_away_from(
    rect: GridRect, zone: GridZone, min_size: tuple[int, int]
) -> GridRect | None:
    """Shrinks a rect so it no longer overlaps a zone.

    Tries cutting each edge that faces the zone: the left edge (rect moves
    right), the top edge (rect moves down), the right edge and the bottom
    edge. The edge closest to the zone, which needs the smallest cut, wins;
    ties keep that order. Cuts that would take the rect below `min_size` are
    skipped.

    Returns:
        GridRect | None: The shrunk rect, or None if no legal cut exists.
    """
    min_w, min_h = min_size
    legal = []
    for edge, changes, cut in _shrink_options(rect, zone):
        new_w = changes.get("w", rect.w)
        new_h = changes.get("h", rect.h)
        if new_w >= max(min_w, 1) and new_h >= max(min_h, 1):
            legal.append((cut, edge, changes))

    if not legal:
        return None

    # min() keeps the first entry on ties, preserving the edge order
    cut, edge, changes = min(legal, key=lambda option: option[0])
    logger.debug(f"Shrinking {rect.id} from the {edge} by {cut}")
    return replace(rect, **changes)


def calculate_resize_space(
    layout: list[GridRect],
    resizing_id: str,
    new_x: int,
    new_y: int,
    new_w: int,
    new_h: int,
    bounds: GridBounds,
    min_sizes: MinSizeTable | None = None,
) -> ResizeSpaceResult:
    """Validates a new extent for a rect and makes room for it.

    Growth may extend any of the four edges, so the position may change as
    well as the size.

    Complexity:
        O(K * R * C * w * h) for Phase 1, where K is the number of overlapped
        rects and R x C the grid; Phase 2 is O(K log K).

    Args:
        layout (list[GridRect]): Current layout.
        resizing_id (str): Id of the rect being resized.
        new_x (int): New left column.
        new_y (int): New top row.
        new_w (int): New width.
        new_h (int): New height.
        bounds (GridBounds): Grid dimensions.
        min_sizes (MinSizeTable | None): Minimum sizes per rect id.

    Returns:
        ResizeSpaceResult: The new layout with `moved_ids` and `shrunk_ids`,
        or the untouched input with `can_resize=False`.
    """
    resizing = find_rect(layout, resizing_id)
    if resizing is None:
        return ResizeSpaceResult(False, layout, reason=FailureReason.UNKNOWN_ID)

    if not bounds.contains(new_x, new_y, new_w, new_h):
        return ResizeSpaceResult(False, layout, reason=FailureReason.OUT_OF_BOUNDS)

    own_min_w, own_min_h = min_size_for(resizing, min_sizes)
    if (
        new_w < max(own_min_w, 1)
        or new_h < max(own_min_h, 1)
        or (resizing.max_w is not None and new_w > resizing.max_w)
        or (resizing.max_h is not None and new_h > resizing.max_h)
    ):
        return ResizeSpaceResult(False, layout, reason=FailureReason.BELOW_MINIMUM)

    new_zone = GridZone(new_x, new_y, new_w, new_h)
    resized = replace(resizing, x=new_x, y=new_y, w=new_w, h=new_h)

    affected = [r for r in layout if r.id != resizing_id and r.overlaps_with(new_zone)]
    if not affected:
        return ResizeSpaceResult(
            True, [resized if r.id == resizing_id else r for r in layout]
        )

    working = {r.id: r for r in layout}
    moved_ids = []
    shrunk_ids = []

    # Phase 1: move overlapped rects into free space
    still_affected = []
    for rect in affected:
        others = [r for r in working.values() if r.id not in (rect.id, resizing_id)]
        grid = create_occupancy_grid(others, bounds)
        grid.mark_zone(new_zone)

        spot = find_first_fit(grid, rect.w, rect.h)
        if spot is None:
            still_affected.append(rect)
            continue

        working[rect.id] = replace(rect, x=spot[0], y=spot[1])
        moved_ids.append(rect.id)
        logger.debug(f"Moved {rect.id} to {spot} to make room for {resizing_id}")

    # Phase 2: shrink what could not move, largest first
    still_affected.sort(key=lambda r: r.area, reverse=True)
    for rect in still_affected:
        shrunk = shrink_away_from(working[rect.id], new_zone, min_size_for(rect, min_sizes))
        if shrunk is None:
            logger.info(f"Resize of {resizing_id} rejected: {rect.id} cannot move or shrink")
            return ResizeSpaceResult(False, layout, reason=FailureReason.INFEASIBLE)
        working[rect.id] = shrunk
        shrunk_ids.append(rect.id)

    working[resizing_id] = resized
    new_layout = [working[r.id] for r in layout]
    return ResizeSpaceResult(True, new_layout, moved_ids, shrunk_ids)
