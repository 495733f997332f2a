"""
Swap engine for exchanging rect positions.

Two variants are supported:

- Pairwise swap: a dragged source rect and a target rect trade places, each
  keeping its own size. When sizes differ and the straight exchange would
  overlap or leave the grid, the rect that does not fit is searched for the
  nearest free position around the other's original slot.
- Group swap: a (typically large) source rect is dropped over several
  smaller rects. The source takes the drop position and each displaced rect
  is re-homed, largest first, near the source's original slot.

Both return None when no valid arrangement exists; the caller keeps its
last good layout.
"""

from dataclasses import replace
import logging

from widget_grid_mcp.utils.grid_types import (
    GridBounds,
    GridRect,
    GridZone,
    MultiSwapPreview,
    SwapPreview,
    find_rect,
)
from widget_grid_mcp.utils.occupancy import OccupancyGrid, create_occupancy_grid
from widget_grid_mcp.utils.placement import can_fit_at, find_best_near
from widget_grid_mcp.utils.viewport import (
    adjust_layout_to_viewport,
    clamp_to_viewport,
    is_valid_layout,
)

logger = logging.getLogger(__name__)


def _occupancy_without(layout: list[GridRect], bounds: GridBounds, *ids: str) -> OccupancyGrid:
    return create_occupancy_grid([r for r in layout if r.id not in ids], bounds)


def _with_marked(grid: OccupancyGrid, x: int, y: int, w: int, h: int) -> OccupancyGrid:
    staged = grid.copy()
    staged.mark(x, y, w, h)
    return staged


def _resolve_pair(
    layout: list[GridRect], source: GridRect, target: GridRect, bounds: GridBounds
) -> tuple[tuple[int, int], tuple[int, int]] | None:
    """Finds new top-left cells for a source and target rect trading places."""
    base = _occupancy_without(layout, bounds, source.id, target.id)

    # Straight exchange, clamped into the grid
    sx, sy = clamp_to_viewport(target.x, target.y, source.w, source.h, bounds)
    tx, ty = clamp_to_viewport(source.x, source.y, target.w, target.h, bounds)

    source_zone = GridZone(sx, sy, source.w, source.h)
    target_zone = GridZone(tx, ty, target.w, target.h)

    if source_zone.overlaps_with(target_zone):
        # Source gets first pick of the target's slot; only if it cannot sit
        # there does the target get first pick of the source's slot.
        if can_fit_at(base, sx, sy, source.w, source.h):
            staged = _with_marked(base, sx, sy, source.w, source.h)
            position = find_best_near(staged, source.x, source.y, target.w, target.h)
            if position is None:
                return None
            tx, ty = position
        elif can_fit_at(base, tx, ty, target.w, target.h):
            staged = _with_marked(base, tx, ty, target.w, target.h)
            position = find_best_near(staged, target.x, target.y, source.w, source.h)
            if position is None:
                return None
            sx, sy = position
        else:
            return None
    else:
        source_fits = can_fit_at(base, sx, sy, source.w, source.h)
        staged = _with_marked(base, sx, sy, source.w, source.h)
        target_fits = can_fit_at(staged, tx, ty, target.w, target.h)

        if not source_fits or not target_fits:
            if not source_fits:
                position = find_best_near(base, target.x, target.y, source.w, source.h)
                if position is None:
                    return None
                sx, sy = position
                staged = _with_marked(base, sx, sy, source.w, source.h)

            if not can_fit_at(staged, tx, ty, target.w, target.h):
                position = find_best_near(staged, source.x, source.y, target.w, target.h)
                if position is None:
                    return None
                tx, ty = position

    if not bounds.contains(sx, sy, source.w, source.h):
        return None
    if not bounds.contains(tx, ty, target.w, target.h):
        return None
    return (sx, sy), (tx, ty)


def calculate_swap_preview(
    layout: list[GridRect], source_id: str, target_id: str, bounds: GridBounds
) -> SwapPreview | None:
    """Computes where two rects would land after swapping.

    Args:
        layout (list[GridRect]): Current layout.
        source_id (str): Id of the dragged rect.
        target_id (str): Id of the rect being swapped with.
        bounds (GridBounds): Grid dimensions.

    Returns:
        SwapPreview | None: New zones for both rects (sizes preserved), or
        None if the ids are unknown, identical, or no valid pair of
        positions exists.
    """
    if source_id == target_id:
        return None
    source = find_rect(layout, source_id)
    target = find_rect(layout, target_id)
    if source is None or target is None:
        return None

    resolved = _resolve_pair(layout, source, target, bounds)
    if resolved is None:
        logger.info(f"Swap of {source_id} and {target_id} is not possible")
        return None

    (sx, sy), (tx, ty) = resolved
    return SwapPreview(
        source_id=source_id,
        target_id=target_id,
        source_new=GridZone(sx, sy, source.w, source.h),
        target_new=GridZone(tx, ty, target.w, target.h),
    )


def calculate_swap(
    layout: list[GridRect], source_id: str, target_id: str, bounds: GridBounds
) -> list[GridRect] | None:
    """Swaps two rects, keeping their sizes.

    The swapped layout goes through a viewport adjustment pass before being
    returned.

    Returns:
        list[GridRect] | None: The new layout, or None if the swap is not possible.
    """
    preview = calculate_swap_preview(layout, source_id, target_id, bounds)
    if preview is None:
        return None

    moves = {
        preview.source_id: preview.source_new,
        preview.target_id: preview.target_new,
    }
    swapped = [
        replace(r, x=moves[r.id].x, y=moves[r.id].y) if r.id in moves else r for r in layout
    ]
    return _finalize(swapped, bounds)


def find_overlapped_rects(
    layout: list[GridRect], source_id: str, x: int, y: int, w: int, h: int
) -> list[GridRect]:
    """Lists the rects a source would cover if placed at (x, y)."""
    zone = GridZone(x, y, w, h)
    return [r for r in layout if r.id != source_id and r.overlaps_with(zone)]


def calculate_multi_swap_preview(
    layout: list[GridRect], source_id: str, target_x: int, target_y: int, bounds: GridBounds
) -> MultiSwapPreview | None:
    """Computes a group swap for a source dropped over several rects.

    The drop position is clamped into the grid first, so overlap detection
    uses the position the source will actually take. Displaced rects are
    placed largest first near the source's original slot, falling back to
    the first free position anywhere.

    Returns:
        MultiSwapPreview | None: New zones for the source and every displaced
        rect, or None if the source is unknown, covers nothing, or any
        displaced rect cannot be placed.
    """
    source = find_rect(layout, source_id)
    if source is None:
        return None

    sx, sy = clamp_to_viewport(target_x, target_y, source.w, source.h, bounds)
    if not bounds.contains(sx, sy, source.w, source.h):
        return None

    overlapped = find_overlapped_rects(layout, source_id, sx, sy, source.w, source.h)
    if not overlapped:
        return None

    displaced_ids = {r.id for r in overlapped}
    working = _occupancy_without(layout, bounds, source_id, *displaced_ids)
    working.mark(sx, sy, source.w, source.h)

    placements = {}
    for rect in sorted(overlapped, key=lambda r: r.area, reverse=True):
        # find_best_near falls back to the first free position anywhere
        position = find_best_near(working, source.x, source.y, rect.w, rect.h)
        if position is None:
            logger.info(f"Group swap of {source_id} failed: no room for {rect.id}")
            return None

        x, y = position
        working.mark(x, y, rect.w, rect.h)
        placements[rect.id] = GridZone(x, y, rect.w, rect.h)

    return MultiSwapPreview(
        source_id=source_id,
        target_ids=[r.id for r in overlapped],
        source_new=GridZone(sx, sy, source.w, source.h),
        target_new=placements,
    )


def calculate_multi_swap(
    layout: list[GridRect], preview: MultiSwapPreview, bounds: GridBounds
) -> list[GridRect] | None:
    """Applies a group swap preview and reconciles the result with the viewport.

    Returns:
        list[GridRect] | None: The new layout, or None if the adjusted layout
        is not valid.
    """
    moves = dict(preview.target_new)
    moves[preview.source_id] = preview.source_new

    moved = [replace(r, x=moves[r.id].x, y=moves[r.id].y) if r.id in moves else r for r in layout]
    return _finalize(moved, bounds)


def _finalize(layout: list[GridRect], bounds: GridBounds) -> list[GridRect] | None:
    adjusted = adjust_layout_to_viewport(layout, bounds)
    if adjusted is None or not is_valid_layout(adjusted, bounds):
        return None
    return adjusted
