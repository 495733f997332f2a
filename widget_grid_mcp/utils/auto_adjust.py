"""
Auto-adjustment of a layout to make room for a new rect.

Insertion escalates through four phases and stops at the first that finds
room:

1. existing_space: the rect already fits somewhere.
2. repack: the existing rects are repacked without changing any size.
3. incremental_shrink: one unit at a time is taken off the most elastic
   rect, repacking after every step.
4. minimum_size: every rect is shrunk to its minimum and repacked once.

A capacity precheck before the shrink phases rejects requests that cannot
fit even with every rect at its minimum size.
"""

from dataclasses import replace
import logging

from widget_grid_mcp.config import AUTO_ADJUST_MAX_ITERATIONS
from widget_grid_mcp.utils.grid_types import (
    AutoAdjustResult,
    FailureReason,
    GridBounds,
    GridRect,
    MinSizeTable,
    min_size_for,
)
from widget_grid_mcp.utils.occupancy import create_occupancy_grid
from widget_grid_mcp.utils.placement import find_first_fit
from widget_grid_mcp.utils.repacker import PackingHeuristic, repack_layout, repack_optimal

logger = logging.getLogger(__name__)


def _fit_in(layout: list[GridRect] | None, w: int, h: int, bounds: GridBounds) -> tuple[int, int] | None:
    if layout is None:
        return None
    return find_first_fit(create_occupancy_grid(layout, bounds), w, h)


def _changed_size_ids(original: list[GridRect], adjusted: list[GridRect]) -> list[str]:
    before = {rect.id: (rect.w, rect.h) for rect in original}
    return [rect.id for rect in adjusted if before.get(rect.id) != (rect.w, rect.h)]


def pick_shrink_candidate(
    layout: list[GridRect], min_sizes: MinSizeTable | None
) -> tuple[str, str] | None:
    """Chooses the rect and axis to shrink by one unit.

    Priority is `area + excess_w + excess_h`, so larger rects with more room
    above their minimum go first. The first rect in layout order with the
    highest priority wins, and width is preferred over height for the same
    rect.

    Returns:
        tuple[str, str] | None: `(rect_id, "w" | "h")`, or None when every rect
        is already at its minimum.
    """
    best = None
    best_priority = None

    for rect in layout:
        min_w, min_h = min_size_for(rect, min_sizes)
        excess_w = rect.w - max(min_w, 1)
        excess_h = rect.h - max(min_h, 1)
        priority = rect.area + excess_w + excess_h

        for axis, excess in (("w", excess_w), ("h", excess_h)):
            if excess > 0 and (best_priority is None or priority > best_priority):
                best = (rect.id, axis)
                best_priority = priority

    return best


def calculate_auto_adjust(
    layout: list[GridRect],
    new_w: int,
    new_h: int,
    bounds: GridBounds,
    min_sizes: MinSizeTable | None = None,
    max_iterations: int = AUTO_ADJUST_MAX_ITERATIONS,
) -> AutoAdjustResult:
    """Finds room for a new rect of size (new_w, new_h).

    Args:
        layout (list[GridRect]): Current layout of existing rects.
        new_w (int): Width of the rect to insert.
        new_h (int): Height of the rect to insert.
        bounds (GridBounds): Grid dimensions.
        min_sizes (MinSizeTable | None): Minimum sizes of existing rects.
        max_iterations (int): Ceiling on single-unit shrink steps.

    Returns:
        AutoAdjustResult: The adjusted layout, the new rect's top-left cell,
        the ids of rects whose size changed and the phase that succeeded; or
        `can_add=False` with the input layout.
    """
    if new_w < 1 or new_h < 1 or new_w > bounds.cols or new_h > bounds.max_rows:
        return AutoAdjustResult(False, layout, reason=FailureReason.OUT_OF_BOUNDS)

    # Phase 1: existing space
    position = _fit_in(layout, new_w, new_h, bounds)
    if position is not None:
        return AutoAdjustResult(True, layout, position, [], "existing_space")

    # Phase 2: repack without size changes
    repacked = repack_optimal(layout, bounds)
    position = _fit_in(repacked, new_w, new_h, bounds)
    if position is not None:
        logger.info(f"Made room for {new_w}x{new_h} by repacking")
        return AutoAdjustResult(True, repacked, position, [], "repack")

    # Even at minimum size everything must fit in the grid area
    minimum_usage = 0
    for rect in layout:
        min_w, min_h = min_size_for(rect, min_sizes)
        minimum_usage += min_w * min_h
    if minimum_usage + new_w * new_h > bounds.capacity:
        logger.info(
            f"Cannot add {new_w}x{new_h}: minimum usage {minimum_usage} exceeds "
            f"capacity {bounds.capacity}"
        )
        return AutoAdjustResult(False, layout, reason=FailureReason.CAPACITY_EXCEEDED)

    # Phase 3: shrink one unit at a time with repacking
    working = list(layout)
    for iteration in range(max_iterations):
        candidate = pick_shrink_candidate(working, min_sizes)
        if candidate is None:
            break

        rect_id, axis = candidate
        working = [
            replace(r, **{axis: getattr(r, axis) - 1}) if r.id == rect_id else r for r in working
        ]

        simple = repack_layout(working, bounds, PackingHeuristic.READING_ORDER)
        optimal = repack_optimal(working, bounds)
        for packed in (simple, optimal):
            position = _fit_in(packed, new_w, new_h, bounds)
            if position is not None:
                shrunk = _changed_size_ids(layout, packed)
                logger.info(
                    f"Made room for {new_w}x{new_h} after {iteration + 1} shrink steps "
                    f"(shrunk: {', '.join(shrunk)})"
                )
                return AutoAdjustResult(True, packed, position, shrunk, "incremental_shrink")

        # Carry the best packing forward; shrinking alone keeps the layout valid
        if optimal is not None:
            working = optimal

    # Phase 4: everything at minimum size
    minimum_layout = []
    for rect in working:
        min_w, min_h = min_size_for(rect, min_sizes)
        minimum_layout.append(
            replace(rect, w=min(rect.w, max(min_w, 1)), h=min(rect.h, max(min_h, 1)))
        )

    packed = repack_optimal(minimum_layout, bounds)
    position = _fit_in(packed, new_w, new_h, bounds)
    if position is not None:
        shrunk = _changed_size_ids(layout, packed)
        logger.info(f"Made room for {new_w}x{new_h} by shrinking all rects to minimum")
        return AutoAdjustResult(True, packed, position, shrunk, "minimum_size")

    logger.info(f"No arrangement leaves room for {new_w}x{new_h}")
    return AutoAdjustResult(False, layout, reason=FailureReason.INFEASIBLE)
