"""
Repacking of a whole layout from an empty grid.

A repack places rects one at a time at their first-fit position, in an
order chosen by a heuristic. The optimizer runs every heuristic, scores the
complete candidates and keeps the most compact one. Rect counts are small
(bounded by the practical widget ceiling), so trying every ordering is
cheap.
"""

from collections.abc import Callable
from dataclasses import replace
from enum import Enum
import logging

from widget_grid_mcp.utils.grid_types import GridBounds, GridRect
from widget_grid_mcp.utils.occupancy import OccupancyGrid
from widget_grid_mcp.utils.placement import find_first_fit
from widget_grid_mcp.utils.viewport import is_valid_layout, layout_extent

logger = logging.getLogger(__name__)


class PackingHeuristic(Enum):
    """Orderings used to feed rects into the first-fit packer.

    Attributes:
        LARGEST_AREA (str): Largest area first.
        WIDEST (str): Widest first, taller first on ties.
        TALLEST (str): Tallest first, wider first on ties.
        READING_ORDER (str): Current position, top-left first.
        ROW_FILLING (str): Widths that evenly divide the column count first,
            then largest area.
    """

    LARGEST_AREA = "largest_area"
    WIDEST = "widest"
    TALLEST = "tallest"
    READING_ORDER = "reading_order"
    ROW_FILLING = "row_filling"


SortKey = Callable[[GridRect, GridBounds], tuple]

# Sort keys for each heuristic. sorted() is stable, so equal keys keep layout order.
HEURISTIC_KEYS: dict[PackingHeuristic, SortKey] = {
    PackingHeuristic.LARGEST_AREA: lambda r, b: (-r.area,),
    PackingHeuristic.WIDEST: lambda r, b: (-r.w, -r.h),
    PackingHeuristic.TALLEST: lambda r, b: (-r.h, -r.w),
    PackingHeuristic.READING_ORDER: lambda r, b: (r.y, r.x),
    PackingHeuristic.ROW_FILLING: lambda r, b: (0 if b.cols % r.w == 0 else 1, -r.area),
}


def pack_in_order(
    ordered: list[GridRect], bounds: GridBounds
) -> tuple[list[GridRect], OccupancyGrid] | None:
    """Places rects first-fit into an empty grid in the given order.

    Returns:
        tuple[list[GridRect], OccupancyGrid] | None: Packed rects (in the
        given order) and the resulting occupancy, or None if some rect does
        not fit.
    """
    grid = OccupancyGrid(bounds.cols, bounds.max_rows)
    packed = []

    for rect in ordered:
        position = find_first_fit(grid, rect.w, rect.h)
        if position is None:
            return None
        x, y = position
        grid.mark(x, y, rect.w, rect.h)
        packed.append(rect if (x, y) == (rect.x, rect.y) else replace(rect, x=x, y=y))

    return packed, grid


def _restore_order(packed: list[GridRect], layout: list[GridRect]) -> list[GridRect]:
    by_id = {rect.id: rect for rect in packed}
    return [by_id[rect.id] for rect in layout]


def repack_layout(
    layout: list[GridRect],
    bounds: GridBounds,
    heuristic: PackingHeuristic = PackingHeuristic.READING_ORDER,
) -> list[GridRect] | None:
    """Repacks a layout with a single heuristic.

    Returns:
        list[GridRect] | None: Packed layout in the input order, or None when
        the heuristic cannot place every rect.
    """
    if not layout:
        return []

    key = HEURISTIC_KEYS[heuristic]
    result = pack_in_order(sorted(layout, key=lambda r: key(r, bounds)), bounds)
    if result is None:
        return None
    return _restore_order(result[0], layout)


def score_packing(packed: list[GridRect], grid: OccupancyGrid) -> tuple[int, int]:
    """Scores a packing; lower is better.

    The primary criterion is the vertical extent `max(y + h)`. Ties go to the
    packing with more free cells in the rows above that extent.
    """
    extent = layout_extent(packed)
    return extent, -grid.free_cells(extent)


def repack_optimal(layout: list[GridRect], bounds: GridBounds) -> list[GridRect] | None:
    """Repacks a layout with every heuristic and keeps the best result.

    Candidates are scored with `score_packing`. The input layout, if it is
    already valid, is scored last as a baseline, so the result never has a
    larger vertical extent than the input.

    Returns:
        list[GridRect] | None: Best packing in the input order, or None when
        no heuristic places every rect and the input is not valid either.
    """
    if not layout:
        return []

    best = None
    best_score = None
    best_name = None

    for heuristic, key in HEURISTIC_KEYS.items():
        result = pack_in_order(sorted(layout, key=lambda r: key(r, bounds)), bounds)
        if result is None:
            continue
        packed, grid = result
        score = score_packing(packed, grid)
        if best_score is None or score < best_score:
            best, best_score, best_name = packed, score, heuristic.value

    if is_valid_layout(layout, bounds):
        grid = OccupancyGrid(bounds.cols, bounds.max_rows)
        for rect in layout:
            grid.mark_zone(rect)
        score = score_packing(layout, grid)
        if best_score is None or score < best_score:
            best, best_score, best_name = list(layout), score, "baseline"

    if best is None:
        logger.info(f"Repack failed: no ordering fits {len(layout)} rects")
        return None

    logger.debug(f"Repack chose {best_name} with extent {best_score[0]}")
    return _restore_order(best, layout)
