"""
Tests for placement queries.
"""

from widget_grid_mcp.utils.grid_types import GridZone
from widget_grid_mcp.utils.occupancy import OccupancyGrid, create_occupancy_grid
from widget_grid_mcp.utils.placement import (
    can_fit_at,
    find_all_fits,
    find_best_near,
    find_empty_regions,
    find_first_fit,
    get_rect_at,
)


class TestCanFitAt:
    """Test single-position fit checks."""

    def test_fits_in_empty_grid(self):
        grid = OccupancyGrid(4, 4)
        assert can_fit_at(grid, 0, 0, 4, 4)

    def test_out_of_bounds(self):
        grid = OccupancyGrid(4, 4)
        assert not can_fit_at(grid, 1, 0, 4, 1)
        assert not can_fit_at(grid, 0, -1, 1, 1)
        assert not can_fit_at(grid, 0, 3, 1, 2)

    def test_blocked_by_occupied_cell(self):
        grid = OccupancyGrid(4, 4)
        grid.mark(2, 2, 1, 1)
        assert not can_fit_at(grid, 1, 1, 2, 2)
        assert can_fit_at(grid, 0, 0, 2, 2)


class TestFindFirstFit:
    """Test row-major first-fit search."""

    def test_prefers_top_row(self, dashboard_layout, dashboard_bounds):
        grid = create_occupancy_grid(dashboard_layout, dashboard_bounds)
        assert find_first_fit(grid, 6, 14) == (18, 0)

    def test_moves_down_when_row_is_full(self):
        grid = OccupancyGrid(4, 4)
        grid.mark(0, 0, 4, 1)
        assert find_first_fit(grid, 2, 2) == (0, 1)

    def test_returns_none_when_full(self):
        grid = OccupancyGrid(2, 2)
        grid.mark(0, 0, 1, 1)
        assert find_first_fit(grid, 2, 2) is None

    def test_rect_larger_than_grid(self):
        assert find_first_fit(OccupancyGrid(2, 2), 3, 1) is None


class TestFindAllFits:
    """Test drop-zone enumeration."""

    def test_lists_positions_in_row_major_order(self):
        grid = OccupancyGrid(3, 2)
        grid.mark(0, 0, 1, 1)
        fits = find_all_fits(grid, 2, 1)
        assert fits == [GridZone(1, 0, 2, 1), GridZone(0, 1, 2, 1), GridZone(1, 1, 2, 1)]

    def test_empty_when_nothing_fits(self):
        assert find_all_fits(OccupancyGrid(2, 2), 3, 3) == []


class TestFindBestNear:
    """Test nearest-position search."""

    def test_exact_target_wins(self):
        grid = OccupancyGrid(10, 10)
        assert find_best_near(grid, 4, 5, 2, 2) == (4, 5)

    def test_nearest_ring_position(self):
        grid = OccupancyGrid(10, 10)
        grid.mark(4, 4, 2, 2)
        # Every ring-1 position still covers a marked cell; ring 2 starts at (2, 2)
        assert find_best_near(grid, 4, 4, 2, 2) == (2, 2)

    def test_ring_order_is_row_major(self):
        grid = OccupancyGrid(5, 5)
        grid.mark(2, 2, 1, 1)
        # Distance 1 ring around (2, 2): (1, 1) comes first
        assert find_best_near(grid, 2, 2, 1, 1) == (1, 1)

    def test_out_of_bounds_target(self):
        grid = OccupancyGrid(5, 5)
        assert find_best_near(grid, 4, 0, 2, 1) == (3, 0)

    def test_no_room(self):
        grid = OccupancyGrid(3, 3)
        grid.mark(1, 1, 1, 1)
        assert find_best_near(grid, 0, 0, 2, 2) is None


class TestEmptyRegions:
    """Test decomposition of free space into rectangles."""

    def test_regions_cover_free_cells(self):
        grid = OccupancyGrid(4, 3)
        grid.mark(0, 0, 2, 2)
        regions = find_empty_regions(grid)
        assert sum(r.w * r.h for r in regions) == grid.free_cells()
        for index, first in enumerate(regions):
            for second in regions[index + 1 :]:
                assert not first.overlaps_with(second)

    def test_full_grid_has_no_regions(self):
        grid = OccupancyGrid(2, 2)
        grid.mark(0, 0, 2, 2)
        assert find_empty_regions(grid) == []

    def test_empty_grid_is_one_region(self):
        assert find_empty_regions(OccupancyGrid(3, 2)) == [GridZone(0, 0, 3, 2)]


class TestLayoutQueries:
    """Test layout-level helpers."""

    def test_get_rect_at(self, two_column_layout):
        assert get_rect_at(two_column_layout, 7, 3).id == "B"
        assert get_rect_at(two_column_layout, 7, 3, exclude_id="B") is None
        assert get_rect_at(two_column_layout, 0, 6) is None
