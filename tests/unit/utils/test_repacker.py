"""
Tests for layout repacking.
"""

from widget_grid_mcp.utils.grid_types import GridBounds, GridRect
from widget_grid_mcp.utils.occupancy import OccupancyGrid
from widget_grid_mcp.utils.repacker import (
    PackingHeuristic,
    pack_in_order,
    repack_layout,
    repack_optimal,
    score_packing,
)
from widget_grid_mcp.utils.viewport import is_valid_layout, layout_extent


class TestPackInOrder:
    """Test the first-fit packer."""

    def test_packs_in_given_order(self, small_bounds):
        packed, grid = pack_in_order([GridRect("A", 5, 5, 4, 2), GridRect("B", 0, 8, 8, 1)], small_bounds)
        assert packed == [GridRect("A", 0, 0, 4, 2), GridRect("B", 4, 0, 8, 1)]
        assert grid.free_cells() == 120 - 16

    def test_returns_none_when_rect_does_not_fit(self):
        bounds = GridBounds(4, 2)
        assert pack_in_order([GridRect("A", 0, 0, 3, 2), GridRect("B", 0, 0, 2, 2)], bounds) is None


class TestRepackLayout:
    """Test single-heuristic repacks."""

    def test_reading_order(self, small_bounds):
        layout = [GridRect("A", 0, 5, 4, 2), GridRect("B", 6, 8, 2, 2)]
        assert repack_layout(layout, small_bounds) == [
            GridRect("A", 0, 0, 4, 2),
            GridRect("B", 4, 0, 2, 2),
        ]

    def test_largest_area_keeps_input_order_in_result(self, small_bounds):
        layout = [GridRect("A", 0, 0, 2, 2), GridRect("B", 0, 2, 4, 4)]
        packed = repack_layout(layout, small_bounds, PackingHeuristic.LARGEST_AREA)
        assert packed == [GridRect("A", 4, 0, 2, 2), GridRect("B", 0, 0, 4, 4)]

    def test_row_filling_prefers_column_divisors(self, small_bounds):
        layout = [GridRect("P", 0, 0, 5, 5), GridRect("Q", 0, 5, 4, 2)]
        packed = repack_layout(layout, small_bounds, PackingHeuristic.ROW_FILLING)
        assert packed == [GridRect("P", 4, 0, 5, 5), GridRect("Q", 0, 0, 4, 2)]

    def test_empty_layout(self, small_bounds):
        assert repack_layout([], small_bounds) == []

    def test_overflow(self):
        bounds = GridBounds(4, 2)
        assert repack_layout([GridRect("A", 0, 0, 3, 2), GridRect("B", 0, 0, 2, 2)], bounds) is None


class TestRepackOptimal:
    """Test the multi-heuristic optimizer."""

    def test_compacts_scattered_layout(self, small_bounds):
        layout = [GridRect("A", 0, 4, 6, 2), GridRect("B", 6, 7, 6, 3)]
        packed = repack_optimal(layout, small_bounds)

        assert layout_extent(packed) == 3
        assert is_valid_layout(packed, small_bounds)
        assert [r.id for r in packed] == ["A", "B"]

    def test_never_increases_extent_of_valid_layout(self, two_column_layout, small_bounds):
        packed = repack_optimal(two_column_layout, small_bounds)
        assert layout_extent(packed) <= layout_extent(two_column_layout)
        assert is_valid_layout(packed, small_bounds)

    def test_sizes_are_preserved(self, dashboard_layout, dashboard_bounds):
        packed = repack_optimal(dashboard_layout, dashboard_bounds)
        assert [(r.id, r.w, r.h) for r in packed] == [
            (r.id, r.w, r.h) for r in dashboard_layout
        ]

    def test_none_when_nothing_fits(self):
        bounds = GridBounds(4, 2)
        assert repack_optimal([GridRect("A", 0, 0, 3, 2), GridRect("B", 0, 0, 2, 2)], bounds) is None

    def test_empty_layout(self, small_bounds):
        assert repack_optimal([], small_bounds) == []


class TestScorePacking:
    """Test packing scores."""

    def test_extent_then_free_cells(self):
        grid = OccupancyGrid(4, 4)
        packed = [GridRect("A", 0, 0, 2, 3)]
        grid.mark_zone(packed[0])
        assert score_packing(packed, grid) == (3, -6)
