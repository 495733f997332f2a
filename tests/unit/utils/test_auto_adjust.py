"""
Tests for making room for a new rect.
"""

from widget_grid_mcp.utils.auto_adjust import calculate_auto_adjust, pick_shrink_candidate
from widget_grid_mcp.utils.grid_types import FailureReason, GridBounds, GridRect


class TestPickShrinkCandidate:
    """Test shrink priority."""

    def test_largest_elastic_rect_first(self):
        layout = [
            GridRect("A", 0, 0, 2, 2),
            GridRect("B", 2, 0, 4, 4, min_w=4, min_h=4),
            GridRect("C", 6, 0, 3, 3),
        ]
        assert pick_shrink_candidate(layout, None) == ("C", "w")

    def test_height_when_width_at_minimum(self):
        layout = [GridRect("A", 0, 0, 3, 4)]
        assert pick_shrink_candidate(layout, {"A": (3, 2)}) == ("A", "h")

    def test_none_when_all_at_minimum(self):
        layout = [GridRect("A", 0, 0, 1, 1), GridRect("B", 1, 0, 2, 2, min_w=2, min_h=2)]
        assert pick_shrink_candidate(layout, None) is None


class TestCalculateAutoAdjust:
    """Test the four insertion phases."""

    def test_existing_space(self, dashboard_layout, dashboard_bounds):
        result = calculate_auto_adjust(dashboard_layout, 6, 14, dashboard_bounds)

        assert result.can_add
        assert result.new_position == (18, 0)
        assert result.strategy == "existing_space"
        assert result.shrunk_ids == []
        assert result.layout is dashboard_layout

    def test_repack_without_shrinking(self):
        bounds = GridBounds(12, 4)
        layout = [GridRect("A", 0, 0, 4, 2), GridRect("B", 8, 2, 4, 2)]
        result = calculate_auto_adjust(layout, 12, 2, bounds)

        assert result.can_add
        assert result.strategy == "repack"
        assert result.new_position == (0, 2)
        assert result.shrunk_ids == []
        assert [(r.w, r.h) for r in result.layout] == [(4, 2), (4, 2)]

    def test_incremental_shrink(self):
        bounds = GridBounds(4, 2)
        layout = [GridRect("A", 0, 0, 4, 2)]
        result = calculate_auto_adjust(layout, 4, 1, bounds, {"A": (3, 1)})

        assert result.can_add
        assert result.strategy == "incremental_shrink"
        assert result.shrunk_ids == ["A"]
        assert result.layout == [GridRect("A", 0, 0, 3, 1)]
        assert result.new_position == (0, 1)

    def test_minimum_size_phase(self):
        bounds = GridBounds(4, 2)
        layout = [GridRect("A", 0, 0, 4, 2)]
        result = calculate_auto_adjust(layout, 4, 1, bounds, {"A": (3, 1)}, max_iterations=0)

        assert result.can_add
        assert result.strategy == "minimum_size"
        assert result.layout == [GridRect("A", 0, 0, 3, 1)]
        assert result.new_position == (0, 1)

    def test_capacity_exceeded(self):
        bounds = GridBounds(4, 4)
        layout = [GridRect("A", 0, 0, 4, 4, min_w=4, min_h=4)]
        result = calculate_auto_adjust(layout, 1, 1, bounds)

        assert not result.can_add
        assert result.reason is FailureReason.CAPACITY_EXCEEDED
        assert result.layout is layout

    def test_infeasible_geometry(self):
        bounds = GridBounds(3, 3)
        layout = [GridRect("A", 0, 0, 3, 3)]
        result = calculate_auto_adjust(layout, 2, 2, bounds, {"A": (2, 2)})

        assert not result.can_add
        assert result.reason is FailureReason.INFEASIBLE
        assert result.layout is layout

    def test_new_rect_larger_than_grid(self, dashboard_bounds):
        result = calculate_auto_adjust([], 26, 1, dashboard_bounds)
        assert result.reason is FailureReason.OUT_OF_BOUNDS

    def test_small_rect_never_reports_shrinks_when_space_exists(self, two_column_layout, small_bounds):
        result = calculate_auto_adjust(two_column_layout, 1, 1, small_bounds)
        assert result.can_add
        assert result.shrunk_ids == []
