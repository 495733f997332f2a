"""
Tests for the grid geometry types.
"""

from dataclasses import FrozenInstanceError

import pytest

from widget_grid_mcp.utils.grid_types import (
    FailureReason,
    GridBounds,
    GridRect,
    GridZone,
    LayoutInputError,
    find_rect,
    min_size_for,
)


class TestGridBounds:
    """Test GridBounds class."""

    def test_capacity(self):
        assert GridBounds(12, 10).capacity == 120

    def test_contains(self):
        bounds = GridBounds(12, 10)
        assert bounds.contains(0, 0, 12, 10)
        assert bounds.contains(8, 6, 4, 4)
        assert not bounds.contains(9, 0, 4, 4)
        assert not bounds.contains(0, 7, 4, 4)
        assert not bounds.contains(-1, 0, 1, 1)


class TestGridRect:
    """Test GridRect class."""

    def test_edges_and_area(self):
        rect = GridRect("A", 2, 3, 4, 5)
        assert rect.right == 6
        assert rect.bottom == 8
        assert rect.area == 20
        assert rect.zone == GridZone(2, 3, 4, 5)

    def test_default_limits(self):
        rect = GridRect("A", 0, 0, 1, 1)
        assert (rect.min_w, rect.min_h) == (1, 1)
        assert rect.max_w is None and rect.max_h is None

    def test_overlap_detection(self):
        """Rects sharing a cell overlap; rects sharing only an edge do not."""
        a = GridRect("A", 0, 0, 4, 4)
        assert a.overlaps_with(GridRect("B", 3, 3, 2, 2))
        assert not a.overlaps_with(GridRect("C", 4, 0, 2, 2))
        assert not a.overlaps_with(GridRect("D", 0, 4, 2, 2))
        assert a.overlaps_with(GridZone(1, 1, 1, 1))

    def test_rects_are_immutable(self):
        rect = GridRect("A", 0, 0, 1, 1)
        with pytest.raises(FrozenInstanceError):
            rect.x = 3


class TestRectConversion:
    """Test conversion between rects and JSON dicts."""

    def test_from_dict_snake_case(self):
        rect = GridRect.from_dict({"id": "A", "x": 1, "y": 2, "w": 3, "h": 4, "min_w": 2})
        assert rect == GridRect("A", 1, 2, 3, 4, min_w=2)

    def test_from_dict_camel_case_and_i_key(self):
        rect = GridRect.from_dict(
            {"i": "chart-1", "x": 0, "y": 0, "w": 8, "h": 14, "minW": 5, "minH": 6, "maxW": 12}
        )
        assert rect.id == "chart-1"
        assert (rect.min_w, rect.min_h, rect.max_w) == (5, 6, 12)

    def test_from_dict_accepts_integral_floats(self):
        rect = GridRect.from_dict({"id": "A", "x": 1.0, "y": 0, "w": 2, "h": 2})
        assert rect.x == 1
        assert isinstance(rect.x, int)

    @pytest.mark.parametrize(
        "data",
        [
            {"x": 0, "y": 0, "w": 1, "h": 1},
            {"id": "A", "x": 0, "y": 0, "w": 1},
            {"id": "A", "x": "0", "y": 0, "w": 1, "h": 1},
            {"id": "A", "x": 0.5, "y": 0, "w": 1, "h": 1},
            {"id": "A", "x": True, "y": 0, "w": 1, "h": 1},
            ["A", 0, 0, 1, 1],
        ],
    )
    def test_from_dict_rejects_malformed_entries(self, data):
        with pytest.raises(LayoutInputError):
            GridRect.from_dict(data)

    @pytest.mark.parametrize(
        "overrides",
        [{"w": 0}, {"h": 0}, {"w": -2}, {"min_w": 0}, {"minH": 0}, {"maxW": 0}],
    )
    def test_from_dict_rejects_empty_sizes(self, overrides):
        data = {"id": "A", "x": 0, "y": 0, "w": 2, "h": 2, **overrides}
        with pytest.raises(LayoutInputError) as excinfo:
            GridRect.from_dict(data)
        assert excinfo.value.reason is None

    @pytest.mark.parametrize("overrides", [{"x": -1}, {"y": -3}])
    def test_from_dict_rejects_negative_positions(self, overrides):
        data = {"id": "A", "x": 0, "y": 0, "w": 2, "h": 2, **overrides}
        with pytest.raises(LayoutInputError) as excinfo:
            GridRect.from_dict(data)
        assert excinfo.value.reason is FailureReason.OUT_OF_BOUNDS

    def test_layout_input_error_is_value_error(self):
        assert issubclass(LayoutInputError, ValueError)
        assert LayoutInputError("bad").reason is None

    def test_to_dict_omits_unset_maximums(self):
        data = GridRect("A", 1, 2, 3, 4).to_dict()
        assert data == {"id": "A", "x": 1, "y": 2, "w": 3, "h": 4, "min_w": 1, "min_h": 1}

    def test_to_dict_includes_maximums(self):
        data = GridRect("A", 0, 0, 2, 2, max_w=4, max_h=5).to_dict()
        assert data["max_w"] == 4
        assert data["max_h"] == 5


class TestHelpers:
    """Test lookup helpers."""

    def test_min_size_prefers_table(self):
        rect = GridRect("A", 0, 0, 8, 8, min_w=3, min_h=3)
        assert min_size_for(rect, {"A": (5, 6)}) == (5, 6)
        assert min_size_for(rect, {"B": (5, 6)}) == (3, 3)
        assert min_size_for(rect, None) == (3, 3)

    def test_find_rect(self, two_column_layout):
        assert find_rect(two_column_layout, "B").x == 6
        assert find_rect(two_column_layout, "missing") is None

    def test_failure_reason_values(self):
        assert FailureReason.OUT_OF_BOUNDS.value == "out_of_bounds"
        assert FailureReason("capacity_exceeded") is FailureReason.CAPACITY_EXCEEDED
