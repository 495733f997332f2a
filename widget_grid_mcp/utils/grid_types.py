"""
Core geometry types for the widget grid.

This module defines the rectangle, bounds and zone value types shared by
every packing component, plus the result records each layout operation
returns. All types are immutable: operations build new rects with
`dataclasses.replace` instead of mutating the caller's layout.

Coordinates are cell indices with the origin at the top-left corner of the
grid. Extents (`w`, `h`) are cell counts, so a rect covers the half-open
ranges `[x, x + w)` and `[y, y + h)`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FailureReason(Enum):
    """Why a layout operation could not be applied.

    Attributes:
        OUT_OF_BOUNDS (str): Requested position or size exceeds the grid.
        UNKNOWN_ID (str): The operation references an id absent from the layout.
        INFEASIBLE (str): No arrangement satisfies the constraints.
        BELOW_MINIMUM (str): Requested size is below the rect's minimum
            (or above its maximum).
        CAPACITY_EXCEEDED (str): Minimum footprint of all rects exceeds the grid area.
    """

    OUT_OF_BOUNDS = "out_of_bounds"
    UNKNOWN_ID = "unknown_id"
    INFEASIBLE = "infeasible"
    BELOW_MINIMUM = "below_minimum"
    CAPACITY_EXCEEDED = "capacity_exceeded"


class LayoutInputError(ValueError):
    """Raised when caller-supplied layout data cannot be converted to rects.

    Attributes:
        reason (FailureReason | None): Failure class reported to the caller,
            when the input is well-formed but breaks a layout invariant.
    """

    def __init__(self, message: str, reason: FailureReason | None = None):
        super().__init__(message)
        self.reason = reason


# Mapping from rect id to its (min_w, min_h) floor
MinSizeTable = dict[str, tuple[int, int]]


@dataclass(frozen=True)
class GridBounds:
    """The addressable area of the grid for one packing call.

    Attributes:
        cols (int): Number of columns.
        max_rows (int): Number of rows that fit in the viewport.
    """

    cols: int
    max_rows: int

    @property
    def capacity(self) -> int:
        """Total number of cells in the grid."""
        return self.cols * self.max_rows

    def contains(self, x: int, y: int, w: int, h: int) -> bool:
        """Checks whether a rectangle lies fully inside the grid.

        Examples:
            >>> GridBounds(12, 10).contains(8, 0, 4, 4)
            True
            >>> GridBounds(12, 10).contains(9, 0, 4, 4)
            False
        """
        return x >= 0 and y >= 0 and x + w <= self.cols and y + h <= self.max_rows


@dataclass(frozen=True)
class GridZone:
    """A position and size with no identity, used for previews and fit lists."""

    x: int
    y: int
    w: int
    h: int

    def overlaps_with(self, other: "GridZone | GridRect") -> bool:
        """Checks if two zones share at least one cell."""
        return not (
            self.x >= other.x + other.w
            or self.x + self.w <= other.x
            or self.y >= other.y + other.h
            or self.y + self.h <= other.y
        )

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class GridRect:
    """A placed widget's footprint in grid cells.

    Attributes:
        id (str): Unique widget identifier.
        x (int): Left column.
        y (int): Top row.
        w (int): Width in cells.
        h (int): Height in cells.
        min_w (int): Smallest width the widget may shrink to.
        min_h (int): Smallest height the widget may shrink to.
        max_w (int | None): Largest width, if limited.
        max_h (int | None): Largest height, if limited.
    """

    id: str
    x: int
    y: int
    w: int
    h: int
    min_w: int = 1
    min_h: int = 1
    max_w: int | None = None
    max_h: int | None = None

    @property
    def right(self) -> int:
        """Column just past the rect's right edge."""
        return self.x + self.w

    @property
    def bottom(self) -> int:
        """Row just past the rect's bottom edge."""
        return self.y + self.h

    @property
    def area(self) -> int:
        return self.w * self.h

    @property
    def zone(self) -> GridZone:
        return GridZone(self.x, self.y, self.w, self.h)

    def overlaps_with(self, other: "GridRect | GridZone") -> bool:
        """Checks if this rect shares at least one cell with another rect or zone.

        Examples:
            >>> a = GridRect("A", 0, 0, 4, 4)
            >>> a.overlaps_with(GridRect("B", 3, 3, 2, 2))
            True
            >>> a.overlaps_with(GridRect("C", 4, 0, 2, 2))
            False
        """
        return self.zone.overlaps_with(other)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GridRect":
        """Builds a rect from a JSON-style dict.

        Accepts `id` or `i` for the identifier and either camelCase
        (`minW`) or snake_case (`min_w`) size limits.

        Raises:
            LayoutInputError: If a required key is missing, a value is not an
                integer, a position is negative or a size is below one cell.
        """
        if not isinstance(data, dict):
            raise LayoutInputError(f"Layout entry must be an object, got {type(data).__name__}")

        rect_id = data.get("id", data.get("i"))
        if rect_id is None:
            raise LayoutInputError(f"Layout entry is missing an id: {data}")

        values = {}
        for key in ("x", "y", "w", "h"):
            if key not in data:
                raise LayoutInputError(f"Layout entry {rect_id!r} is missing {key!r}")
            values[key] = _as_int(data[key], key, rect_id)

        for snake, camel, default in (
            ("min_w", "minW", 1),
            ("min_h", "minH", 1),
            ("max_w", "maxW", None),
            ("max_h", "maxH", None),
        ):
            raw = data.get(snake, data.get(camel, default))
            values[snake] = None if raw is None else _as_int(raw, snake, rect_id)

        if values["x"] < 0 or values["y"] < 0:
            raise LayoutInputError(
                f"Layout entry {rect_id!r} has a negative position ({values['x']}, {values['y']})",
                FailureReason.OUT_OF_BOUNDS,
            )
        for key in ("w", "h", "min_w", "min_h", "max_w", "max_h"):
            if values[key] is not None and values[key] < 1:
                raise LayoutInputError(
                    f"Layout entry {rect_id!r} has {key}={values[key]}, must be at least 1"
                )

        return cls(id=str(rect_id), **values)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "min_w": self.min_w,
            "min_h": self.min_h,
        }
        if self.max_w is not None:
            data["max_w"] = self.max_w
        if self.max_h is not None:
            data["max_h"] = self.max_h
        return data


def _as_int(value: Any, key: str, rect_id: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise LayoutInputError(f"Layout entry {rect_id!r} has a boolean {key!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise LayoutInputError(f"Layout entry {rect_id!r} has a non-integer {key!r}: {value!r}")


def min_size_for(rect: GridRect, min_sizes: MinSizeTable | None) -> tuple[int, int]:
    """Returns the (min_w, min_h) floor for a rect.

    The caller's table wins; rects without an entry fall back to their own
    `min_w`/`min_h`.
    """
    if min_sizes and rect.id in min_sizes:
        return min_sizes[rect.id]
    return rect.min_w, rect.min_h


def find_rect(layout: list[GridRect], rect_id: str) -> GridRect | None:
    """Looks up a rect by id."""
    for rect in layout:
        if rect.id == rect_id:
            return rect
    return None


@dataclass
class PushResult:
    """Outcome of a push operation.

    On failure `layout` is the untouched input and `pushed_ids` is empty.
    """

    can_push: bool
    layout: list[GridRect]
    pushed_ids: list[str] = field(default_factory=list)
    reason: FailureReason | None = None


@dataclass
class ResizeSpaceResult:
    """Outcome of a resize with space management."""

    can_resize: bool
    layout: list[GridRect]
    moved_ids: list[str] = field(default_factory=list)
    shrunk_ids: list[str] = field(default_factory=list)
    reason: FailureReason | None = None


@dataclass
class SwapPreview:
    """Positions two rects would take after a pairwise swap."""

    source_id: str
    target_id: str
    source_new: GridZone
    target_new: GridZone


@dataclass
class MultiSwapPreview:
    """Positions for a source rect and every rect it displaces."""

    source_id: str
    target_ids: list[str]
    source_new: GridZone
    target_new: dict[str, GridZone]


@dataclass
class AutoAdjustResult:
    """Outcome of making room for a new rect.

    Attributes:
        can_add (bool): Whether the new rect fits.
        layout (list[GridRect]): Adjusted layout of the existing rects
            (the input when `can_add` is False).
        new_position (tuple[int, int] | None): Top-left cell for the new rect.
        shrunk_ids (list[str]): Rects whose size changed to make room.
        strategy (str | None): Name of the phase that found room.
        reason (FailureReason | None): Why the insertion failed.
    """

    can_add: bool
    layout: list[GridRect]
    new_position: tuple[int, int] | None = None
    shrunk_ids: list[str] = field(default_factory=list)
    strategy: str | None = None
    reason: FailureReason | None = None
