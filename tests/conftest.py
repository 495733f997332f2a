"""
Pytest configuration and shared fixtures for widget grid tests.
"""

from typing import Any
from unittest.mock import Mock

from fastmcp import FastMCP
import pytest

from widget_grid_mcp.utils.grid_types import GridBounds, GridRect


@pytest.fixture
def small_bounds() -> GridBounds:
    """A 12x10 grid."""
    return GridBounds(12, 10)


@pytest.fixture
def dashboard_bounds() -> GridBounds:
    """The default 25-column dashboard with 20 rows."""
    return GridBounds(25, 20)


@pytest.fixture
def two_column_layout() -> list[GridRect]:
    """Two 6x6 rects side by side across a 12-column grid."""
    return [GridRect("A", 0, 0, 6, 6), GridRect("B", 6, 0, 6, 6)]


@pytest.fixture
def dashboard_layout() -> list[GridRect]:
    """A chart and a screener filling the left 18 columns of the dashboard."""
    return [
        GridRect("chart-1", 0, 0, 8, 14, min_w=5, min_h=6),
        GridRect("screener-1", 8, 0, 10, 14, min_w=5, min_h=6),
    ]


@pytest.fixture
def json_layout() -> list[dict[str, Any]]:
    """The dashboard layout as the MCP client sends it."""
    return [
        {"i": "chart-1", "x": 0, "y": 0, "w": 8, "h": 14, "minW": 5, "minH": 6},
        {"i": "screener-1", "x": 8, "y": 0, "w": 10, "h": 14, "minW": 5, "minH": 6},
    ]


@pytest.fixture
def mock_mcp() -> Mock:
    """A FastMCP stand-in whose tool decorator records registrations by name."""
    mcp = Mock(spec=FastMCP)
    mcp.registered_tools = {}

    def mock_tool(*args, **kwargs):
        def decorator(func):
            tool_name = kwargs.get("name", func.__name__)
            mcp.registered_tools[tool_name] = func
            return func

        return decorator

    mcp.tool = mock_tool
    return mcp
