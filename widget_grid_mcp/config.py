"""
Configuration settings for the widget grid MCP server.
"""

import logging
import os

SERVER_NAME = "WidgetGrid"

# Grid configuration constants
GRID_DEFAULTS = {
    "cols": 25,  # Fixed column count of the dashboard grid
    "row_height": 25,  # Row height in pixels
    "margin": (7, 7),  # Gap between cells in pixels (x, y)
    "container_padding": (8, 8),  # Padding around the grid in pixels (x, y)
    "max_widgets": 10,  # Practical widget-count ceiling
    "default_max_rows": 20,  # Used when the caller does not supply a row count
}


def _read_int_env(name: str) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        logging.warning(f"Ignoring non-integer value for {name}: {raw!r}")
        return None
    if value < 1:
        logging.warning(f"Ignoring non-positive value for {name}: {value}")
        return None
    return value


# Additional overrides from environment variables
_env_cols = _read_int_env("WIDGET_GRID_COLS")
if _env_cols is not None:
    GRID_DEFAULTS["cols"] = _env_cols

_env_rows = _read_int_env("WIDGET_GRID_MAX_ROWS")
if _env_rows is not None:
    GRID_DEFAULTS["default_max_rows"] = _env_rows

# Default widget dimensions (in grid units)
WIDGET_CATALOG = {
    "chart": {"w": 8, "h": 14, "min_w": 5, "min_h": 6},
    "screener": {"w": 10, "h": 14, "min_w": 5, "min_h": 6},
    "watchlist": {"w": 6, "h": 14, "min_w": 5, "min_h": 6},
}

# Layout presets for quick setup
LAYOUT_PRESETS = {
    "trading": {
        "name": "Trading",
        "description": "Optimized for active trading with chart and watchlist",
        "layout": [
            {"id": "chart-trading-1", "x": 0, "y": 0, "w": 8, "h": 8, "min_w": 3, "min_h": 6},
            {"id": "watchlist-trading-1", "x": 8, "y": 0, "w": 4, "h": 8, "min_w": 2, "min_h": 6},
        ],
    },
    "analysis": {
        "name": "Analysis",
        "description": "Multiple charts with screener for market analysis",
        "layout": [
            {"id": "chart-analysis-1", "x": 0, "y": 0, "w": 6, "h": 8, "min_w": 3, "min_h": 6},
            {"id": "chart-analysis-2", "x": 6, "y": 0, "w": 6, "h": 8, "min_w": 3, "min_h": 6},
            {"id": "screener-analysis-1", "x": 0, "y": 8, "w": 12, "h": 6, "min_w": 4, "min_h": 6},
        ],
    },
    "compact": {
        "name": "Compact",
        "description": "Minimal layout for quick overview",
        "layout": [
            {"id": "chart-compact-1", "x": 0, "y": 0, "w": 6, "h": 6, "min_w": 3, "min_h": 6},
            {"id": "watchlist-compact-1", "x": 6, "y": 0, "w": 6, "h": 6, "min_w": 2, "min_h": 6},
        ],
    },
}

# Safety limit for the incremental shrink phase of auto-adjust
AUTO_ADJUST_MAX_ITERATIONS = 200
