"""
MCP server creation and configuration.
"""

import asyncio
import atexit
from collections.abc import Callable
import logging
import os
import signal
import sys

from fastmcp import FastMCP

from widget_grid_mcp.config import GRID_DEFAULTS, SERVER_NAME
from widget_grid_mcp.tools.layout_tools import register_layout_tools

# Track cleanup handlers
cleanup_handlers = []

# Flag to track whether we're already in shutdown process
_shutting_down = False

# Store server instance for clean shutdown
_server_instance = None


def add_cleanup_handler(handler: Callable) -> None:
    """Register a function to be called during cleanup.

    Args:
        handler: Function to call during cleanup
    """
    cleanup_handlers.append(handler)


def run_cleanup_handlers() -> None:
    """Run all registered cleanup handlers.

    Executes all cleanup functions in order, with error handling for each.
    Prevents multiple executions using the global _shutting_down flag.

    Note:
        This function is idempotent - multiple calls are safe.
    """
    global _shutting_down

    if _shutting_down:
        return

    _shutting_down = True
    logging.info("Running cleanup handlers...")

    for handler in cleanup_handlers:
        try:
            handler()
            logging.info(f"Cleanup handler {getattr(handler, '__name__', handler)} completed successfully")
        except Exception as e:
            logging.error(f"Error in cleanup handler {getattr(handler, '__name__', handler)}: {str(e)}", exc_info=True)


def shutdown_server() -> None:
    """Drop the global server instance if one exists.

    Safe to call even if no server instance exists.
    """
    global _server_instance

    if _server_instance:
        logging.info("Shutting down widget grid MCP server")
        _server_instance = None
        logging.info("Widget grid MCP server shutdown complete")


def register_signal_handlers(server: FastMCP) -> None:
    """Register handlers for system signals to ensure clean shutdown.

    Args:
        server: The FastMCP server instance
    """

    def handle_exit_signal(signum: int, frame) -> None:
        """Run cleanup, drop the server and exit immediately."""
        logging.info(f"Received signal {signum}, initiating shutdown...")

        run_cleanup_handlers()
        shutdown_server()

        # Exit without waiting for stdio processes which might be blocking
        os._exit(0)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            signal.signal(sig, handle_exit_signal)
            logging.info(f"Registered handler for signal {sig}")
        except (ValueError, AttributeError) as e:
            # Some signals may not be available on all platforms
            logging.error(f"Could not register handler for signal {sig}: {str(e)}")


def create_server() -> FastMCP:
    """Create and configure the widget grid MCP server.

    Registers the layout tools, signal handlers and cleanup procedures.

    Returns:
        FastMCP: Fully configured MCP server instance ready for use
    """
    logging.info("Initializing widget grid MCP server")
    logging.info(
        f"Default grid: {GRID_DEFAULTS['cols']} columns, {GRID_DEFAULTS['default_max_rows']} rows"
    )

    mcp = FastMCP(SERVER_NAME)
    logging.info("Created FastMCP server instance")

    logging.info("Registering tools...")
    register_layout_tools(mcp)

    register_signal_handlers(mcp)
    atexit.register(run_cleanup_handlers)

    add_cleanup_handler(lambda: logging.info("Widget grid MCP server shutdown complete"))

    logging.info("Server initialization complete")
    return mcp


# Logger configuration
def setup_logging() -> None:
    """Set up logging configuration.

    Configures basic logging at INFO level for the entire application.

    Note:
        Uses basicConfig which only takes effect on first call.
    """
    logging.basicConfig(level=logging.INFO)


setup_logging()
logger = logging.getLogger(__name__)


def setup_signal_handlers() -> None:
    """Set up SIGTERM and SIGINT handlers that clean up and exit."""

    def signal_handler(signum: int, frame) -> None:
        logger.info(f"Received shutdown signal {signum}")
        cleanup_handler()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def cleanup_handler() -> None:
    """Run the registered cleanup handlers, logging any failure.

    Safe to call multiple times.
    """
    logger.info("Starting server cleanup")
    try:
        run_cleanup_handlers()
    except Exception as e:
        logger.error(f"Error during cleanup: {e}")


async def main() -> None:
    """Main server entry point.

    Flow:
        1. Setup signal handlers
        2. Create and configure server
        3. Run the server over stdio until shutdown
        4. Handle shutdown signals and cleanup
    """
    try:
        logger.info("Starting widget grid MCP server")
        setup_signal_handlers()

        server = create_server()
        global _server_instance
        _server_instance = server

        await server.run_async()

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, graceful shutdown initiated")
        cleanup_handler()
    except Exception as e:
        logger.error(f"Server startup error: {e}")
        cleanup_handler()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
