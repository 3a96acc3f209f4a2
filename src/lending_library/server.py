"""
Lending Library MCP server.

Registers the catalog and circulation tools with FastMCP and runs them
over the configured transport. All rules live in ``LendingLibrary``; this
module is plumbing only.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .database.session import get_db_manager
from .observability import initialize_observability
from .tools import all_tools

# Use stderr to keep stdout clean for stdio transport
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)

config = get_config()

mcp = FastMCP(
    name=config.server_name,
    version=config.server_version,
    instructions=(
        "Lending Library - a catalog of books with per-title copy counts. "
        "Use add_book, get_book and find_books to manage the catalog, and "
        "checkout_book, return_book and find_lendings to lend copies to patrons."
    ),
)

for tool in all_tools:
    logger.debug("Registering tool: %s", tool["name"])
    mcp.tool(name=tool["name"], description=tool["description"])(tool["handler"])

logger.info("Registered %d tools", len(all_tools))


def run_server() -> None:
    """Create the schema if needed and serve requests until stopped."""
    logger.info("Starting %s v%s on %s transport", config.server_name, config.server_version, config.transport)

    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled")
    else:
        logging.getLogger().setLevel(config.log_level)
        logging.getLogger("fastmcp").setLevel(logging.WARNING)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    initialize_observability()
    get_db_manager().init_database()

    try:
        mcp.run(transport=config.transport.replace("_", "-"))
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)
    finally:
        get_db_manager().close()


def main() -> None:
    """Entry point for the ``lending-library`` console script."""
    try:
        run_server()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
