"""Main entry point for the markdown-brain MCP server."""

import argparse
import json
import logging
import sys
from dataclasses import dataclass

from fastmcp import FastMCP

from markdown_brain.config import TRANSPORTS, Config
from markdown_brain.dispatcher import QueryDispatcher
from markdown_brain.errors import RootDirectoryError
from markdown_brain.index import DocumentStore, SearchIndexHandle
from markdown_brain.sync import RescanScheduler, Synchronizer
from markdown_brain.tools import register_tools

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """The long-lived components behind the server."""

    store: DocumentStore
    index_handle: SearchIndexHandle
    synchronizer: Synchronizer
    dispatcher: QueryDispatcher
    rescan: RescanScheduler | None = None

    def start(self) -> None:
        self.synchronizer.start()
        if self.rescan is not None:
            self.rescan.start()

    def stop(self) -> None:
        if self.rescan is not None:
            self.rescan.stop()
        self.synchronizer.stop()


def build_services(config: Config, watch: bool = True) -> Services:
    """Wire store, index, synchronizer and dispatcher from config.

    Args:
        config: Configuration instance with all settings.
        watch: Subscribe to filesystem notifications when started.
    """
    store = DocumentStore()
    index_handle = SearchIndexHandle()
    synchronizer = Synchronizer(
        config.docs_root,
        store,
        index_handle,
        extension=config.extension,
        debounce=config.debounce_seconds,
        threshold=config.fuzzy_threshold,
        watch=watch,
    )
    dispatcher = QueryDispatcher(store, index_handle, root=config.docs_root)

    rescan = None
    if config.rescan_interval > 0:
        rescan = RescanScheduler(synchronizer, config.rescan_interval)

    return Services(
        store=store,
        index_handle=index_handle,
        synchronizer=synchronizer,
        dispatcher=dispatcher,
        rescan=rescan,
    )


def create_server(config: Config, services: Services) -> FastMCP:
    """Create the MCP server and register its tools.

    Args:
        config: Configuration instance with all settings.
        services: Components the tools read from.
    """
    mcp = FastMCP(
        name="markdown-brain",
        instructions=(
            "markdown-brain gives access to a folder of markdown notes. Use "
            "search_documents for fuzzy text search, get_document to read one "
            "note, list_documents to browse or filter by tag, find_similar for "
            "related notes and search_by_date for recently changed ones."
        ),
    )

    logger.info("Registering tools...")
    register_tools(mcp, services.dispatcher)

    logger.info("Server configured for %s", config.docs_root)
    return mcp


def main() -> None:
    """Main function - starts the MCP server."""
    parser = argparse.ArgumentParser(description="markdown-brain - MCP server for a folder of markdown documents")
    parser.add_argument(
        "docs_path",
        nargs="?",
        help="Documents directory (overrides MARKDOWN_DOCS_PATH)",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        help="MCP transport (overrides BRAIN_TRANSPORT)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for the sse transport (overrides BRAIN_PORT)",
    )
    parser.add_argument(
        "--rescan-interval",
        type=int,
        help="Seconds between full rescans, 0 disables (overrides BRAIN_RESCAN_INTERVAL)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Load the documents once, print index status and exit",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env(root_override=args.docs_path)
    except ValueError as e:
        parser.error(str(e))
    if args.transport:
        config.transport = args.transport
    if args.port is not None:
        config.port = args.port
    if args.rescan_interval is not None:
        config.rescan_interval = max(args.rescan_interval, 0)

    # Configure logging here to avoid side effects on import. Logs go to
    # stderr, stdout belongs to the stdio transport.
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    logger.info("=" * 50)
    logger.info("markdown-brain starting...")
    logger.info("  DOCS_PATH:  %s", config.docs_root)
    logger.info("  EXTENSION:  %s", config.extension)
    logger.info("  TRANSPORT:  %s", config.transport)
    logger.info("  RESCAN:     %s", f"{config.rescan_interval}s" if config.rescan_interval else "disabled")
    logger.info("=" * 50)

    services = build_services(config, watch=not args.check)
    try:
        services.start()
    except RootDirectoryError as e:
        logger.error("%s", e)
        sys.exit(1)

    if args.check:
        services.stop()
        print(json.dumps(services.dispatcher.status(), indent=2))
        return

    try:
        mcp = create_server(config, services)
        if config.transport == "sse":
            logger.info("Starting MCP server on port %s...", config.port)
            mcp.run(transport="sse", host="0.0.0.0", port=config.port)
        else:
            logger.info("Markdown Brain MCP server running on stdio")
            mcp.run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Server error")
        sys.exit(1)
    finally:
        services.stop()


if __name__ == "__main__":
    main()
