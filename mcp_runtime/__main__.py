"""
MCP Runtime Entry Point

Allows serving an empty dispatcher via `python -m mcp_runtime`.
Configures logging to stderr (to keep stdout clean for JSON-RPC) and serves
stdio by default, or WebSocket with --websocket.
"""

import argparse
import asyncio
import logging
import sys

from .core.config import ServerConfig, configure_logging
from .server.dispatcher import Dispatcher
from .server.stdio_server import StdioServer
from .server.websocket_server import WebSocketServer, WebSocketServerConfig


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="mcp_runtime")
    parser.add_argument("--websocket", action="store_true", help="serve WebSocket instead of stdio")
    parser.add_argument("--host", default=WebSocketServerConfig.host)
    parser.add_argument("--port", type=int, default=WebSocketServerConfig.port)
    parser.add_argument("--rate-limit", type=int, default=ServerConfig.rate_limit_per_minute)
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args(argv)


async def serve_websocket(dispatcher: Dispatcher, config: WebSocketServerConfig) -> None:
    server = WebSocketServer(dispatcher, config)
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.INFO)
    logger = logging.getLogger("main")

    dispatcher = Dispatcher(ServerConfig(rate_limit_per_minute=args.rate_limit))
    try:
        if args.websocket:
            logger.info("Starting MCP runtime on WebSocket...")
            asyncio.run(serve_websocket(dispatcher, WebSocketServerConfig(args.host, args.port)))
        else:
            logger.info("Starting MCP runtime on Stdio...")
            StdioServer(dispatcher).serve_forever()
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
