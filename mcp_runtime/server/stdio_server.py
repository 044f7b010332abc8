"""
Stdio Server - Serve a Dispatcher over newline delimited JSON

Module: server.stdio_server
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - serve_forever() reading one message per line until EOF
  - Replies written and flushed one per line

ARCHITECTURE:
StdioServer is the server half of StdioTransport. It is blocking and
single threaded: one line in, at most one line out. Logging must go to
stderr (see configure_logging) since stdout carries the frames.
"""

import io
import logging
import sys
from typing import IO, Optional

from ..core.constants import STDIO_ENCODING
from ..security.client_context import RequestContext
from .dispatcher import Dispatcher


class StdioServer:
    """
    Reads requests from input and writes responses to output
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        input_stream: Optional[IO] = None,
        output_stream: Optional[IO] = None,
        context: Optional[RequestContext] = None,
    ):
        """
        Initialize stdio server

        Args:
            dispatcher: Dispatcher handling each line
            input_stream: Text or binary stream (default: sys.stdin)
            output_stream: Text or binary stream (default: sys.stdout)
            context: Context template (identity, token) for every request
        """
        self.dispatcher = dispatcher
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        self.context = context or RequestContext(identity="stdio")
        self.logger = logging.getLogger("server.stdio")
        self.handled = 0

    def serve_forever(self) -> int:
        """
        Serve until EOF

        Returns:
            int: Number of lines handled
        """
        self.logger.info("Stdio server started")
        for line in self.input_stream:
            if isinstance(line, bytes):
                line = line.decode(STDIO_ENCODING, errors="replace")
            line = line.strip()
            if not line:
                continue

            self.handled += 1
            reply = self.dispatcher.handle(line, self._context())
            if reply is not None:
                self._write(reply)

        self.logger.info(f"Stdio server stopped after {self.handled} messages")
        return self.handled

    def _context(self) -> RequestContext:
        return RequestContext(
            identity=self.context.identity,
            auth_token=self.context.auth_token,
            headers=dict(self.context.headers),
            metadata=dict(self.context.metadata),
        )

    def _write(self, reply: str) -> None:
        data = reply + "\n"
        if isinstance(self.output_stream, io.TextIOBase):
            self.output_stream.write(data)
        else:
            self.output_stream.write(data.encode(STDIO_ENCODING))
        self.output_stream.flush()
        self.logger.debug(f"Sent {len(data)} chars")
