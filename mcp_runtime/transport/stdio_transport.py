"""
Stdio Transport - JSON-RPC 2.0 over two line-oriented streams

Module: transport.stdio_transport
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Background reader thread, one JSON object per line
  - Non-blocking send returning a PendingRequest for requests
  - spawn() to run an MCP server as a subprocess
  - Text and binary streams supported

ARCHITECTURE:
StdioTransport talks over an input stream and an output stream
(sys.stdin / sys.stdout by default, or the pipes of a spawned process).

Reader thread:
  readline -> skip blank -> _handle_frame()
  EOF ends the loop and emits "close". A line read after disconnect()
  is dropped and ends the loop.

send() writes under a lock and never blocks on the reply: callers wait on
the returned PendingRequest. is_connected reflects reader liveness, there
is no socket to inspect.

SECURITY NOTES:
- One bad line is logged and skipped, the loop keeps going
- spawn() takes an argument list, no shell is involved
"""

import io
import subprocess
import sys
import threading
from typing import Any, Dict, List, Optional

from ..core.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SHUTDOWN_TIMEOUT,
    EVENT_CLOSE,
    EVENT_ERROR,
    EVENT_OPEN,
    STDIO_ENCODING,
)
from ..core.errors import NotConnectedError, TransportError
from ..protocol import json_rpc
from ..protocol.pending_request import PendingRequest
from .base_transport import BaseTransport


class StdioTransport(BaseTransport):
    """
    JSON-RPC 2.0 Transport over line-oriented streams

    Each message is a complete line of compact JSON.
    """

    def __init__(
        self,
        input_stream=None,
        output_stream=None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        process: Optional[subprocess.Popen] = None,
    ):
        """
        Initialize Stdio transport

        Args:
            input_stream: Stream frames are read from (default: sys.stdin)
            output_stream: Stream frames are written to (default: sys.stdout)
            request_timeout: Seconds a request may stay pending
            process: Subprocess owning the streams, terminated on disconnect
        """
        super().__init__("stdio", request_timeout=request_timeout)
        self._input = input_stream if input_stream is not None else sys.stdin
        self._output = output_stream if output_stream is not None else sys.stdout
        self._process = process

        self._reader: Optional[threading.Thread] = None
        self._stopping = threading.Event()
        self._write_lock = threading.Lock()
        self._close_lock = threading.Lock()
        self._close_emitted = False

    @classmethod
    def spawn(
        cls,
        command: List[str],
        env: Optional[Dict[str, str]] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> "StdioTransport":
        """
        Launch a server subprocess and talk to its pipes

        Args:
            command: Argument list, e.g. ["python", "-m", "my_server"]
            env: Environment for the child (default: inherited)
            request_timeout: Seconds a request may stay pending

        Returns:
            StdioTransport (not yet connected)

        Raises:
            TransportError: If the process cannot be started
        """
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise TransportError(f"Cannot start {command[0]}: {e}") from e
        return cls(
            input_stream=process.stdout,
            output_stream=process.stdin,
            request_timeout=request_timeout,
            process=process,
        )

    @property
    def process(self) -> Optional[subprocess.Popen]:
        return self._process

    @property
    def is_connected(self) -> bool:
        return (
            self._reader is not None
            and self._reader.is_alive()
            and not self._stopping.is_set()
        )

    def connect(self) -> "StdioTransport":
        """
        Start the reader thread

        Returns:
            self
        """
        if self.is_connected:
            return self

        self._stopping.clear()
        with self._close_lock:
            self._close_emitted = False

        # A reader still blocked on readline() from a previous session resumes
        if self._reader is None or not self._reader.is_alive():
            self._reader = threading.Thread(
                target=self._read_loop,
                name="mcp-stdio-reader",
                daemon=True,
            )
            self._reader.start()
        self.logger.info("Stdio transport started")
        self.emit(EVENT_OPEN, {"transport": self.name})
        return self

    def disconnect(self) -> None:
        """
        Stop the reader and terminate a spawned process

        A reader blocked on a plain stream exits at its next line or EOF.
        """
        if self._reader is None:
            return
        self._stopping.set()

        if self._process is not None:
            self._stop_process()

        if self._reader is not threading.current_thread():
            self._reader.join(timeout=DEFAULT_SHUTDOWN_TIMEOUT)
        self._emit_close("disconnected")
        self.logger.info("Stdio transport stopped")

    def _stop_process(self) -> None:
        process = self._process
        try:
            if process.stdin and not process.stdin.closed:
                process.stdin.close()
        except OSError as e:
            self.logger.debug(f"Closing child stdin failed: {e}")
        try:
            process.wait(timeout=DEFAULT_SHUTDOWN_TIMEOUT)
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Child {process.pid} did not exit, terminating")
            process.terminate()
            try:
                process.wait(timeout=DEFAULT_SHUTDOWN_TIMEOUT)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()

    def send(self, message: Any) -> Optional[PendingRequest]:
        """
        Write one message as a JSON line

        Args:
            message: json_rpc message object or raw dict

        Returns:
            PendingRequest for a Request, None otherwise

        Raises:
            NotConnectedError: If the reader is not running
            TransportError: If the write fails
        """
        if not self.is_connected:
            raise NotConnectedError("Stdio transport not connected")

        data = json_rpc.encode(message) + "\n"
        pending = None
        if json_rpc.is_request(message):
            request = message if isinstance(message, dict) else message.to_dict()
            pending = self._register_pending(request["id"])

        try:
            self._write(data)
        except (OSError, ValueError) as e:
            error = TransportError(f"Write failed: {e}")
            if pending is not None:
                pending.reject(error)
            raise error from e

        self.logger.debug(f"Sent {len(data)} chars")
        return pending

    def _write(self, data: str) -> None:
        with self._write_lock:
            if isinstance(self._output, io.TextIOBase):
                self._output.write(data)
            else:
                self._output.write(data.encode(STDIO_ENCODING))
            self._output.flush()

    def _read_loop(self) -> None:
        """
        Background thread for reading the input stream
        """
        reason = "eof"
        while not self._stopping.is_set():
            try:
                line = self._input.readline()
            except (OSError, ValueError) as e:
                if not self._stopping.is_set():
                    self.logger.error(f"Read error: {e}")
                    self.emit(EVENT_ERROR, TransportError(f"Read error: {e}"))
                reason = "error"
                break

            if not line:
                self.logger.info("Input closed, stopping reader")
                break

            if self._stopping.is_set():
                reason = "disconnected"
                break

            if isinstance(line, bytes):
                line = line.decode(STDIO_ENCODING, errors="replace")
            line = line.strip()
            if not line:
                continue

            self._handle_frame(line)
        else:
            reason = "disconnected"

        self._emit_close(reason)

    def _emit_close(self, reason: str) -> None:
        with self._close_lock:
            if self._close_emitted:
                return
            self._close_emitted = True
        self.emit(EVENT_CLOSE, {"code": None, "reason": reason})
