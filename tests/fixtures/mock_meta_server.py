"""Local HTTP server imitating the GitHub meta endpoint."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Dict, List, Optional


@dataclass
class MockMetaResponse:
    """One scripted response: status, body and optional ETag.

    A body split into ``chunk_count`` pieces is written with ``chunk_delay``
    seconds between pieces, imitating a slow link.
    """

    status: int = 200
    body: str = ""
    etag: Optional[str] = None
    chunk_count: int = 1
    chunk_delay: float = 0.0


@dataclass
class MockMetaState:
    """Responses served in order (the last one repeats) and the requests seen."""

    responses: List[MockMetaResponse] = field(default_factory=list)
    requests: List[Dict[str, str]] = field(default_factory=list)

    def next_response(self) -> MockMetaResponse:
        if len(self.responses) > 1:
            return self.responses.pop(0)
        if self.responses:
            return self.responses[0]
        return MockMetaResponse(status=404)


class MockMetaHandler(BaseHTTPRequestHandler):
    """HTTP handler serving scripted meta responses."""

    state: MockMetaState

    def do_GET(self) -> None:
        """Handle GET requests."""
        self.state.requests.append({key.lower(): value for key, value in self.headers.items()})
        response = self.state.next_response()

        payload = response.body.encode("utf-8")
        self.send_response(response.status)
        if response.etag:
            self.send_header("ETag", response.etag)
        if response.status != 304:
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if response.status != 304:
            self._write_body(payload, response)

    def _write_body(self, payload: bytes, response: MockMetaResponse) -> None:
        size = max(1, math.ceil(len(payload) / max(1, response.chunk_count)))
        try:
            for offset in range(0, len(payload), size):
                if offset and response.chunk_delay:
                    time.sleep(response.chunk_delay)
                self.wfile.write(payload[offset : offset + size])
                self.wfile.flush()
        except (BrokenPipeError, ConnectionResetError):
            # Client gave up before the body was complete.
            return

    def log_message(self, format: str, *args: Any) -> None:
        """Silence request logging."""


class MockMetaServer:
    """Threaded mock meta server bound to an ephemeral localhost port."""

    def __init__(self, host: str = "127.0.0.1") -> None:
        """Initialize mock server."""
        self.host = host
        self.state = MockMetaState()
        handler = type("BoundMockMetaHandler", (MockMetaHandler,), {"state": self.state})
        self.server: Optional[HTTPServer] = HTTPServer((self.host, 0), handler)
        self.thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        """Endpoint URL for the client under test."""
        assert self.server is not None
        return f"http://{self.host}:{self.server.server_port}/meta"

    def queue(self, *responses: MockMetaResponse) -> None:
        """Replace the scripted responses."""
        self.state.responses[:] = list(responses)

    def start(self) -> None:
        """Start serving in a background thread."""
        assert self.server is not None
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()

    def stop(self) -> None:
        """Shut the server down and release its port."""
        if self.thread is not None and self.server is not None:
            self.server.shutdown()
            self.thread.join(timeout=5)
        self.thread = None
        if self.server is not None:
            self.server.server_close()
            self.server = None

    def __enter__(self) -> "MockMetaServer":
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()
