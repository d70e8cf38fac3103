"""A basic HTTP server that answers with the name it was started under."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Sequence
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 80
READY_MESSAGE = "server is ready"
SHUTDOWN_MESSAGE = "signal received, starting graceful shutdown"

_log = logging.getLogger(__name__)


def program_name() -> str:
    """The file name of the program as it was invoked (``argv[0]``)."""
    return Path(sys.argv[0]).name


class _NameHandler(BaseHTTPRequestHandler):
    server_version = "simple"

    def _reply(self, status: HTTPStatus, body: bytes, send_body: bool = True) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if send_body:
            self.wfile.write(body)

    def _route(self, send_body: bool = True) -> None:
        if self.path == "/":
            self._reply(HTTPStatus.OK, program_name().encode("utf-8"), send_body)
        else:
            self._reply(HTTPStatus.NOT_FOUND, b"", send_body)

    def do_GET(self) -> None:
        self._route()

    def do_HEAD(self) -> None:
        self._route(send_body=False)

    def _not_allowed(self) -> None:
        status = HTTPStatus.METHOD_NOT_ALLOWED if self.path == "/" else HTTPStatus.NOT_FOUND
        self._reply(status, b"")

    do_POST = do_PUT = do_DELETE = do_PATCH = _not_allowed

    def log_message(self, format: str, *args: object) -> None:
        """Send access logs to the module logger instead of stderr."""
        _log.debug("%s - %s", self.address_string(), format % args)


def create_server(address: tuple[str, int]) -> ThreadingHTTPServer:
    """Bind the server to ``address`` without starting it."""
    return ThreadingHTTPServer(address, _NameHandler)


def _install_shutdown(server: ThreadingHTTPServer) -> None:
    if threading.current_thread() is not threading.main_thread():
        return

    def handle(signum: int, frame: object) -> None:
        print(SHUTDOWN_MESSAGE, flush=True)
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGINT, handle)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, handle)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Serve until SIGINT or SIGTERM arrives."""
    parser = argparse.ArgumentParser(description="Serve the program's own name.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    with create_server((args.host, args.port)) as server:
        _install_shutdown(server)
        port = server.server_address[1]
        print(f"server will be listening to the port {port}", file=sys.stderr, flush=True)
        print(READY_MESSAGE, flush=True)
        # Printed twice so readiness checks can count occurrences.
        print(READY_MESSAGE, flush=True)
        server.serve_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())