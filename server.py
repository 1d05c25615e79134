"""Static file server entry point and connection lifecycle."""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import signal
import socket
import sys
import threading
from pathlib import Path

from config import (
    BUFFER_SIZE,
    DRAIN_TIMEOUT_SECS,
    HOST,
    INDEX_FILE,
    LISTEN_BACKLOG,
    LOG_LEVEL,
    MAX_KEEPALIVE_REQUESTS,
    PORT,
    REQUEST_QUEUE_SIZE,
    ROOT_DIR,
    SOCKET_TIMEOUT_SECS,
    WORKER_COUNT,
)
from handlers.static_files import StaticFiles
from request import HTTPRequest, HTTPRequestParseError
from response import HTTPResponse
from router import Router
from socket_handler import (
    HTTPReadError,
    read_http_request_message,
    write_http_response_message,
)
from thread_pool import ThreadPool

logger = logging.getLogger(__name__)


class StaticServerError(Exception):
    """Fatal startup failure."""


class RootDirectoryError(StaticServerError):
    def __init__(self, root_dir: Path, reason: str) -> None:
        super().__init__(f"cannot serve {root_dir}: {reason}")
        self.root_dir = root_dir


class BindError(StaticServerError):
    def __init__(self, host: str, port: int, cause: OSError) -> None:
        super().__init__(f"cannot listen on {host}:{port}: {cause.strerror or cause}")
        self.host = host
        self.port = port
        self.cause = cause


class StaticFileServer:
    def __init__(
        self,
        host: str = HOST,
        port: int = PORT,
        root_dir: str | Path = ROOT_DIR,
        index_file: str = INDEX_FILE,
        router: Router | None = None,
        worker_count: int = WORKER_COUNT,
        request_queue_size: int = REQUEST_QUEUE_SIZE,
        *,
        socket_timeout_secs: float = SOCKET_TIMEOUT_SECS,
        drain_timeout_secs: float = DRAIN_TIMEOUT_SECS,
    ) -> None:
        self.host = host
        self.port = port
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file
        self.router = router or self._build_default_router()
        self.worker_count = worker_count
        self.request_queue_size = request_queue_size
        self.socket_timeout_secs = socket_timeout_secs
        self.drain_timeout_secs = drain_timeout_secs
        self.ready = threading.Event()

        self._server_socket: socket.socket | None = None
        self._pool: ThreadPool | None = None
        self._running = False

    def _build_default_router(self) -> Router:
        static_files = StaticFiles(root_dir=self.root_dir, index_file=self.index_file)
        router = Router(fallback=static_files.serve_static)
        router.add_route("GET", "/", static_files.serve_index)
        return router

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}/"

    def start(self) -> None:
        """Bind (if not bound yet) and serve until ``stop`` is called."""
        self.bind()
        self.serve_forever()

    def bind(self) -> None:
        """Validate the root directory and open the listening socket.

        Raises RootDirectoryError or BindError; both are fatal at startup.
        """
        if self._server_socket is not None:
            return
        self._check_root_dir()

        server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            if os.name == "posix":
                server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(LISTEN_BACKLOG)
        except OSError as exc:
            server_socket.close()
            raise BindError(self.host, self.port, exc) from exc

        server_socket.settimeout(0.2)
        self.port = server_socket.getsockname()[1]
        self._server_socket = server_socket
        logger.info("Listening on %s:%s, serving %s", self.host, self.port, self.root_dir)

    def serve_forever(self) -> None:
        if self._server_socket is None:
            self.bind()
        server_socket = self._server_socket

        pool = ThreadPool(
            worker_count=self.worker_count,
            queue_size=self.request_queue_size,
            handler=self._handle_client,
        )
        pool.start()
        self._pool = pool
        self._running = True
        self.ready.set()
        try:
            while self._running:
                try:
                    client_socket, address = server_socket.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break

                if not pool.submit(client_socket, address):
                    self._send_queue_full_response(client_socket, address)
        finally:
            self._running = False
            self._close_listener()
            pool.shutdown(graceful=True, timeout=self.drain_timeout_secs)
            self._pool = None
            self.ready.clear()
            logger.info("Server on port %s stopped", self.port)

    def stop(self) -> None:
        self._running = False
        self._close_listener()

    def _close_listener(self) -> None:
        server_socket, self._server_socket = self._server_socket, None
        if server_socket is not None:
            server_socket.close()

    def _check_root_dir(self) -> None:
        if not self.root_dir.is_dir():
            raise RootDirectoryError(self.root_dir, "not a directory")
        if not os.access(self.root_dir, os.R_OK | os.X_OK):
            raise RootDirectoryError(self.root_dir, "permission denied")

    def _send_queue_full_response(
        self, client_socket: socket.socket, address: tuple[str, int]
    ) -> None:
        logger.warning("Worker queue full, rejecting connection from %s", address[0])
        with client_socket:
            # unread request bytes at close() turn into a TCP reset
            client_socket.settimeout(0.05)
            with contextlib.suppress(OSError):
                client_socket.recv(BUFFER_SIZE)
            client_socket.settimeout(self.socket_timeout_secs)
            self._send_final_response(client_socket, HTTPResponse.error(503))

    def _send_final_response(self, client_socket: socket.socket, response: HTTPResponse) -> None:
        response.headers["Connection"] = "close"
        try:
            write_http_response_message(client_socket, response)
        except OSError:
            logger.debug("Client went away before the error response was sent")

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            client_socket.settimeout(self.socket_timeout_secs)
            request_count = 0
            carry = b""
            while request_count < MAX_KEEPALIVE_REQUESTS:
                try:
                    raw_request, carry = read_http_request_message(client_socket, carry)
                except HTTPReadError as exc:
                    self._send_final_response(client_socket, HTTPResponse.error(exc.status_code))
                    return
                except OSError:
                    return

                if not raw_request:
                    return

                try:
                    request = HTTPRequest.from_bytes(raw_request)
                except HTTPRequestParseError as exc:
                    self._send_final_response(client_socket, HTTPResponse.error(exc.status_code))
                    return

                request_count += 1
                response = self.dispatch(request)
                should_close = not request.keep_alive or request_count >= MAX_KEEPALIVE_REQUESTS
                if should_close:
                    response.headers.setdefault("Connection", "close")
                else:
                    response.headers.setdefault("Connection", "keep-alive")

                try:
                    write_http_response_message(client_socket, response)
                except OSError:
                    return

                if should_close:
                    return

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Route one parsed request to its handler."""
        allowed_methods = self.router.allowed_methods()
        if request.method not in allowed_methods:
            return HTTPResponse.error(405, {"Allow": ", ".join(sorted(allowed_methods))})

        lookup_method = "GET" if request.method == "HEAD" else request.method
        handler = self.router.resolve(lookup_method, request.path)
        if handler is None:
            response = HTTPResponse.error(404)
        else:
            try:
                response = handler(request)
            except Exception:
                logger.exception("Unhandled error in route handler for %s", request.path)
                response = HTTPResponse.error(500)

        if request.method == "HEAD":
            return response.without_body()
        return response


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve static files over HTTP")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--root", default=ROOT_DIR, help="directory to serve")
    parser.add_argument("--index", default=INDEX_FILE, help="entry document for /")
    parser.add_argument("--workers", type=int, default=WORKER_COUNT)
    parser.add_argument("--queue-size", type=int, default=REQUEST_QUEUE_SIZE)
    parser.add_argument("--timeout", type=float, default=SOCKET_TIMEOUT_SECS)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=LOG_LEVEL,
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = StaticFileServer(
        host=args.host,
        port=args.port,
        root_dir=args.root,
        index_file=args.index,
        worker_count=args.workers,
        request_queue_size=args.queue_size,
        socket_timeout_secs=args.timeout,
    )
    try:
        server.bind()
    except StaticServerError as exc:
        logger.error("%s", exc)
        return 1

    print(f"Server running at {server.url}", flush=True)
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGTERM, lambda _signum, _frame: server.stop())

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
