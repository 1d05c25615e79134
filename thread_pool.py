"""Bounded worker pool for accepted client connections."""

from __future__ import annotations

import logging
import queue
import socket
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

ClientAddress = tuple[str, int]
ConnectionHandler = Callable[[socket.socket, ClientAddress], None]

_STOP = None


class ThreadPool:
    """Fixed number of worker threads fed from a bounded connection queue.

    ``submit`` never blocks: a full queue is reported to the caller so the
    accept loop can turn the connection away.
    """

    def __init__(
        self,
        worker_count: int,
        queue_size: int,
        handler: ConnectionHandler,
        *,
        name_prefix: str = "static-worker",
    ) -> None:
        if worker_count <= 0:
            raise ValueError("worker_count must be positive")
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")

        self._handler = handler
        self._name_prefix = name_prefix
        self._worker_count = worker_count
        self._queue: queue.Queue[tuple[socket.socket, ClientAddress] | None] = queue.Queue(
            maxsize=queue_size
        )
        self._threads: list[threading.Thread] = []
        self._accepting = False
        self._in_flight = 0
        self._idle = threading.Condition()

    @property
    def worker_count(self) -> int:
        return self._worker_count

    @property
    def threads(self) -> tuple[threading.Thread, ...]:
        return tuple(self._threads)

    def start(self) -> None:
        self._accepting = True
        for index in range(self._worker_count):
            worker = threading.Thread(
                target=self._run_worker,
                name=f"{self._name_prefix}-{index}",
                daemon=True,
            )
            self._threads.append(worker)
            worker.start()

    def submit(self, client_socket: socket.socket, address: ClientAddress) -> bool:
        """Queue a connection; returns False when stopped or the queue is full."""
        if not self._accepting:
            return False
        with self._idle:
            try:
                self._queue.put_nowait((client_socket, address))
            except queue.Full:
                return False
            self._in_flight += 1
        return True

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued and running connection has finished."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._idle:
            while self._in_flight > 0:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._idle.wait(timeout=remaining)
            return True

    def shutdown(self, *, graceful: bool = False, timeout: float | None = None) -> None:
        if not self._threads:
            return
        self._accepting = False
        if graceful and not self.wait_idle(timeout=timeout):
            logger.warning("Shutdown timed out with %d connection(s) still open", self._in_flight)

        self._close_queued_connections()
        for _ in self._threads:
            try:
                self._queue.put(_STOP, timeout=1.0)
            except queue.Full:
                break
        for thread in self._threads:
            thread.join(timeout=1.0)
        self._threads.clear()

    def _close_queued_connections(self) -> None:
        """Close connections that were accepted but never reached a worker."""
        while True:
            try:
                job = self._queue.get_nowait()
            except queue.Empty:
                return
            if job is _STOP:
                continue
            client_socket, address = job
            logger.debug("Dropping queued connection from %s", address[0])
            try:
                client_socket.close()
            except OSError:
                logger.debug("Error closing queued connection", exc_info=True)
            finally:
                with self._idle:
                    self._in_flight -= 1
                    self._idle.notify_all()

    def _run_worker(self) -> None:
        while True:
            job = self._queue.get()
            if job is _STOP:
                return
            client_socket, address = job
            try:
                self._handler(client_socket, address)
            except Exception:
                logger.exception("Unhandled error while serving %s", address[0])
            finally:
                with self._idle:
                    self._in_flight -= 1
                    self._idle.notify_all()
