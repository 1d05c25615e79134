"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket
from collections.abc import Iterator
from dataclasses import dataclass

from config import BUFFER_SIZE, MAX_BODY_BYTES, MAX_HEADER_BYTES
from response import HTTPResponse, prepare_response


class HTTPReadError(Exception):
    """Raised when a client request cannot be safely read from the socket."""

    status_code = 400


class MalformedRequestError(HTTPReadError):
    """Raised when socket bytes do not form a complete HTTP request."""


class HeaderTooLargeError(HTTPReadError):
    """Raised when HTTP headers exceed configured maximum size."""

    status_code = 431


class PayloadTooLargeError(HTTPReadError):
    """Raised when request body exceeds configured maximum size."""

    status_code = 413


class UnsupportedTransferEncodingError(HTTPReadError):
    """Raised when a request body is framed with Transfer-Encoding."""

    status_code = 501


class SocketTimeoutError(HTTPReadError):
    """Raised when a client times out while sending request bytes."""

    status_code = 408


@dataclass(slots=True)
class RequestHeadInfo:
    header_end_index: int
    expected_body_length: int


def _iter_header_fields(header_bytes: bytes) -> Iterator[tuple[str, str]]:
    for line in header_bytes.decode("iso-8859-1").split("\r\n")[1:]:
        if not line:
            continue
        if ":" not in line:
            raise MalformedRequestError("Malformed header while reading request")
        name, value = line.split(":", 1)
        yield name.strip().lower(), value.strip()


def inspect_http_request_head(buffer: bytes) -> RequestHeadInfo | None:
    """Inspect request headers from an in-memory buffer, if complete."""
    header_end_index = buffer.find(b"\r\n\r\n")
    if header_end_index == -1:
        if len(buffer) > MAX_HEADER_BYTES:
            raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")
        return None

    if header_end_index + 4 > MAX_HEADER_BYTES:
        raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")

    expected_body_length = 0
    for name, value in _iter_header_fields(bytes(buffer[:header_end_index])):
        if name == "transfer-encoding":
            raise UnsupportedTransferEncodingError("Transfer-Encoding is not supported")
        if name == "content-length":
            try:
                expected_body_length = int(value)
            except ValueError as exc:
                raise MalformedRequestError("Invalid Content-Length header") from exc
            if expected_body_length < 0:
                raise MalformedRequestError("Negative Content-Length header")

    if expected_body_length > MAX_BODY_BYTES:
        raise PayloadTooLargeError("Body exceeded MAX_BODY_BYTES")

    return RequestHeadInfo(
        header_end_index=header_end_index,
        expected_body_length=expected_body_length,
    )


def extract_http_request_message(buffer: bytes) -> tuple[bytes, bytes] | None:
    """Split one complete request off the front of ``buffer``.

    Returns ``(request_bytes, leftover_bytes)`` or ``None`` when more bytes
    are needed.
    """
    head_info = inspect_http_request_head(buffer)
    if head_info is None:
        return None

    request_length = head_info.header_end_index + 4 + head_info.expected_body_length
    if len(buffer) < request_length:
        return None
    return buffer[:request_length], buffer[request_length:]


def read_http_request_message(
    client_socket: socket.socket,
    initial_buffer: bytes = b"",
) -> tuple[bytes, bytes]:
    """Read one HTTP request and return (request_bytes, leftover_bytes).

    Returns ``(b"", b"")`` when the peer closes the connection cleanly
    between requests.
    """
    buffer = bytearray(initial_buffer)

    while True:
        extracted = extract_http_request_message(bytes(buffer))
        if extracted is not None:
            return extracted

        try:
            chunk = client_socket.recv(BUFFER_SIZE)
        except socket.timeout as exc:
            raise SocketTimeoutError("Timed out waiting for request bytes") from exc

        if not chunk:
            if not buffer:
                return b"", b""
            raise MalformedRequestError("Connection closed before request completed")

        buffer.extend(chunk)


def write_http_response_message(client_socket: socket.socket, response: HTTPResponse) -> int:
    """Write an HTTPResponse, streaming ``file_path`` bodies with sendfile."""
    prepared = prepare_response(response)
    client_socket.sendall(prepared.head)
    bytes_sent = len(prepared.head)

    if prepared.body:
        client_socket.sendall(prepared.body)
        bytes_sent += len(prepared.body)
    elif prepared.file_path is not None and prepared.content_length > 0:
        with prepared.file_path.open("rb") as file_obj:
            bytes_sent += client_socket.sendfile(file_obj, 0, prepared.content_length)

    return bytes_sent
