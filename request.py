"""HTTP request model and parser."""

from dataclasses import dataclass, field

from config import MAX_BODY_BYTES, MAX_TARGET_LENGTH

ALLOWED_HTTP_VERSIONS = {"HTTP/1.1", "HTTP/1.0"}
KNOWN_METHODS = {
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "OPTIONS",
    "PATCH",
    "TRACE",
    "CONNECT",
}


class HTTPRequestParseError(ValueError):
    """Request parse error carrying an HTTP status code."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class HTTPRequest:
    method: str
    path: str
    http_version: str
    raw_target: str = "/"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    query_string: str = ""
    keep_alive: bool = False

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPRequest":
        """Parse one complete request message (head plus optional body)."""
        head, separator, body = raw.partition(b"\r\n\r\n")
        if not separator:
            raise HTTPRequestParseError("Missing CRLF CRLF request separator")

        request_line, *header_lines = head.decode("iso-8859-1").split("\r\n")
        method, target, http_version = _parse_request_line(request_line)
        path, query_string = _split_target(target)
        headers = _parse_header_lines(header_lines)

        if http_version == "HTTP/1.1" and "host" not in headers:
            raise HTTPRequestParseError("Host header required for HTTP/1.1")

        return cls(
            method=method,
            path=path,
            raw_target=target,
            http_version=http_version,
            headers=headers,
            body=_check_body(headers, body),
            query_string=query_string,
            keep_alive=_is_keep_alive(http_version, headers.get("connection", "")),
        )


def _parse_request_line(request_line: str) -> tuple[str, str, str]:
    if not request_line:
        raise HTTPRequestParseError("Missing request line")

    tokens = request_line.split(" ")
    if len(tokens) != 3:
        raise HTTPRequestParseError("Invalid request line")
    if not all(tokens):
        raise HTTPRequestParseError("Request line contains empty tokens")

    method, target, http_version = tokens
    method = method.upper()
    if method not in KNOWN_METHODS:
        raise HTTPRequestParseError("Method not implemented", status_code=501)
    if http_version not in ALLOWED_HTTP_VERSIONS:
        raise HTTPRequestParseError("Unsupported HTTP version", status_code=505)
    if len(target) > MAX_TARGET_LENGTH:
        raise HTTPRequestParseError("Request target too long", status_code=414)
    if not target.startswith("/"):
        raise HTTPRequestParseError("Request target must be an absolute path")
    return method, target, http_version


def _split_target(target: str) -> tuple[str, str]:
    """Split an origin-form target into (path, query); "//x" stays a path."""
    target = target.partition("#")[0]
    path, _, query_string = target.partition("?")
    return path, query_string


def _parse_header_lines(lines: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in lines:
        if not line:
            continue
        name, colon, value = line.partition(":")
        if not colon:
            raise HTTPRequestParseError("Malformed header line")
        header_name = name.strip().lower()
        if not header_name:
            raise HTTPRequestParseError("Header name cannot be empty")
        headers[header_name] = value.strip()
    return headers


def _check_body(headers: dict[str, str], body: bytes) -> bytes:
    if "transfer-encoding" in headers:
        raise HTTPRequestParseError(
            "Transfer-Encoding request bodies are not supported",
            status_code=501,
        )

    declared_length = headers.get("content-length")
    if declared_length is None:
        if body:
            raise HTTPRequestParseError("Body sent without Content-Length")
        return body

    try:
        expected_length = int(declared_length)
    except ValueError as exc:
        raise HTTPRequestParseError("Invalid Content-Length") from exc
    if expected_length < 0:
        raise HTTPRequestParseError("Negative Content-Length is invalid")
    if len(body) != expected_length:
        raise HTTPRequestParseError("Body length does not match Content-Length")
    if len(body) > MAX_BODY_BYTES:
        raise HTTPRequestParseError("Body exceeded MAX_BODY_BYTES", status_code=413)
    return body


def _is_keep_alive(http_version: str, connection_header: str) -> bool:
    token = connection_header.lower()
    if http_version == "HTTP/1.1":
        return "close" not in token
    return "keep-alive" in token
