"""HTTP response model and serializer."""

from dataclasses import dataclass, field
from email.utils import formatdate
from pathlib import Path

from config import SERVER_NAME

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    301: "Moved Permanently",
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    408: "Request Timeout",
    413: "Payload Too Large",
    414: "URI Too Long",
    431: "Request Header Fields Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    503: "Service Unavailable",
    505: "HTTP Version Not Supported",
}


@dataclass(slots=True)
class PreparedResponse:
    head: bytes
    content_length: int = 0
    body: bytes | None = None
    file_path: Path | None = None


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    reason_phrase: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""
    file_path: Path | None = None
    content_length_override: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if self.file_path is not None and self.body:
            raise ValueError("Response cannot set both body and file_path")

    @classmethod
    def error(cls, status_code: int, headers: dict[str, str] | None = None) -> "HTTPResponse":
        """Build a plain-text error response whose body is the reason phrase."""
        return cls(
            status_code=status_code,
            headers=dict(headers or {}),
            body=REASON_PHRASES.get(status_code, "Error"),
        )

    def without_body(self) -> "HTTPResponse":
        """Return the HEAD variant: same status and headers, no payload."""
        if self.file_path is not None:
            content_length = self.file_path.stat().st_size
        else:
            content_length = len(self.body)
        return HTTPResponse(
            status_code=self.status_code,
            reason_phrase=self.reason_phrase,
            headers=dict(self.headers),
            body=b"",
            content_length_override=content_length,
        )

    def to_bytes(self) -> bytes:
        """Serialize the response into HTTP/1.1 wire format bytes."""
        prepared = prepare_response(self)
        payload = bytearray(prepared.head)
        if prepared.body is not None:
            payload.extend(prepared.body)
        elif prepared.file_path is not None:
            payload.extend(prepared.file_path.read_bytes())
        return bytes(payload)


def prepare_response(response: HTTPResponse) -> PreparedResponse:
    reason = response.reason_phrase or REASON_PHRASES.get(response.status_code, "Unknown")
    normalized_headers = dict(response.headers)
    normalized_headers.setdefault(
        "Date",
        formatdate(timeval=None, localtime=False, usegmt=True),
    )
    normalized_headers.setdefault("Server", SERVER_NAME)
    normalized_headers.setdefault("Content-Type", "text/plain; charset=utf-8")

    body: bytes | None = None
    file_path: Path | None = None
    content_length = response.content_length_override
    if response.file_path is not None:
        file_path = response.file_path
        if content_length is None:
            content_length = file_path.stat().st_size
    else:
        body = response.body
        if content_length is None:
            content_length = len(body)
    normalized_headers["Content-Length"] = str(content_length)

    header_lines = [f"HTTP/1.1 {response.status_code} {reason}"]
    header_lines.extend(f"{key}: {value}" for key, value in normalized_headers.items())
    head = "\r\n".join(header_lines).encode("iso-8859-1") + b"\r\n\r\n"
    return PreparedResponse(
        head=head,
        content_length=content_length,
        body=body,
        file_path=file_path,
    )
