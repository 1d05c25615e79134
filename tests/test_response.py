"""Unit tests for HTTP response serialization."""

from pathlib import Path

import pytest

from response import HTTPResponse


def test_response_serialization_sets_length_and_default_content_type() -> None:
    response = HTTPResponse(status_code=200, body="hello")

    raw = response.to_bytes()

    assert raw.startswith(b"HTTP/1.1 200 OK\r\n")
    assert b"Content-Type: text/plain; charset=utf-8\r\n" in raw
    assert b"Content-Length: 5\r\n" in raw
    assert b"Server: static-file-server/1.0\r\n" in raw
    assert raw.endswith(b"\r\n\r\nhello")


def test_file_response_reads_body_from_disk(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_bytes(b"<p>disk</p>")
    response = HTTPResponse(
        status_code=200,
        headers={"Content-Type": "text/html; charset=utf-8"},
        file_path=page,
    )

    raw = response.to_bytes()

    assert b"Content-Length: 11\r\n" in raw
    assert raw.endswith(b"\r\n\r\n<p>disk</p>")


def test_without_body_keeps_headers_and_length(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_bytes(b"0123456789")
    response = HTTPResponse(
        status_code=200,
        headers={"Content-Type": "text/html; charset=utf-8"},
        file_path=page,
    )

    head_only = response.without_body()
    raw = head_only.to_bytes()

    assert head_only.file_path is None
    assert b"Content-Type: text/html; charset=utf-8\r\n" in raw
    assert b"Content-Length: 10\r\n" in raw
    assert raw.endswith(b"\r\n\r\n")


def test_error_response_uses_reason_phrase_as_body() -> None:
    response = HTTPResponse.error(405, {"Allow": "GET, HEAD"})

    raw = response.to_bytes()

    assert raw.startswith(b"HTTP/1.1 405 Method Not Allowed\r\n")
    assert b"Allow: GET, HEAD\r\n" in raw
    assert raw.endswith(b"Method Not Allowed")


def test_body_and_file_path_are_mutually_exclusive(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="both body and file_path"):
        HTTPResponse(status_code=200, body="x", file_path=tmp_path / "x")
