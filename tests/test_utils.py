"""Unit tests for content types and safe path resolution."""

import os
from pathlib import Path

import pytest

from utils import decode_request_path, get_content_type, is_hidden_path, resolve_static_file


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("index.html", "text/html; charset=utf-8"),
        ("style.css", "text/css; charset=utf-8"),
        ("data.json", "application/json; charset=utf-8"),
        ("logo.png", "image/png"),
        ("blob.unknownext", "application/octet-stream"),
    ],
)
def test_content_type_is_inferred_from_extension(name: str, expected: str) -> None:
    assert get_content_type(Path(name)) == expected


def test_decode_request_path_unquotes_segments() -> None:
    assert decode_request_path("/my%20file.txt") == "/my file.txt"
    assert decode_request_path("/%2e%2e/x") == "/../x"


def test_decode_request_path_rejects_nul_bytes() -> None:
    with pytest.raises(ValueError, match="NUL"):
        decode_request_path("/index.html%00.png")


def test_resolve_inside_root(tmp_path: Path) -> None:
    (tmp_path / "css").mkdir()

    resolved = resolve_static_file("/css/site.css", tmp_path)

    assert resolved == tmp_path.resolve() / "css" / "site.css"


def test_resolve_collapses_dot_segments_that_stay_inside(tmp_path: Path) -> None:
    resolved = resolve_static_file("/css/../index.html", tmp_path)

    assert resolved == tmp_path.resolve() / "index.html"


@pytest.mark.parametrize("path", ["/../outside.txt", "/a/../../outside.txt", "/../../etc/passwd"])
def test_resolve_rejects_paths_escaping_root(tmp_path: Path, path: str) -> None:
    root = tmp_path / "site"
    root.mkdir()

    assert resolve_static_file(path, root) is None


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_resolve_rejects_symlink_escaping_root(tmp_path: Path) -> None:
    root = tmp_path / "site"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("secret")
    (root / "link.txt").symlink_to(tmp_path / "secret.txt")

    assert resolve_static_file("/link.txt", root) is None


@pytest.mark.parametrize(
    ("path", "hidden"),
    [
        ("/index.html", False),
        ("/", False),
        ("/docs/../index.html", False),
        ("/.env", True),
        ("/.git/config", True),
        ("//assets/.cache/x.js", True),
        ("/docs/../.env", True),
    ],
)
def test_is_hidden_path_checks_requested_segments(path: str, hidden: bool) -> None:
    assert is_hidden_path(path) is hidden
