"""Utility helpers shared across server modules."""

import mimetypes
import posixpath
from pathlib import Path
from urllib.parse import unquote

TEXT_CONTENT_TYPES = {"application/javascript", "application/json", "image/svg+xml"}


def get_content_type(file_path: Path) -> str:
    content_type, _encoding = mimetypes.guess_type(file_path.name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type in TEXT_CONTENT_TYPES:
        return f"{content_type}; charset=utf-8"
    return content_type


def decode_request_path(request_path: str) -> str:
    """Percent-decode a request path; raises ValueError on embedded NUL bytes."""
    decoded = unquote(request_path)
    if "\x00" in decoded:
        raise ValueError("Request path contains a NUL byte")
    return decoded


def resolve_static_file(decoded_path: str, root_dir: Path) -> Path | None:
    """Resolve a decoded request path under ``root_dir``.

    Returns None when the resolved path (after ``..`` segments and symlinks)
    would land outside the root directory.
    """
    static_root = root_dir.resolve()
    candidate = (static_root / decoded_path.lstrip("/")).resolve()

    try:
        candidate.relative_to(static_root)
    except ValueError:
        return None

    return candidate


def is_hidden_path(decoded_path: str) -> bool:
    """True when any segment of the requested path starts with a dot.

    Checked on the path as requested, so symlink targets do not matter.
    """
    normalized = posixpath.normpath("/" + decoded_path.lstrip("/"))
    return any(segment.startswith(".") for segment in normalized.split("/"))
