"""Static file handlers: the entry document and the catch-all file mapping."""

import os
from dataclasses import dataclass
from pathlib import Path

from config import INDEX_FILE
from request import HTTPRequest
from response import HTTPResponse
from utils import decode_request_path, get_content_type, is_hidden_path, resolve_static_file


@dataclass(slots=True)
class StaticFiles:
    root_dir: Path
    index_file: str = INDEX_FILE

    def serve_index(self, request: HTTPRequest) -> HTTPResponse:
        """Serve the entry document for ``GET /``."""
        _ = request
        return self._file_response(self.root_dir / self.index_file)

    def serve_static(self, request: HTTPRequest) -> HTTPResponse:
        try:
            decoded_path = decode_request_path(request.path)
        except ValueError:
            return HTTPResponse.error(400)

        target = resolve_static_file(decoded_path, self.root_dir)
        if target is None:
            return HTTPResponse.error(403)

        # dotfiles are ignored, never served
        if is_hidden_path(decoded_path):
            return HTTPResponse.error(404)

        if target.is_dir():
            index_path = target / self.index_file
            if not index_path.is_file():
                return HTTPResponse.error(404)
            if not request.path.endswith("/"):
                return _redirect_to_directory(request)
            target = index_path

        return self._file_response(target)

    def _file_response(self, file_path: Path) -> HTTPResponse:
        if not file_path.is_file():
            return HTTPResponse.error(404)
        if not os.access(file_path, os.R_OK):
            return HTTPResponse.error(403)
        return HTTPResponse(
            status_code=200,
            headers={"Content-Type": get_content_type(file_path)},
            file_path=file_path,
        )


def _redirect_to_directory(request: HTTPRequest) -> HTTPResponse:
    # a leading "//" would make Location protocol-relative
    location = "/" + request.path.lstrip("/") + "/"
    if request.query_string:
        location = f"{location}?{request.query_string}"
    return HTTPResponse(
        status_code=301,
        headers={"Location": location},
        body=f"Redirecting to {location}",
    )
