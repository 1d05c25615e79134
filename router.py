"""Routing table: exact method/path routes plus a catch-all fallback."""

from collections.abc import Callable

from request import HTTPRequest
from response import HTTPResponse

Handler = Callable[[HTTPRequest], HTTPResponse]


class Router:
    def __init__(self, fallback: Handler | None = None) -> None:
        self._routes: dict[tuple[str, str], Handler] = {}
        self._fallback = fallback

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        normalized_method = method.upper().strip()
        if not normalized_method:
            raise ValueError("method cannot be empty")
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")
        self._routes[(normalized_method, path)] = handler

    def allowed_methods(self) -> set[str]:
        methods = {method for method, _path in self._routes}
        if self._fallback is not None:
            methods.add("GET")
        if "GET" in methods:
            methods.add("HEAD")
        return methods

    def resolve(self, method: str, path: str) -> Handler | None:
        normalized_method = method.upper().strip()
        handler = self._routes.get((normalized_method, path))
        if handler is None and normalized_method == "GET":
            return self._fallback
        return handler
