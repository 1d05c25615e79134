"""Unit tests for method/path router behavior."""

from request import HTTPRequest
from response import HTTPResponse
from router import Router


def _handler_ok(_request: HTTPRequest) -> HTTPResponse:
    return HTTPResponse(status_code=200, body="ok")


def _handler_fallback(_request: HTTPRequest) -> HTTPResponse:
    return HTTPResponse(status_code=200, body="fallback")


def test_router_resolves_exact_method_and_path() -> None:
    router = Router()
    router.add_route("get", "/", _handler_ok)

    assert router.resolve("GET", "/") is _handler_ok


def test_router_returns_none_for_unknown_path_without_fallback() -> None:
    router = Router()
    router.add_route("GET", "/", _handler_ok)

    assert router.resolve("GET", "/missing") is None


def test_fallback_handles_unmatched_get_paths_only() -> None:
    router = Router(fallback=_handler_fallback)
    router.add_route("GET", "/", _handler_ok)

    assert router.resolve("GET", "/") is _handler_ok
    assert router.resolve("GET", "/style.css") is _handler_fallback
    assert router.resolve("POST", "/style.css") is None


def test_allowed_methods_include_head_for_get_routes() -> None:
    router = Router(fallback=_handler_fallback)

    assert router.allowed_methods() == {"GET", "HEAD"}


def test_router_rejects_invalid_path() -> None:
    router = Router()

    try:
        router.add_route("GET", "missing-slash", _handler_ok)
    except ValueError as exc:
        assert "path must start" in str(exc)
    else:
        raise AssertionError("Expected ValueError for invalid route path")
