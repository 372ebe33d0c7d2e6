"""Tests for perch.errors — exception hierarchy and error messages."""

from perch.errors import (
    ConfigurationError,
    HTTPError,
    MethodNotAllowed,
    NotFound,
    PerchError,
    TemplateEngineError,
    TemplateError,
    TemplateNotFound,
)


class TestHierarchy:
    def test_http_error_is_perch_error(self) -> None:
        assert issubclass(HTTPError, PerchError)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)

    def test_method_not_allowed_is_http_error(self) -> None:
        assert issubclass(MethodNotAllowed, HTTPError)

    def test_configuration_error_is_perch_error(self) -> None:
        assert issubclass(ConfigurationError, PerchError)

    def test_template_errors(self) -> None:
        assert issubclass(TemplateNotFound, TemplateError)
        assert issubclass(TemplateEngineError, TemplateError)
        assert issubclass(TemplateError, PerchError)


class TestHTTPError:
    def test_str_with_detail(self) -> None:
        assert str(HTTPError(status=418, detail="teapot")) == "418: teapot"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_not_found_defaults(self) -> None:
        exc = NotFound()
        assert exc.status == 404
        assert exc.detail == "Not Found"

    def test_method_not_allowed_allow_header(self) -> None:
        exc = MethodNotAllowed(frozenset({"POST", "GET"}))
        assert exc.status == 405
        assert exc.headers == (("Allow", "GET, POST"),)
        assert "GET, POST" in exc.detail


class TestTemplateError:
    def test_keeps_name_and_original(self) -> None:
        original = FileNotFoundError("page.html")
        exc = TemplateNotFound("page.html", original)

        assert exc.name == "page.html"
        assert exc.original is original
        assert "template not found" in str(exc)
        assert "page.html" in str(exc)

    def test_engine_error_message(self) -> None:
        exc = TemplateEngineError("broken.html", ValueError("unexpected end"))
        assert str(exc) == "template error in 'broken.html': unexpected end"

    def test_without_original(self) -> None:
        exc = TemplateNotFound("x.html")
        assert exc.original is None
        assert str(exc) == "template not found: 'x.html'"
