"""Perch exception hierarchy.

Shared by the loader, the router, and the helpers so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when setup is invalid.

    Raised at construction or mount time (``Loader()``, ``file_server()``),
    never while serving a request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — route exists but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class TemplateError(PerchError):
    """A template could not be loaded or executed.

    Attributes:
        name: The template path passed to ``Loader.render()``.
        original: The underlying exception (usually a kida error).
    """

    def __init__(self, name: str, original: BaseException | None = None) -> None:
        self.name = name
        self.original = original
        reason = f": {original}" if original is not None else ""
        super().__init__(f"{self.describe()} {name!r}{reason}")

    def describe(self) -> str:
        return "template error in"


class TemplateNotFound(TemplateError):  # noqa: N818
    """The template source does not exist and no not-found handler is set.

    This is a wrong template reference, not a runtime condition.
    """

    def describe(self) -> str:
        return "template not found:"


class TemplateEngineError(TemplateError):
    """kida failed to parse, compile, or execute the template."""
