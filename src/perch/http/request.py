"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from perch._internal.asgi import Receive
from perch.http.forms import FormData, has_form_body, parse_form_data
from perch.http.headers import Headers
from perch.http.query import QueryParams

_EMPTY_VALUES: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query) is frozen at creation.
    Body is accessed asynchronously via ``.body()`` and ``.form()``.

    ``values`` carries request-scoped settings placed by middleware or
    handlers (e.g. ``JSON_ESCAPE_HTML_KEY``); derive a new request with
    ``with_value()`` instead of mutating it.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str = "1.1"
    client: tuple[str, int] | None = None
    values: Mapping[str, Any] = _EMPTY_VALUES

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for body and parsed form data
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Request target (path + query string)."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    def with_value(self, key: str, value: Any) -> Request:
        """Return a copy of this request with an extra context value."""
        return replace(self, values=MappingProxyType({**self.values, key: value}))

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def form(self) -> FormData:
        """Parse the body as URL-encoded form data.

        Requests without a body method (``GET``, ``HEAD``, ...) have an
        empty form. The result is cached.

        Raises:
            ValueError: If the body is not URL-encoded form data.
        """
        if "_form" in self._cache:
            return self._cache["_form"]

        if not has_form_body(self.method):
            result = FormData()
        else:
            ct = self.content_type or "application/x-www-form-urlencoded"
            result = parse_form_data(await self.body(), ct)

        self._cache["_form"] = result
        return result

    async def form_value(self, key: str) -> str:
        """First value for *key* from the body form, then the query string.

        Form parse errors are ignored; a missing value is ``""``.
        """
        try:
            form = await self.form()
        except ValueError:
            form = FormData()
        return form.get(key) or self.query.get(key) or ""

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
