"""Test helpers: build requests and record what a handler writes.

Uses the same ``Request`` and ``ResponseWriter`` types as production::

    recorder = ResponseRecorder()
    request = make_request("/", query="next=%2Fhome")
    await handler(recorder.writer, request)
    await recorder.writer.close()
    assert recorder.status == 200

or drive a whole ASGI app::

    recorder = await call_asgi(mux, "GET", "/static/app.css")
"""

from collections.abc import Mapping, MutableMapping
from typing import Any
from urllib.parse import urlencode

from perch._internal.asgi import Receive
from perch.http.headers import Headers
from perch.http.request import Request
from perch.http.response import ResponseWriter


class ResponseRecorder:
    """Collects ASGI messages sent through ``writer``."""

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("messages", "writer")

    def __init__(self) -> None:
        self.messages: list[MutableMapping[str, Any]] = []
        self.writer = ResponseWriter(self.send)

    async def send(self, message: MutableMapping[str, Any]) -> None:
        self.messages.append(message)

    @property
    def started(self) -> bool:
        return any(m["type"] == "http.response.start" for m in self.messages)

    @property
    def status(self) -> int | None:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message["status"]
        return None

    @property
    def headers(self) -> Headers:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return Headers(tuple(message["headers"]))
        return Headers()

    @property
    def body(self) -> bytes:
        bodies = (m for m in self.messages if m["type"] == "http.response.body")
        return b"".join(m.get("body", b"") for m in bodies)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @property
    def finished(self) -> bool:
        return any(
            m["type"] == "http.response.body" and not m.get("more_body", False)
            for m in self.messages
        )


def _make_receive(body: bytes) -> Receive:
    sent = False

    async def receive() -> MutableMapping[str, Any]:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return receive


def make_scope(
    method: str = "GET",
    path: str = "/",
    *,
    query: str | Mapping[str, str] = "",
    headers: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build a minimal valid ASGI HTTP scope."""
    query_string = query if isinstance(query, str) else urlencode(query)
    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or {}).items()
    ]
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query_string.encode("latin-1"),
        "root_path": "",
        "headers": raw_headers,
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 54321),
    }


def _form_body(
    form: str | Mapping[str, str] | None,
    headers: Mapping[str, str] | None,
) -> tuple[bytes, dict[str, str]]:
    merged = dict(headers or {})
    if form is None:
        return b"", merged
    body = form if isinstance(form, str) else urlencode(form)
    merged.setdefault("content-type", "application/x-www-form-urlencoded")
    return body.encode("utf-8"), merged


def make_request(
    path: str = "/",
    *,
    method: str | None = None,
    query: str | Mapping[str, str] = "",
    form: str | Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
    body: bytes | None = None,
) -> Request:
    """Build a ``Request`` without a server.

    Passing *form* makes it a URL-encoded ``POST`` unless *method* says
    otherwise. Raw *body* bytes override *form*.
    """
    form_body, all_headers = _form_body(form, headers)
    if body is None:
        body = form_body
    if method is None:
        method = "POST" if form is not None or body else "GET"
    scope = make_scope(method, path, query=query, headers=all_headers)
    return Request.from_asgi(scope, _make_receive(body))


async def call_asgi(
    app: Any,
    method: str = "GET",
    path: str = "/",
    *,
    query: str | Mapping[str, str] = "",
    form: str | Mapping[str, str] | None = None,
    headers: Mapping[str, str] | None = None,
) -> ResponseRecorder:
    """Send one request through an ASGI *app* and record the response."""
    body, all_headers = _form_body(form, headers)
    recorder = ResponseRecorder()
    scope = make_scope(method, path, query=query, headers=all_headers)
    await app(scope, _make_receive(body), recorder.send)
    return recorder
