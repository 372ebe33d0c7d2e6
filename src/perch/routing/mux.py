"""A small ASGI router with exact and prefix-wildcard patterns.

Patterns are either exact paths (``/login``) or prefixes ending in
``*`` (``/static/*``). Exact matches win; among wildcards the longest
prefix wins.
"""

import logging
from typing import Any, Protocol, runtime_checkable

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.config import Handler
from perch.errors import HTTPError, MethodNotAllowed, NotFound
from perch.http.request import Request
from perch.http.response import ResponseWriter
from perch.respond import http_error
from perch.server.errors import log_error

logger = logging.getLogger("perch.server")


@runtime_checkable
class Router(Protocol):
    """Anything that can register a ``GET`` handler for a pattern.

    ``Mux`` satisfies it; adapters for other routers only need to
    translate the trailing ``*`` wildcard into their own syntax.
    """

    def get(self, pattern: str, handler: Handler) -> None: ...


class Mux:
    """Route table and ASGI 3 application.

    Usage::

        mux = Mux()
        mux.get("/", index)
        mux.post("/login", login)
        file_server(mux, "/static", "./static")

        # mux is the ASGI app: pounce, uvicorn, ...

    Handlers are ``async def handler(w, request)`` (sync also works).
    ``GET`` routes answer ``HEAD`` too.
    """

    __slots__ = ("_exact", "_prefixes")

    def __init__(self) -> None:
        self._exact: dict[str, dict[str, Handler]] = {}
        self._prefixes: dict[str, dict[str, Handler]] = {}

    def add(self, method: str, pattern: str, handler: Handler) -> None:
        """Register *handler* for *method* on *pattern*."""
        if pattern.endswith("*"):
            table = self._prefixes.setdefault(pattern[:-1], {})
        else:
            table = self._exact.setdefault(pattern, {})
        table[method.upper()] = handler

    def get(self, pattern: str, handler: Handler) -> None:
        self.add("GET", pattern, handler)

    def post(self, pattern: str, handler: Handler) -> None:
        self.add("POST", pattern, handler)

    def match(self, method: str, path: str) -> Handler:
        """Find the handler for *method* and *path*.

        Raises ``NotFound`` if no pattern matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        table = self._exact.get(path)
        if table is None:
            candidates = [prefix for prefix in self._prefixes if path.startswith(prefix)]
            if not candidates:
                raise NotFound(f"No route matches {method} {path!r}")
            table = self._prefixes[max(candidates, key=len)]

        method = method.upper()
        if method in table:
            return table[method]
        if method == "HEAD" and "GET" in table:
            return table["GET"]
        raise MethodNotAllowed(frozenset(table))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point. Only ``http`` scopes are handled."""
        if scope["type"] != "http":
            return

        request = Request.from_asgi(dict(scope), receive)
        w = ResponseWriter(send)

        try:
            handler = self.match(request.method, request.path)
            await invoke(handler, w, request)
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            if not w.started:
                for name, value in exc.headers:
                    w.headers[name] = value
                await http_error(w, exc.status, exc, show=False)
        except Exception as exc:
            log_error(exc, request)
            if not w.started:
                await http_error(w, 500, exc, show=False)

        try:
            await w.close()
        except Exception as exc:
            # client already gone; nothing left to tell it
            logger.debug("close failed: %s %s: %s", request.method, request.path, exc)

    def __repr__(self) -> str:
        patterns: list[Any] = [*self._exact, *(f"{p}*" for p in self._prefixes)]
        return f"Mux({patterns!r})"
