"""Streaming response sink over ASGI ``send``.

Handlers receive a ``ResponseWriter``, set ``status`` and ``headers``,
then ``write()`` the body. The ``http.response.start`` message goes out
on the first write, so headers are settable until then.
"""

import html
from http import HTTPStatus
from urllib.parse import urlsplit

from perch._internal.asgi import Send
from perch.http.headers import MutableHeaders
from perch.http.request import Request


def status_text(code: int) -> str:
    """Reason phrase for *code*, or an empty string for unknown codes."""
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ResponseWriter:
    """A response being written to an ASGI connection.

    Usage::

        w.status = 201
        w.headers["content-type"] = "text/plain"
        await w.write("created")
        await w.close()

    ``Mux`` calls ``close()`` after the handler returns, so handlers
    normally only write.
    """

    __slots__ = ("_closed", "_send", "_started", "headers", "status")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._started = False
        self._closed = False
        self.headers = MutableHeaders()
        self.status = 200

    @property
    def started(self) -> bool:
        """True once headers have been sent; status and headers are then fixed."""
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    async def _start(self) -> None:
        if "content-type" not in self.headers and _body_allowed(self.status):
            self.headers["content-type"] = "text/plain; charset=utf-8"
        self._started = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": self.headers.raw(),
            }
        )

    async def write(self, data: str | bytes) -> int:
        """Send a body chunk, starting the response if needed.

        Returns the number of bytes written (0 when the status forbids a body).
        """
        if self._closed:
            msg = "write on closed response"
            raise RuntimeError(msg)
        if not self._started:
            await self._start()
        if not _body_allowed(self.status):
            return 0
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        if not chunk:
            return 0
        await self._send({"type": "http.response.body", "body": chunk, "more_body": True})
        return len(chunk)

    async def close(self) -> None:
        """Finish the response. Safe to call more than once."""
        if self._closed:
            return
        if not self._started:
            await self._start()
        self._closed = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})


async def redirect(w: ResponseWriter, request: Request, url: str, status: int = 302) -> None:
    """Reply to *request* with a redirect to *url*.

    A relative *url* without a leading slash is resolved against the
    directory of the request path, so ``""`` from ``/auth/login``
    redirects to ``/auth/``. ``GET`` and ``HEAD`` get a short HTML body.
    """
    if not urlsplit(url).scheme and not url.startswith("/"):
        directory = request.path.rsplit("/", 1)[0] + "/"
        url = directory + url

    w.headers["location"] = url
    w.status = status
    if request.method in ("GET", "HEAD"):
        w.headers["content-type"] = "text/html; charset=utf-8"
    if request.method == "GET":
        await w.write(f'<a href="{html.escape(url)}">{status_text(status)}</a>.\n')
