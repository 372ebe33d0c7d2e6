"""JSON and error responses.

Thin writers over ``ResponseWriter``::

    await write_json(w, request, {"ok": True})
    await http_error(w, 404, exc, show=False)
"""

import json
import logging
from typing import Any

from perch.http.request import Request
from perch.http.response import ResponseWriter, status_text

# Request value that turns on HTML escaping in write_json()
JSON_ESCAPE_HTML_KEY = "JSONEscapeHTML"

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})


def _escape_html(payload: str) -> str:
    for char, escaped in _HTML_ESCAPES.items():
        payload = payload.replace(char, escaped)
    return payload


def encode_json(value: Any, *, pretty: bool = False, escape_html: bool = False) -> str:
    """Serialize *value* the way ``write_json()`` sends it.

    Raises:
        TypeError: If *value* is not JSON serializable.
    """
    if pretty:
        payload = json.dumps(value, indent=4, ensure_ascii=False)
    else:
        payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    if escape_html:
        payload = _escape_html(payload)
    return payload + "\n"


async def write_json(w: ResponseWriter, request: Request, value: Any) -> None:
    """Write *value* as ``application/json``.

    HTML is not escaped unless the request carries
    ``JSON_ESCAPE_HTML_KEY`` set to ``True`` (see ``Request.with_value``).
    ``?pretty=true`` (or a ``pretty`` form field) indents by four spaces.
    """
    escape_html = request.values.get(JSON_ESCAPE_HTML_KEY) is True
    pretty = await request.form_value("pretty") in _TRUE_VALUES

    body = encode_json(value, pretty=pretty, escape_html=escape_html)

    w.headers["content-type"] = "application/json"
    await w.write(body)


async def http_error(
    w: ResponseWriter,
    code: int,
    exc: BaseException,
    show: bool,
    logger: logging.Logger | None = None,
) -> None:
    """Write an error response, optionally exposing the error text.

    With ``show=False`` only the standard reason phrase is sent, so
    internal details never reach the client.
    """
    if logger is not None:
        logger.error("http error: %s", exc)

    body = f"error: {exc}" if show else status_text(code)

    w.status = code
    w.headers["content-type"] = "text/plain; charset=utf-8"
    w.headers["x-content-type-options"] = "nosniff"
    await w.write(body + "\n")
