"""Next-URL continuation: send users back where they came from.

A login page (or any intermediate step) receives ``?next=/some/page``,
does its work, then redirects to that path. Only same-origin paths are
honoured; anything else resolves to ``""``.

In templates::

    <a href="/auth/login{% if url.path != '/' %}?next={{ url.path|urlencode }}{% end %}">
    <input type="hidden" name="next" value="{{ url.query.get('next', '') }}">

In a handler::

    if not await is_authed(request):
        await redirect(w, request, build_next_url("/auth/login", request.path), 307)
        return

    # from /auth/signup?next=/billing, keep the continuation going
    await redirect_with_next_url(w, request, "/auth/login", 303)
"""

import re
from urllib.parse import quote_plus, unquote_plus

from perch.config import DEFAULT_REDIRECT_CONFIG, RedirectConfig
from perch.http.request import Request
from perch.http.response import ResponseWriter, redirect
from perch.security.urls import is_safe_url

# A "%" not followed by two hex digits
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def query_unescape(value: str) -> str:
    """Decode a query component strictly.

    ``+`` becomes a space and ``%XX`` escapes are decoded as UTF-8.

    Raises:
        ValueError: On a malformed ``%`` escape or invalid UTF-8.
    """
    if _BAD_ESCAPE.search(value):
        msg = f"invalid URL escape in {value!r}"
        raise ValueError(msg)
    return unquote_plus(value, errors="strict")


async def get_next_url(request: Request, config: RedirectConfig = DEFAULT_REDIRECT_CONFIG) -> str:
    """Return the continuation path for *request*, or ``""``.

    The query string is checked first, then the form body. Form parse
    errors count as "no value". When the value decodes, the decoded
    form must be a safe path; only a value that fails to decode is
    checked as-is.
    """
    try:
        form = await request.form()
    except ValueError:
        form = None

    key = config.next_key
    next_url = request.query.get(key) or ""
    if not next_url and form is not None:
        next_url = form.get(key) or ""

    if not next_url:
        return ""

    try:
        decoded = query_unescape(next_url)
    except ValueError:
        return next_url if is_safe_url(next_url) else ""

    return decoded if is_safe_url(decoded) else ""


def build_next_url(
    target: str,
    next_url: str,
    config: RedirectConfig = DEFAULT_REDIRECT_CONFIG,
) -> str:
    """Append the continuation parameter to *target*.

    >>> build_next_url("/auth/login", "/settings?tab=2")
    '/auth/login?next=%2Fsettings%3Ftab%3D2'
    """
    return f"{target}?{config.next_key}={quote_plus(next_url)}"


async def redirect_with_next_url(
    w: ResponseWriter,
    request: Request,
    target: str,
    status: int,
    config: RedirectConfig = DEFAULT_REDIRECT_CONFIG,
) -> None:
    """Redirect to *target* (e.g. a login page), carrying this request's next URL."""
    next_url = await get_next_url(request, config)
    await redirect(w, request, build_next_url(target, next_url, config), status)


async def redirect_to_next_url(
    w: ResponseWriter,
    request: Request,
    status: int,
    config: RedirectConfig = DEFAULT_REDIRECT_CONFIG,
) -> None:
    """Redirect to the next URL, once the intermediate step is done.

    An empty next URL is passed through to ``redirect()``, which resolves
    it to the current directory. Check ``get_next_url()`` first when a
    different fallback is needed.
    """
    await redirect(w, request, await get_next_url(request, config), status)
