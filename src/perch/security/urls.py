"""URL safety validation for redirect targets.

Prevents open redirect attacks by ensuring redirect URLs are relative
paths on the same origin.

Usage::

    from perch.security.urls import is_safe_url

    next_url = request.query.get("next", "/")
    if not is_safe_url(next_url):
        next_url = "/"
"""


def is_safe_url(url: str) -> bool:
    """Check whether *url* is safe to redirect to.

    A URL is considered safe if it is a **path** on the same origin:

    - Must be a non-empty string
    - Must start with ``/``
    - Must **not** start with ``//`` (protocol-relative URL)
    - Must **not** start with ``/\\`` (browsers read it as ``//``)
    - Must **not** contain ASCII control characters (browsers drop tab,
      CR and LF, so ``/<TAB>/evil.com`` is read as ``//evil.com``)

    Examples::

        >>> is_safe_url("/dashboard")
        True
        >>> is_safe_url("/login?next=https://example.com")
        True
        >>> is_safe_url("//evil.com")
        False
        >>> is_safe_url("/\\t/evil.com")
        False
        >>> is_safe_url("https://evil.com")
        False
        >>> is_safe_url("")
        False
    """
    if not url or not isinstance(url, str):
        return False
    if not url.startswith("/"):
        return False
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in url):
        return False
    return url[1:2] not in ("/", "\\")
