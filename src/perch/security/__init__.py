"""Security helpers — open-redirect safe continuation URLs.

::

    from perch.security import get_next_url, redirect_to_next_url

    if await authenticate(request):
        if await get_next_url(request):
            await redirect_to_next_url(w, request, 302)
            return
        await redirect(w, request, "/home", 302)
"""

from perch.security.redirects import (
    build_next_url,
    get_next_url,
    redirect_to_next_url,
    redirect_with_next_url,
)
from perch.security.urls import is_safe_url

__all__ = [
    "build_next_url",
    "get_next_url",
    "is_safe_url",
    "redirect_to_next_url",
    "redirect_with_next_url",
]
