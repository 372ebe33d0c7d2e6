"""Logging for failures that reach the request boundary.

kida errors are formatted with ``format_compact()`` (template name,
line, and source excerpt). Perch's own ``TemplateError`` is unwrapped
to its kida cause first. Everything else is logged with its traceback.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perch.errors import TemplateError

if TYPE_CHECKING:
    from perch.http.request import Request

logger = logging.getLogger("perch.server")

# Width of the error banner
_BANNER_WIDTH = 65


def is_kida_error(exc: BaseException) -> bool:
    """Check if an exception originates from the kida template engine."""
    module = type(exc).__module__ or ""
    return module == "kida" or module.startswith("kida.")


def format_template_error(exc: BaseException, request: Request | None = None) -> str:
    """Format a kida template error with a banner and request context."""
    parts: list[str] = [f"-- Template Error {'-' * (_BANNER_WIDTH - 18)}"]

    if hasattr(exc, "format_compact"):
        parts.append(exc.format_compact())
    else:
        parts.append(str(exc))

    if request is not None:
        parts.append("")
        parts.append(f"  Route: {request.method} {request.path}")

    parts.append("-" * _BANNER_WIDTH)
    return "\n".join(parts)


def log_error(exc: BaseException, request: Request | None = None) -> None:
    """Log a request-fatal error."""
    prefix = f"500 {request.method} {request.path}" if request is not None else "Server error"

    cause = exc.original if isinstance(exc, TemplateError) else exc
    if cause is not None and is_kida_error(cause):
        logger.error("%s\n%s", prefix, format_template_error(cause, request))
        return

    logger.error("%s: %s", prefix, exc, exc_info=exc)
