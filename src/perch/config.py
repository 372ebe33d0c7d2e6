"""Perch configuration.

Frozen dataclasses — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from perch.http.request import Request
    from perch.http.response import ResponseWriter

# Handler signature shared by routes, not-found handlers, and redirects
Handler = Callable[["ResponseWriter", "Request"], Awaitable[None] | None]

# Per-handler default context: called on every render, may be async
DefaultContext = Callable[
    ["ResponseWriter", "Request"],
    Mapping[str, Any] | None | Awaitable[Mapping[str, Any] | None],
]

# Template source function: path -> raw bytes, FileNotFoundError if missing
SourceFunc = Callable[[str], bytes]


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    """Configuration passed to ``Loader()``.

    Exactly one source strategy is used: ``loader`` when set, otherwise
    ``directory``. Setting neither is a ``ConfigurationError``.

    Usage::

        config = LoaderConfig(
            directory="templates",
            cache_parsed=True,
            not_found_handler=render_404,
        )
    """

    # Keep parsed templates in kida's cache. Turn off while editing
    # templates so every render re-reads the source.
    cache_parsed: bool = False

    # Function loading a template by path (embedded assets, zip files,
    # in-memory dicts). Must raise FileNotFoundError for missing paths.
    loader: SourceFunc | None = None

    # Filesystem directory handed to kida's FileSystemLoader.
    directory: str | Path | None = None

    # Extra context merged under the context given to render().
    default_ctx: DefaultContext | None = None

    # Called instead of raising TemplateNotFound when a template is missing.
    not_found_handler: Handler | None = None

    # Receives request-level failures (e.g. client went away mid-render).
    # Defaults to the ``perch.templating`` logger.
    error_logger: logging.Logger | None = None

    autoescape: bool = True


@dataclass(frozen=True, slots=True)
class RedirectConfig:
    """Configuration for next-URL redirects.

    ``next_key`` is both the query-string key and the form field name.
    """

    next_key: str = "next"


DEFAULT_REDIRECT_CONFIG = RedirectConfig()
