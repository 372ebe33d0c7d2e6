"""Template loading and rendering on top of kida.

A ``Loader`` is created once at startup and shared by every handler::

    templates = Loader("site", LoaderConfig(directory="templates", cache_parsed=True))

    async def index(w, request):
        await templates.render(w, request, "index.html", {"title": "Home"})

Every render gets two extra context keys unless the caller (or
``default_ctx``) already set them:

``url``
    The request target as a ``URL`` (``url.path``, ``url.query``).
``cachets``
    Unix time the loader was created. Append it to asset URLs
    (``/static/app.css?v={{ cachets }}``) so browsers refetch after a
    restart.

Precedence, highest first: context passed to ``render()``, then
``default_ctx``, then the two keys above.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kida import Environment, FileSystemLoader
from kida.environment.exceptions import TemplateNotFoundError

from perch._internal.invoke import invoke
from perch.config import LoaderConfig
from perch.errors import ConfigurationError, TemplateEngineError, TemplateNotFound
from perch.http.query import QueryParams
from perch.http.request import Request
from perch.http.response import ResponseWriter
from perch.server.errors import is_kida_error
from perch.templating.filters import BUILTIN_FILTERS
from perch.templating.sources import FunctionLoader

logger = logging.getLogger("perch.templating")


@dataclass(frozen=True, slots=True)
class URL:
    """The request target as seen by templates.

    ``{{ url }}`` renders path plus query string; ``{{ url.path }}`` is
    the path alone.
    """

    path: str
    query: QueryParams

    def __str__(self) -> str:
        if self.query.raw:
            return f"{self.path}?{self.query.raw.decode('latin-1')}"
        return self.path

    @classmethod
    def from_request(cls, request: Request) -> URL:
        return cls(path=request.path, query=request.query)


def is_not_found(exc: BaseException) -> bool:
    """True if *exc*, or anything it was raised from, is a missing-file error."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, (TemplateNotFoundError, FileNotFoundError)):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


class Loader:
    """Template loader and executor.

    Raises:
        ConfigurationError: If the config has neither ``loader`` nor
            ``directory``.
    """

    __slots__ = ("_config", "_env", "_logger", "_source", "created_at", "name")

    def __init__(self, name: str, config: LoaderConfig) -> None:
        if config.loader is None and config.directory is None:
            msg = (
                f"Loader {name!r}: no template source; "
                "set LoaderConfig.loader or LoaderConfig.directory"
            )
            raise ConfigurationError(msg)

        if config.loader is not None:
            source: Any = FunctionLoader(config.loader)
        else:
            source = FileSystemLoader(str(config.directory))

        env = Environment(
            loader=source,
            autoescape=config.autoescape,
            auto_reload=False,
        )
        env.update_filters(BUILTIN_FILTERS)

        self.name = name
        self.created_at = int(time.time())
        self._config = config
        self._source = source
        self._env = env
        self._logger = config.error_logger or logger

    @property
    def env(self) -> Environment:
        """The kida environment, for registering extra filters and globals."""
        return self._env

    def _resolve(self, path: str) -> Any:
        """Load and parse *path*, from kida's cache when ``cache_parsed`` is on.

        Raises:
            TemplateNotFound: The source does not exist.
            TemplateEngineError: Any other load or parse failure.
        """
        try:
            if self._config.cache_parsed:
                return self._env.get_template(path)
            source, _ = self._source.get_source(path)
            return self._env.from_string(source)
        except Exception as exc:
            if is_not_found(exc):
                raise TemplateNotFound(path, exc) from exc
            raise TemplateEngineError(path, exc) from exc

    async def build_context(
        self,
        w: ResponseWriter,
        request: Request,
        ctx: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Merge render context: *ctx* over ``default_ctx`` over ``url``/``cachets``.

        Neither *ctx* nor the mapping returned by ``default_ctx`` is mutated.
        """
        merged: dict[str, Any] = {}
        if self._config.default_ctx is not None:
            defaults = await invoke(self._config.default_ctx, w, request)
            if defaults:
                merged.update(defaults)
        if ctx:
            merged.update(ctx)

        merged.setdefault("url", URL.from_request(request))
        merged.setdefault("cachets", self.created_at)
        return merged

    async def render(
        self,
        w: ResponseWriter,
        request: Request,
        path: str,
        ctx: Mapping[str, Any] | None = None,
    ) -> None:
        """Render the template at *path* into *w*.

        A missing template goes to ``not_found_handler`` when configured.
        Output is streamed, so an engine failure mid-template can leave a
        partial body behind.

        Raises:
            TemplateNotFound: Missing template and no not-found handler.
            TemplateEngineError: kida failed to parse or execute the template.
        """
        try:
            template = self._resolve(path)
        except TemplateNotFound:
            if self._config.not_found_handler is None:
                raise
            await invoke(self._config.not_found_handler, w, request)
            return

        context = await self.build_context(w, request, ctx)

        w.headers["content-type"] = "text/html; charset=utf-8"

        try:
            for chunk in template.render_stream(context):
                await w.write(chunk)
        except Exception as exc:
            if is_kida_error(exc):
                raise TemplateEngineError(path, exc) from exc
            self._logger.error("error: %s %s %r: %s", request.method, request.path, path, exc)
