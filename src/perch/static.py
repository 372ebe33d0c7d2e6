"""Static file serving on any ``Router``.

::

    mux = Mux()
    file_server(mux, "/static", "./static")

mounts ``/static`` → 301 → ``/static/`` and serves ``./static`` under
``/static/*``.
"""

import mimetypes
from pathlib import Path

import anyio

from perch.errors import ConfigurationError, NotFound
from perch.http.request import Request
from perch.http.response import ResponseWriter, redirect
from perch.routing import Router


class StaticFiles:
    """Handler serving files from *directory* for paths under *prefix*.

    Security: resolves symlinks and verifies the final path is within
    the configured directory to prevent path traversal.
    """

    __slots__ = ("_cache_control", "_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str,
        *,
        index: str = "index.html",
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._prefix = prefix
        self._index = index
        self._cache_control = cache_control

    async def __call__(self, w: ResponseWriter, request: Request) -> None:
        path = request.path
        if not path.startswith(self._prefix):
            raise NotFound()
        relative = path[len(self._prefix) :].lstrip("/")

        # ".../index.html" is served as the directory itself
        if relative == self._index or relative.endswith("/" + self._index):
            await redirect(w, request, path[: -len(self._index)], 301)
            return

        try:
            file_path = await anyio.Path(self._directory / relative).resolve()
            if not Path(file_path).is_relative_to(self._directory):
                raise NotFound()

            is_dir = await file_path.is_dir()
            if is_dir and path.endswith("/"):
                file_path = file_path / self._index
            is_file = await file_path.is_file()
        except (ValueError, OSError) as exc:
            # embedded NUL, name too long, ...
            raise NotFound() from exc

        if is_dir and not path.endswith("/"):
            await redirect(w, request, path + "/", 301)
            return

        if not is_file:
            raise NotFound()

        await self._serve_file(w, request, file_path)

    async def _serve_file(self, w: ResponseWriter, request: Request, file_path: anyio.Path) -> None:
        """Read a file and write it to the response."""
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"

        body = await file_path.read_bytes()

        w.headers["content-type"] = content_type
        w.headers["content-length"] = str(len(body))
        w.headers["cache-control"] = self._cache_control
        if request.method != "HEAD":
            await w.write(body)


def _redirect_to(url: str, status: int):
    async def handler(w: ResponseWriter, request: Request) -> None:
        await redirect(w, request, url, status)

    return handler


def file_server(router: Router, path: str, root: str | Path) -> None:
    """Serve files from *root* under the URL prefix *path*.

    *router* is anything with a ``get(pattern, handler)`` method.

    Raises:
        ConfigurationError: If *path* doesn't start with ``/`` or contains
            route parameter syntax (``{``, ``}``, ``*``).
    """
    if any(char in path for char in "{}*"):
        msg = f"url params not allowed in file server: {path!r}"
        raise ConfigurationError(msg)
    if not path.startswith("/"):
        msg = f"file server path must start with '/': {path!r}"
        raise ConfigurationError(msg)

    handler = StaticFiles(root, path)

    if path != "/" and not path.endswith("/"):
        router.get(path, _redirect_to(path + "/", 301))
        path += "/"

    router.get(path + "*", handler)
