"""Perch — helpers for ASGI request handlers.

Template rendering on kida, safe "next URL" redirects, static files,
JSON and error responses.

Basic usage::

    from perch import Loader, LoaderConfig, Mux, file_server

    templates = Loader("site", LoaderConfig(directory="templates"))

    async def index(w, request):
        await templates.render(w, request, "index.html", {"title": "Home"})

    app = Mux()
    app.get("/", index)
    file_server(app, "/static", "static")
"""

import importlib

__version__ = "0.1.0"

# Public name -> defining module. Resolved on first attribute access so
# ``import perch`` stays fast and kida-free until templates are used.
_LAZY_IMPORTS: dict[str, str] = {
    # Templates
    "Loader": "perch.templating.loader",
    "URL": "perch.templating.loader",
    # Configuration
    "DEFAULT_REDIRECT_CONFIG": "perch.config",
    "LoaderConfig": "perch.config",
    "RedirectConfig": "perch.config",
    # HTTP
    "Request": "perch.http.request",
    "ResponseWriter": "perch.http.response",
    "redirect": "perch.http.response",
    "JSON_ESCAPE_HTML_KEY": "perch.respond",
    "http_error": "perch.respond",
    "write_json": "perch.respond",
    # Routing and static files
    "Mux": "perch.routing.mux",
    "Router": "perch.routing.mux",
    "file_server": "perch.static",
    # Next-URL redirects
    "build_next_url": "perch.security.redirects",
    "get_next_url": "perch.security.redirects",
    "redirect_to_next_url": "perch.security.redirects",
    "redirect_with_next_url": "perch.security.redirects",
    "is_safe_url": "perch.security.urls",
    # Errors
    "ConfigurationError": "perch.errors",
    "HTTPError": "perch.errors",
    "MethodNotAllowed": "perch.errors",
    "NotFound": "perch.errors",
    "PerchError": "perch.errors",
    "TemplateEngineError": "perch.errors",
    "TemplateError": "perch.errors",
    "TemplateNotFound": "perch.errors",
}

__all__ = sorted(_LAZY_IMPORTS)


def __getattr__(name: str) -> object:
    """Lazy imports for public API."""
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module_name), name)
