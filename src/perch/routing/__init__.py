"""Routing — the ``Router`` capability and the bundled ``Mux`` adapter.

Helpers such as ``file_server()`` only need something with a ``get()``
method, so any router can be adapted with a few lines.
"""

from perch.routing.mux import Mux, Router

__all__ = ["Mux", "Router"]
