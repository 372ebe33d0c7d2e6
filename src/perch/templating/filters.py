"""Built-in perch template filters.

Auto-registered on every ``Loader`` environment.
"""

import json
from collections.abc import Callable
from typing import Any

from kida.environment.exceptions import TemplateRuntimeError


def filter_json(value: Any, indent: str = "") -> str:
    """Serialize a value to JSON inside a template.

    The result is a plain string, so autoescaping still applies.

    Example:
        {{ user|json }}            → {"name":"Ada"}
        {{ user|json("pretty") }}  → indented by four spaces
        {{ user|json("\t") }}      → indented by tabs
    """
    option = str(indent)
    if option.lower() == "pretty":
        width: str | None = "    "
    elif option:
        width = option
    else:
        width = None

    try:
        if width is None:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        return json.dumps(value, indent=width, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        msg = f"filter:json: {exc}"
        raise TemplateRuntimeError(msg) from exc


BUILTIN_FILTERS: dict[str, Callable[..., Any]] = {
    "json": filter_json,
}
