"""URL-encoded form parsing.

``FormData`` mirrors ``QueryParams``: ``__getitem__`` returns the first
value, ``get_list`` returns them all.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    Usage::

        form = await request.form()
        username = form["username"]
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        object.__setattr__(self, "_data", data or {})

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"FormData({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (checkboxes, multi-selects)."""
        return list(self._data.get(key, []))


_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body into FormData.

    Only ``application/x-www-form-urlencoded`` is supported.

    Raises:
        ValueError: If the content type is not a supported form encoding,
            or the body is not valid UTF-8.
    """
    ct_lower = content_type.lower().split(";")[0].strip()

    if ct_lower == "application/x-www-form-urlencoded":
        parsed = parse_qs(body.decode("utf-8"), keep_blank_values=True)
        return FormData(parsed)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def has_form_body(method: str) -> bool:
    """Whether a request with *method* carries form fields in its body."""
    return method.upper() in _BODY_METHODS
