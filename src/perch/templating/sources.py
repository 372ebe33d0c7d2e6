"""Template sources backed by a plain function.

Lets templates come from anywhere that can turn a path into bytes:
embedded assets, a zip archive, a dict in tests::

    LoaderConfig(loader=lambda path: (ASSETS / path).read_bytes())
"""

from kida.environment.exceptions import TemplateNotFoundError

from perch.config import SourceFunc


class FunctionLoader:
    """kida loader that calls ``func(path)`` for each template source.

    ``func`` returns ``bytes`` (decoded as UTF-8) or ``str`` and raises
    ``FileNotFoundError`` for missing paths; that becomes kida's
    ``TemplateNotFoundError`` with the original chained as the cause.
    """

    __slots__ = ("_func",)

    def __init__(self, func: SourceFunc) -> None:
        self._func = func

    def get_source(self, name: str) -> tuple[str, str | None]:
        try:
            data = self._func(name)
        except FileNotFoundError as exc:
            raise TemplateNotFoundError(name) from exc
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data, None

    def list_templates(self) -> list[str]:
        # A function can't be enumerated
        return []
