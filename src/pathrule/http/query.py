"""Query string parameters.

Rules consult them through ``Request.param()`` for the ``filter`` option
and from custom ``predicate`` callables.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Immutable view of a query string.

    Accepts the raw string as ``bytes`` (ASGI ``query_string``) or
    ``str``, with or without a leading ``?``. A repeated name resolves to
    its first value. Blank values are kept, so ``?flag=`` binds ``flag``
    to ``""``.
    """

    __slots__ = ("_data", "_raw")

    _data: dict[str, str]
    _raw: str

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        raw = query_string.removeprefix("?")
        data: dict[str, str] = {}
        for name, value in parse_qsl(raw, keep_blank_values=True):
            data.setdefault(name, value)
        object.__setattr__(self, "_raw", raw)
        object.__setattr__(self, "_data", data)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"
