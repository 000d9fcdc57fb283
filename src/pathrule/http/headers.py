"""Case-insensitive request headers.

Admission checks read a handful of headers (``X-Requested-With``,
``X-PJAX``, ``Accept``, ``X-Forwarded-Proto``) for every rule tried, so
names are lowercased and values decoded once, when the mapping is built.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable ``Mapping[str, str]`` over ASGI-style raw byte pairs.

    A header sent more than once resolves to its first value.
    """

    __slots__ = ("_index",)

    _index: dict[str, str]

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        index: dict[str, str] = {}
        for name, value in raw:
            index.setdefault(name.decode("latin-1").lower(), value.decode("latin-1"))
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str] | None = None) -> "Headers":
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls(
            (name.lower().encode("latin-1"), str(value).encode("latin-1"))
            for name, value in (headers or {}).items()
        )

    def __getitem__(self, key: str) -> str:
        return self._index[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Headers({self._index!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        return self._index.get(key.lower(), default)
