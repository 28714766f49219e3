"""Immutable, case-insensitive HTTP headers.

Built from the raw byte pairs in the ASGI scope. Names are lowercased and
values decoded once, at construction.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive request headers.

    ``__getitem__`` returns the first value for a name.
    ``get_list`` returns all values (e.g. repeated ``Accept`` lines).
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        pairs = tuple(raw)
        data: dict[str, list[str]] = {}
        for name, value in pairs:
            data.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        object.__setattr__(self, "_raw", pairs)
        object.__setattr__(self, "_data", data)

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Raw header byte pairs as received."""
        return self._raw
