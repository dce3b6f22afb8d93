"""Immutable query string parameters.

Implements ``Mapping[str, str]``; repeated keys keep every value,
``__getitem__`` and ``get`` return the first one.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    Attributes:
        _data: Parsed query string as field name -> list of values.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    _data: dict[str, list[str]]

    __slots__ = ("_data",)

    def __init__(self, query_string: str | bytes = b"") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        parsed = parse_qs(query_string, keep_blank_values=True)
        object.__setattr__(self, "_data", parsed)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "QueryParams":
        """Build from an already-demultiplexed key/value mapping."""
        if isinstance(values, QueryParams):
            return values
        params = cls()
        object.__setattr__(params, "_data", {key: [value] for key, value in values.items()})
        return params

    def __setattr__(self, name: str, value: object) -> None:
        msg = "QueryParams is immutable"
        raise AttributeError(msg)

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
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))
