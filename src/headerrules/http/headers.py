"""Mutable, case-insensitive HTTP response headers.

Implements ``MutableMapping[str, str]`` over the raw byte pairs of an
ASGI ``http.response.start`` message. Encodes on write, decodes on
access, and keeps the original order and casing of untouched headers.
"""

from collections.abc import Iterable, Iterator, MutableMapping


def _encode(value: str) -> bytes:
    return value.encode("latin-1")


class MutableHeaders(MutableMapping[str, str]):
    """Mutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. multiple ``Set-Cookie``).
    ``__setitem__`` replaces every existing value with a single new one,
    in the position of the first occurrence.
    ``__delitem__`` removes every value for the header.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        self._raw: list[tuple[bytes, bytes]] = [(bytes(k), bytes(v)) for k, v in raw]

    @classmethod
    def from_dict(cls, values: dict[str, str]) -> "MutableHeaders":
        """Build headers from a plain ``{name: value}`` dict."""
        return cls((_encode(k), _encode(v)) for k, v in values.items())

    def __getitem__(self, key: str) -> str:
        key_lower = _encode(key.lower())
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __setitem__(self, key: str, value: str) -> None:
        key_lower = _encode(key.lower())
        replaced = False
        kept: list[tuple[bytes, bytes]] = []
        for name, existing in self._raw:
            if name.lower() != key_lower:
                kept.append((name, existing))
            elif not replaced:
                kept.append((name, _encode(value)))
                replaced = True
        if not replaced:
            kept.append((key_lower, _encode(value)))
        self._raw = kept

    def __delitem__(self, key: str) -> None:
        key_lower = _encode(key.lower())
        kept = [(name, value) for name, value in self._raw if name.lower() != key_lower]
        if len(kept) == len(self._raw):
            raise KeyError(key)
        self._raw = kept

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = _encode(key.lower())
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"MutableHeaders({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (e.g. multiple ``Set-Cookie``)."""
        key_lower = _encode(key.lower())
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]

    def discard(self, key: str) -> None:
        """Remove every value for *key*; a missing header is not an error."""
        key_lower = _encode(key.lower())
        self._raw = [(name, value) for name, value in self._raw if name.lower() != key_lower]

    @property
    def raw(self) -> list[tuple[bytes, bytes]]:
        """Raw header byte pairs for an ASGI message."""
        return list(self._raw)
