"""Case-insensitive header storage."""

from __future__ import annotations

from typing import Iterator, Mapping, MutableMapping


def canonical_header_name(name: str) -> str:
    """Fold a header name to its canonical form.

    The first letter and every letter following a hyphen are upper-cased,
    all others lower-cased: ``content-type`` and ``CONTENT-TYPE`` both become
    ``Content-Type``.
    """
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.strip().split("-"))


class HeaderMap(MutableMapping[str, str]):
    """Header mapping keyed by canonical header name.

    Lookups, writes and deletes canonicalize the key, so names differing only
    in case share one slot and the last write wins.
    """

    def __init__(self, headers: Mapping[str, str] | None = None):
        self._headers: dict[str, str] = {}
        if headers:
            self.update(headers)

    def __getitem__(self, name: str) -> str:
        return self._headers[canonical_header_name(name)]

    def __setitem__(self, name: str, value: str) -> None:
        self._headers[canonical_header_name(name)] = value

    def __delitem__(self, name: str) -> None:
        del self._headers[canonical_header_name(name)]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return canonical_header_name(name) in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"HeaderMap({self._headers!r})"

    def copy(self) -> dict[str, str]:
        """Return a plain dict snapshot of the headers."""
        return dict(self._headers)
