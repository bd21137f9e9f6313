"""Parsing of the tag grouping specification (e.g. ``Application,Environment=Production``)."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from ..exceptions import ConfigError


@dataclass(frozen=True)
class TagSelector:
    """One field of the tag spec: a tag key with an optional required value.

    Only the key takes part in grouping. The value is parsed and kept so it
    can be reported, but it does not exclude instances with other values.
    """

    key: str
    value: str | None = None

    @property
    def has_value(self) -> bool:
        return self.value is not None

    def __str__(self) -> str:
        return self.key if self.value is None else f"{self.key}={self.value}"


class TagSpec(Sequence[TagSelector]):
    """Ordered tag selectors; duplicates are preserved."""

    def __init__(self, selectors: Sequence[TagSelector] = ()):
        self._selectors = tuple(selectors)

    def __getitem__(self, index):
        return self._selectors[index]

    def __len__(self) -> int:
        return len(self._selectors)

    def __iter__(self) -> Iterator[TagSelector]:
        return iter(self._selectors)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSpec):
            return self._selectors == other._selectors
        return NotImplemented

    def __repr__(self) -> str:
        return f"TagSpec({list(self._selectors)!r})"

    def keys(self) -> list[str]:
        """Selector keys, de-duplicated, in first-occurrence order."""
        seen: set[str] = set()
        keys: list[str] = []
        for selector in self._selectors:
            if selector.key not in seen:
                seen.add(selector.key)
                keys.append(selector.key)
        return keys

    def with_values(self) -> list[TagSelector]:
        """Selectors that carry a required value."""
        return [s for s in self._selectors if s.has_value]


def parse_tag_spec(raw: str) -> TagSpec:
    """Parse a comma-separated tag spec into a TagSpec.

    An empty string yields an empty spec, meaning "group by every tag key
    seen on the instances". A field with more than one ``=`` is a
    configuration error.
    """
    if raw == "":
        return TagSpec()

    selectors: list[TagSelector] = []
    for fld in raw.split(","):
        parts = fld.split("=")
        if len(parts) == 1:
            selectors.append(TagSelector(key=fld))
        elif len(parts) == 2:
            selectors.append(TagSelector(key=parts[0], value=parts[1]))
        else:
            raise ConfigError(f"Unrecognized tag filter {fld!r} in {raw!r}")
    return TagSpec(selectors)
