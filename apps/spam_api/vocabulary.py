"""Static word index table used by the encoder.

The table is loaded once at startup and shared read-only between requests.
Three indices are reserved: ``pad`` fills short sequences, ``unknown``
replaces tokens missing from the table and ``start`` marks the beginning of
a sequence.  The encoder never emits ``start``; it is kept so the table
round-trips the artifact it was built from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from lib.config.yaml_loader import load_yaml
from lib.utils.validation import ensure, ensure_index


DEFAULT_PAD = 0
DEFAULT_START = 1
DEFAULT_UNKNOWN = 2

# Table shipped inside the package; used when no path is configured.
BUNDLED_VOCABULARY = "vocabulary.yaml"


@dataclass(frozen=True)
class Vocabulary:
    """Immutable ``token -> index`` table with reserved indices."""

    lookup: Mapping[str, int] = field(default_factory=dict)
    pad: int = DEFAULT_PAD
    start: int = DEFAULT_START
    unknown: int = DEFAULT_UNKNOWN

    def __post_init__(self) -> None:
        for name in ("pad", "start", "unknown"):
            ensure_index(getattr(self, name), name)
        ensure(
            len({self.pad, self.start, self.unknown}) == 3,
            "pad, start and unknown indices must be distinct",
        )
        table: Dict[str, int] = {}
        for token, index in dict(self.lookup).items():
            ensure(isinstance(token, str), f"vocabulary keys must be strings, got {token!r}")
            table[token.lower()] = ensure_index(index, f"lookup[{token!r}]")
        object.__setattr__(self, "lookup", MappingProxyType(table))

    def index_of(self, token: str) -> int:
        return self.lookup.get(token, self.unknown)

    def __contains__(self, token: object) -> bool:
        return token in self.lookup

    def __len__(self) -> int:
        return len(self.lookup)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Vocabulary":
        """Build a table from the artifact layout.

        Either ``{"pad": .., "start": .., "unknown": .., "lookup": {...}}``
        or a bare ``{token: index}`` mapping with default reserved indices.
        """

        if "lookup" not in data:
            return cls(lookup=dict(data))
        return cls(
            lookup=dict(data.get("lookup") or {}),
            pad=data.get("pad", DEFAULT_PAD),
            start=data.get("start", DEFAULT_START),
            unknown=data.get("unknown", DEFAULT_UNKNOWN),
        )


def load_vocabulary(path: Optional[Union[str, Path]] = None) -> Vocabulary:
    """Read a YAML or JSON vocabulary artifact from ``path``.

    Without a path the table bundled with this package is read.
    """

    if path is None:
        bundled = resources.files(__package__).joinpath(BUNDLED_VOCABULARY)
        with resources.as_file(bundled) as local:
            return Vocabulary.from_mapping(load_yaml(local))
    if not Path(path).is_file():
        raise FileNotFoundError(f"Vocabulary not found: {path}")
    return Vocabulary.from_mapping(load_yaml(path))


__all__ = ["Vocabulary", "load_vocabulary"]
