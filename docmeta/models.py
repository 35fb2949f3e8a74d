"""Core data models shared across docmeta components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, Iterator, List, Optional, Tuple, Union

Scalar = Union[str, bool, int, float]
Value = Union[Scalar, List[Scalar]]


class TargetKind(IntFlag):
    """Program element kinds an annotation may decorate.

    Members double as bits of an applicability mask, so
    ``TargetKind.METHOD | TargetKind.PROPERTY`` is a valid mask.
    """

    CLASS = 1
    METHOD = 2
    PROPERTY = 4

    @property
    def label(self) -> str:
        return _LABELS[self][0]

    @property
    def plural(self) -> str:
        return _LABELS[self][1]

    @classmethod
    def parse(cls, value: str) -> "TargetKind":
        """Return the kind for a case-insensitive name such as ``"method"``."""
        key = value.strip().lower()
        for kind in ALL_KINDS:
            if key in _LABELS[kind]:
                return kind
        raise ValueError(f"Unknown element kind: {value!r}")

    @classmethod
    def members_of(cls, mask: int) -> List["TargetKind"]:
        """Return the kinds contained in ``mask`` in declaration order."""
        return [kind for kind in ALL_KINDS if kind & mask]


ALL_KINDS: Tuple[TargetKind, ...] = (TargetKind.CLASS, TargetKind.METHOD, TargetKind.PROPERTY)

_LABELS = {
    TargetKind.CLASS: ("class", "classes"),
    TargetKind.METHOD: ("method", "methods"),
    TargetKind.PROPERTY: ("property", "properties"),
}


@dataclass(frozen=True)
class Target:
    """Reflection metadata for one annotated element.

    Supplied by the caller; ``ancestors`` lists the names of every class the
    declaring class inherits from, nearest first.
    """

    kind: TargetKind
    class_name: str
    name: str
    file: Optional[str] = None
    line: Optional[int] = None
    ancestors: Tuple[str, ...] = ()

    @classmethod
    def for_class(cls, class_name: str, **kwargs) -> "Target":  # noqa: ANN003 - passthrough
        return cls(kind=TargetKind.CLASS, class_name=class_name, name=class_name, **kwargs)


@dataclass(frozen=True)
class RawInvocation:
    """One ``!Name argument-text`` directive lifted from a comment block."""

    name: str
    argument_text: str
    offset: int = 0


@dataclass
class ParameterList:
    """Evaluated directive arguments: ordered positional values and lower-cased keys."""

    positional: List[Value] = field(default_factory=list)
    keyed: Dict[str, Value] = field(default_factory=dict)

    def add(self, value: Value) -> None:
        self.positional.append(value)

    def set(self, key: str, value: Value) -> None:
        # Duplicate keys overwrite.
        self.keyed[key.lower()] = value

    def has(self, key: str) -> bool:
        return key.lower() in self.keyed

    def get(self, key: str, default: Optional[Value] = None) -> Optional[Value]:
        return self.keyed.get(key.lower(), default)

    def values(self) -> Iterator[Value]:
        """Yield keyed values followed by positional values."""
        yield from self.keyed.values()
        yield from self.positional

    def __len__(self) -> int:
        return len(self.positional) + len(self.keyed)

    def to_dict(self) -> Dict[str, object]:
        return {"positional": list(self.positional), "keyed": dict(self.keyed)}
