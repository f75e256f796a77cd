"""Kinds of dependency tables found in a Cargo manifest."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar


class DepKind(Enum):
    """The kind of a dependency; the value is the manifest table that holds it."""

    NORMAL = "dependencies"
    DEVELOPMENT = "dev-dependencies"
    BUILD = "build-dependencies"


@dataclass(frozen=True)
class DepTable:
    """A dependency table, optionally scoped to a target platform."""

    kind: DepKind = DepKind.NORMAL
    target: str | None = None

    KINDS: ClassVar[tuple[DepTable, ...]]

    @classmethod
    def from_kind(cls, kind: DepKind) -> DepTable:
        """The platform-independent table for ``kind``."""
        return cls(kind=kind)

    def with_kind(self, kind: DepKind) -> DepTable:
        """A copy of this table with another kind."""
        return replace(self, kind=kind)

    def with_target(self, target: str) -> DepTable:
        """A copy of this table scoped to ``target``."""
        return replace(self, target=str(target))

    def kind_table(self) -> str:
        """Name of the manifest table for this kind."""
        return self.kind.value


DepTable.KINDS = tuple(DepTable.from_kind(kind) for kind in DepKind)