"""Small stand-in packages and dependencies shaped like ``cargo metadata`` output."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from cratebump.deptable import DepKind
from cratebump.manifest import CARGO_TOML
from cratebump.workspace import get_manifest_metadata

_METADATA_KIND = {
    DepKind.NORMAL: None,
    DepKind.DEVELOPMENT: "dev",
    DepKind.BUILD: "build",
}


@dataclass(frozen=True)
class FakeDependency:
    """A dependency with a fixed requirement of ``0.1.0``."""

    name: str
    kind: DepKind = DepKind.NORMAL

    def dev(self) -> FakeDependency:
        """The same dependency as a development dependency."""
        return replace(self, kind=DepKind.DEVELOPMENT)

    def to_dict(self) -> dict[str, Any]:
        """The dependency as ``cargo metadata`` reports it."""
        return {
            "name": self.name,
            "source": None,
            "req": "0.1.0",
            "kind": _METADATA_KIND[self.kind],
            "rename": None,
            "optional": False,
            "uses_default_features": True,
            "features": [],
            "target": None,
            "registry": None,
            "path": None,
        }


@dataclass(frozen=True)
class FakePackage:
    """A package at version ``0.1.0`` whose id is its name."""

    name: str
    dependencies: tuple[FakeDependency, ...] = ()

    def with_dependencies(self, dependencies: list[FakeDependency]) -> FakePackage:
        """A copy of this package with ``dependencies`` replacing the current ones."""
        return replace(self, dependencies=tuple(dependencies))

    def to_dict(self) -> dict[str, Any]:
        """The package as ``cargo metadata`` reports it."""
        return {
            "name": self.name,
            "version": "0.1.0",
            "id": self.name,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "features": {},
            "manifest_path": f"{self.name}/{CARGO_TOML}",
            "targets": [],
        }


def fake_metadata() -> dict[str, Any]:
    """Metadata of the Cargo.toml in the current directory."""
    return get_manifest_metadata(Path(CARGO_TOML))