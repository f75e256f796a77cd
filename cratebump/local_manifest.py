"""Cargo manifests on disk: locating, reading, editing and writing them."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.items import Array, Table

from cratebump.deptable import DepTable
from cratebump.manifest import CARGO_TOML, Manifest, ManifestError
from cratebump.versioning import Version

_KIND_TABLES = frozenset(table.kind_table() for table in DepTable.KINDS)


class _FeatureStatus(Enum):
    NONE = 0
    DEP_FEATURE = 1
    FEATURE = 2


def _is_table_like(item: Any) -> bool:
    return isinstance(item, Mapping)


def _as_bool(item: Any) -> bool | None:
    if isinstance(item, bool):
        return item
    value = getattr(item, "value", None)
    return value if isinstance(value, bool) else None


def _lookup(container: Any, *keys: str) -> Any:
    for key in keys:
        if not _is_table_like(container):
            return None
        container = container.get(key)
    return container


def _table(container: Any, key: str) -> Any:
    if key not in container:
        container[key] = tomlkit.table()
    return container[key]


class LocalManifest(Manifest):
    """A Cargo manifest together with the absolute path it was read from."""

    def __init__(self, path: Path, data: Any) -> None:
        super().__init__(data)
        self.path = path

    @classmethod
    def find(cls, path: str | os.PathLike[str] | None = None) -> LocalManifest:
        """Load the manifest at ``path``, or the nearest one above it or the cwd."""
        found = find_manifest(path)
        try:
            canonical = found.resolve(strict=True)
        except OSError as err:
            raise ManifestError(f"cannot canonicalize {found}: {err}") from err
        return cls.try_new(canonical)

    @classmethod
    def try_new(cls, path: str | os.PathLike[str]) -> LocalManifest:
        """Load the manifest at an absolute ``path``."""
        path = Path(path)
        if not path.is_absolute():
            raise ManifestError(f"can only edit absolute paths, got {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as err:
            raise ManifestError(f"Failed to read manifest contents: {err}") from err
        try:
            manifest = Manifest.parse(text)
        except ManifestError as err:
            raise ManifestError(f"Unable to parse Cargo.toml: {err}") from err
        return cls(path, manifest.data)

    def write(self) -> None:
        """Write the document back to its file."""
        try:
            self.path.write_text(self.data.as_string(), encoding="utf-8")
        except OSError as err:
            raise ManifestError(f"Failed to write updated Cargo.toml: {err}") from err

    def dependency_tables(self) -> Iterator[Any]:
        """Every dependency table, wherever it lives; the tables can be edited in place."""
        for key, value in self.data.items():
            if key in _KIND_TABLES:
                if _is_table_like(value):
                    yield value
            elif key == "workspace":
                if _is_table_like(value):
                    deps = value.get("dependencies")
                    if _is_table_like(deps):
                        yield deps
            elif key == "target" and _is_table_like(value):
                for target_table in value.values():
                    if not _is_table_like(target_table):
                        continue
                    for name, deps in target_table.items():
                        if name in _KIND_TABLES and _is_table_like(deps):
                            yield deps

    def workspace_dependency_table(self) -> Any | None:
        """The ``[workspace.dependencies]`` table, if any."""
        deps = _lookup(self.data, "workspace", "dependencies")
        return deps if _is_table_like(deps) else None

    def set_package_version(self, version: Version) -> None:
        """Override the package version."""
        _table(self.data, "package")["version"] = str(version)

    def version_is_inherited(self) -> bool:
        """True if the package takes its version from the workspace."""
        return _as_bool(_lookup(self.data, "package", "version", "workspace")) is True

    def workspace_version(self) -> Version | None:
        """The ``[workspace.package]`` version, if present and valid."""
        version = _lookup(self.data, "workspace", "package", "version")
        if not isinstance(version, str):
            return None
        try:
            return Version.parse(str(version))
        except ValueError:
            return None

    def set_workspace_version(self, version: Version) -> None:
        """Override the workspace version."""
        package = _table(_table(self.data, "workspace"), "package")
        package["version"] = str(version)

    def gc_dep(self, dep_key: str) -> None:
        """Drop feature activations that refer to ``dep_key`` if it no longer provides them."""
        status = self._dep_feature(dep_key)
        if status is _FeatureStatus.FEATURE:
            return
        features = self.data.get("features")
        if not isinstance(features, Table):
            return
        for activations in features.values():
            if isinstance(activations, Array):
                _remove_feature_activation(activations, dep_key, status)

    def _dep_feature(self, dep_key: str) -> _FeatureStatus:
        status = _FeatureStatus.NONE
        for _, table in self.sections():
            if not isinstance(table, Table) or dep_key not in table:
                continue
            optional = _as_bool(_lookup(table[dep_key], "optional"))
            if optional:
                return _FeatureStatus.FEATURE
            status = _FeatureStatus.DEP_FEATURE
        return status


def _remove_feature_activation(activations: Array, dep: str, status: _FeatureStatus) -> None:
    prefix = f"{dep}/"

    def matches(activation: str) -> bool:
        if status is _FeatureStatus.NONE:
            return activation == dep or activation.startswith(prefix)
        if status is _FeatureStatus.DEP_FEATURE:
            return activation == dep
        return False

    doomed = [
        index
        for index, activation in enumerate(activations)
        if isinstance(activation, str) and matches(str(activation))
    ]
    for index in reversed(doomed):
        del activations[index]


def find_manifest(specified: str | os.PathLike[str] | None = None) -> Path:
    """The manifest at ``specified``, or the nearest one searching upwards.

    With no argument the search starts from the current directory.
    """
    if specified is None:
        return find_manifest_path(Path.cwd())
    path = Path(specified)
    if not path.exists():
        raise ManifestError(f"Failed to get cargo file metadata for {path}")
    if path.is_file():
        return path
    return find_manifest_path(path)


def find_manifest_path(directory: str | os.PathLike[str]) -> Path:
    """Search for Cargo.toml in ``directory`` and then in each of its parents."""
    directory = Path(directory)
    for candidate_dir in (directory, *directory.parents):
        manifest = candidate_dir / CARGO_TOML
        if manifest.exists():
            return manifest
    raise ManifestError(f"Unable to find Cargo.toml for {directory}")


def workspace_manifest(metadata: Mapping[str, Any]) -> Path:
    """Path of the root manifest, given parsed ``cargo metadata`` output."""
    return Path(metadata["workspace_root"]) / CARGO_TOML


def canonical_local_manifest(path: str | os.PathLike[str]) -> Path:
    """Canonical path of a manifest, given the manifest or its directory."""
    canonical = Path(path).resolve(strict=True)
    if canonical.name != CARGO_TOML:
        canonical = canonical / CARGO_TOML
    return canonical