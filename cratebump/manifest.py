"""In-memory Cargo manifests that keep their formatting."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.toml_document import TOMLDocument

from cratebump.deptable import DepTable

CARGO_TOML = "Cargo.toml"


class ManifestError(ValueError):
    """A manifest could not be found, read, parsed or written."""


def _is_table_like(item: Any) -> bool:
    return isinstance(item, Mapping)


class Manifest:
    """A Cargo manifest held as an editable TOML document."""

    def __init__(self, data: TOMLDocument) -> None:
        self.data = data

    @classmethod
    def parse(cls, text: str) -> Manifest:
        """Parse manifest text, raising ManifestError if it is not valid TOML."""
        try:
            return cls(tomlkit.parse(text))
        except TOMLKitError as err:
            raise ManifestError(f"Manifest not valid TOML: {err}") from err

    def sections(self) -> list[tuple[DepTable, Any]]:
        """Every existing table that may hold dependencies, paired with its kind.

        For each kind the top-level table comes first, then the
        ``target.<target>.<kind>`` tables in document order.
        """
        found: list[tuple[DepTable, Any]] = []
        targets = self.data.get("target")
        for table in DepTable.KINDS:
            name = table.kind_table()
            top = self.data.get(name)
            if _is_table_like(top):
                found.append((table, top))
            if not _is_table_like(targets):
                continue
            for target_name, target_table in targets.items():
                if not _is_table_like(target_table):
                    continue
                deps = target_table.get(name)
                if _is_table_like(deps):
                    found.append((table.with_target(target_name), deps))
        return found

    def __str__(self) -> str:
        return self.data.as_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data.as_string()!r})"