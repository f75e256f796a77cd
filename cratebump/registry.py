"""Locating the index URL of a Cargo registry from the environment and config files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import tomlkit
from tomlkit.exceptions import TOMLKitError

CRATES_IO_INDEX = "https://github.com/rust-lang/crates.io-index"
CRATES_IO_REGISTRY = "crates-io"

_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*")


class RegistryError(ValueError):
    """A registry could not be resolved, or a cargo config file is invalid."""


@dataclass
class _Source:
    registry: str | None = None
    replace_with: str | None = None


def registry_index_url_from_env(registry: str) -> str | None:
    """The index URL set by ``CARGO_REGISTRIES_<NAME>_INDEX``, if any."""
    return os.environ.get(f"CARGO_REGISTRIES_{registry.upper()}_INDEX")


def cargo_home() -> Path:
    """The Cargo home directory: ``$CARGO_HOME`` or ``~/.cargo``."""
    try:
        default = Path.home() / ".cargo"
    except RuntimeError as err:
        raise RegistryError("Failed to read home directory") from err
    configured = os.environ.get("CARGO_HOME")
    return Path(configured) if configured is not None else default


def _optional_str(table: dict[str, Any], key: str) -> str | None:
    value = table.get(key)
    if value is None or isinstance(value, str):
        return value
    raise RegistryError(f"Invalid cargo config: {key!r} must be a string")


def _string_tables(config: dict[str, Any], key: str) -> dict[str, dict[str, Any]]:
    tables = config.get(key, {})
    if not isinstance(tables, dict) or not all(isinstance(v, dict) for v in tables.values()):
        raise RegistryError(f"Invalid cargo config: {key!r} must hold tables")
    return tables


def _read_config(registries: dict[str, _Source], path: Path) -> None:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as err:
        raise RegistryError(f"failed to read cargo config file {path}: {err}") from err
    try:
        config = tomlkit.parse(text).unwrap()
    except TOMLKitError as err:
        raise RegistryError(f"Invalid cargo config {path}: {err}") from err

    for name, table in _string_tables(config, "registries").items():
        registries.setdefault(name, _Source(registry=_optional_str(table, "index")))
    for name, table in _string_tables(config, "source").items():
        registries.setdefault(
            name,
            _Source(
                registry=_optional_str(table, "registry"),
                replace_with=_optional_str(table, "replace-with"),
            ),
        )


def _config_file(cargo_dir: Path) -> Path | None:
    for name in ("config", "config.toml"):
        candidate = cargo_dir / name
        if candidate.is_file():
            return candidate
    return None


def _is_valid_url(text: str) -> bool:
    parts = urlsplit(text)
    return bool(_SCHEME.fullmatch(parts.scheme)) and bool(parts.netloc or parts.path)


def registry_url(manifest_path: str | os.PathLike[str], registry: str | None = None) -> str:
    """The index URL of ``registry`` (crates.io when None), following source replacements."""
    registries: dict[str, _Source] = {}

    if registry is not None:
        override = registry_index_url_from_env(registry)
        if override is not None:
            registries.setdefault(registry, _Source(registry=override))

    start = Path(manifest_path).parent
    for directory in (start, *start.parents):
        config = _config_file(directory / ".cargo")
        if config is not None:
            _read_config(registries, config)

    home_config = _config_file(cargo_home())
    if home_config is not None:
        _read_config(registries, home_config)

    if registry is None or registry == CRATES_IO_INDEX:
        source = registries.pop(CRATES_IO_REGISTRY, _Source())
        if source.registry is None:
            source.registry = CRATES_IO_INDEX
    else:
        try:
            source = registries.pop(registry)
        except KeyError:
            raise RegistryError(f"The registry '{registry}' could not be found") from None

    while source.replace_with is not None:
        replace_with = source.replace_with
        try:
            source = registries.pop(replace_with)
        except KeyError:
            raise RegistryError(f"The source '{replace_with}' could not be found") from None
        if replace_with == CRATES_IO_INDEX and source.registry is None:
            source.registry = CRATES_IO_INDEX

    if source.registry is None or not _is_valid_url(source.registry):
        raise RegistryError("Invalid cargo config")
    return source.registry