"""Reading ``cargo metadata`` and listing the members of a workspace."""

from __future__ import annotations

import copy
import json
import os
import subprocess
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any


class MetadataError(RuntimeError):
    """``cargo metadata`` could not be run or gave unusable output."""


def get_manifest_metadata(manifest_path: str | os.PathLike[str]) -> dict[str, Any]:
    """Run ``cargo metadata --no-deps`` for ``manifest_path`` and return the parsed JSON."""
    cargo = os.environ.get("CARGO", "cargo")
    command = [
        cargo,
        "metadata",
        "--format-version",
        "1",
        "--no-deps",
        "--manifest-path",
        os.fspath(manifest_path),
    ]
    try:
        result = subprocess.run(command, capture_output=True, check=False)
    except OSError as err:
        raise MetadataError(f"failed to run {cargo}: {err}") from err
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise MetadataError(f"`cargo metadata` exited with an error: {stderr}")
    try:
        return json.loads(result.stdout)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise MetadataError(f"cannot parse `cargo metadata` output: {err}") from err


def _canonicalize_path(path: str) -> str:
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError):
        return path


def workspace_members(metadata: Mapping[str, Any]) -> Iterator[dict[str, Any]]:
    """Copies of the workspace member packages, with their paths made canonical."""
    member_ids = set(metadata.get("workspace_members", ()))
    for package in metadata.get("packages", ()):
        if package.get("id") not in member_ids:
            continue
        member = copy.deepcopy(package)
        member["manifest_path"] = _canonicalize_path(member["manifest_path"])
        for dependency in member.get("dependencies", ()):
            if dependency.get("path") is not None:
                dependency["path"] = _canonicalize_path(dependency["path"])
        yield member