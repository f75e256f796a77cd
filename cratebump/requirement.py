"""Cargo version requirements and upgrading them to a new version."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from cratebump.versioning import Version

_OPERATORS = (">=", "<=", ">", "<", "=", "~", "^")
_WILDCARDS = frozenset("*xX")
_NUMBER = re.compile(r"0|[1-9][0-9]*")
_IDENTIFIERS = re.compile(r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*")
_U64_MAX = 2**64 - 1


class UnsupportedRequirementError(ValueError):
    """The requirement uses an operator that cannot be upgraded."""


def _parse_number(text: str, source: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise ValueError(f"invalid version number {text!r} in requirement {source!r}")
    value = int(text)
    if value > _U64_MAX:
        raise ValueError(f"version number {text!r} is too large in {source!r}")
    return value


def _check_prerelease(pre: str, source: str) -> None:
    if not _IDENTIFIERS.fullmatch(pre):
        raise ValueError(f"invalid pre-release {pre!r} in requirement {source!r}")
    for identifier in pre.split("."):
        if identifier.isdigit() and len(identifier) > 1 and identifier.startswith("0"):
            raise ValueError(f"pre-release identifier {identifier!r} has a leading zero")


@dataclass(frozen=True)
class Comparator:
    """One comparison in a requirement; ``op`` is one of = > >= < <= ~ ^ *."""

    op: str
    major: int
    minor: int | None = None
    patch: int | None = None
    pre: str = ""

    @classmethod
    def _parse(cls, text: str, source: str) -> Comparator:
        text = text.strip(" ")
        op = next((candidate for candidate in _OPERATORS if text.startswith(candidate)), None)
        rest = text[len(op) :].lstrip(" ") if op else text
        if not rest:
            raise ValueError(f"unexpected end of input in requirement {source!r}")

        core, plus, build = rest.partition("+")
        core, dash, pre = core.partition("-")
        parts = core.split(".")
        if len(parts) > 3:
            raise ValueError(f"too many version components in requirement {source!r}")

        numbers: list[int | None] = []
        wildcard = False
        for part in parts:
            if part in _WILDCARDS:
                wildcard = True
                numbers.append(None)
            elif wildcard:
                raise ValueError(f"unexpected version number after wildcard in {source!r}")
            else:
                numbers.append(_parse_number(part, source))
        major, minor, patch = (numbers + [None, None])[:3]
        if major is None:
            raise ValueError(f"wildcard must be the only comparator in {source!r}")

        if (dash or plus) and patch is None:
            raise ValueError(f"pre-release or build needs a full version in {source!r}")
        if dash:
            _check_prerelease(pre, source)
        if plus and not _IDENTIFIERS.fullmatch(build):
            raise ValueError(f"invalid build metadata {build!r} in requirement {source!r}")

        if wildcard:
            if op in (None, "="):
                op = "*"
        elif op is None:
            op = "^"
        return cls(op, major, minor, patch, pre if dash else "")

    def __str__(self) -> str:
        text = ("" if self.op == "*" else self.op) + str(self.major)
        if self.minor is not None:
            text += f".{self.minor}"
            if self.patch is not None:
                text += f".{self.patch}"
                if self.pre:
                    text += f"-{self.pre}"
            elif self.op == "*":
                text += ".*"
        elif self.op == "*":
            text += ".*"
        return text


@dataclass(frozen=True)
class VersionReq:
    """A comma separated list of comparators; empty matches every version."""

    comparators: tuple[Comparator, ...] = ()

    @classmethod
    def parse(cls, text: str) -> VersionReq:
        """Parse a requirement such as ``^1.2, <1.5``; raises ValueError."""
        stripped = text.strip(" ")
        if stripped in _WILDCARDS:
            return cls()
        return cls(tuple(Comparator._parse(piece, text) for piece in stripped.split(",")))

    def __str__(self) -> str:
        if not self.comparators:
            return "*"
        return ", ".join(str(comparator) for comparator in self.comparators)


def _set_comparator(comparator: Comparator, version: Version) -> Comparator:
    if comparator.op not in ("*", "=", "~", "^"):
        raise UnsupportedRequirementError(
            f"Support for modifying {comparator} is currently unsupported"
        )
    updated = replace(
        comparator,
        major=version.major,
        minor=None if comparator.minor is None else version.minor,
        patch=None if comparator.patch is None else version.patch,
    )
    if comparator.op != "*":
        updated = replace(updated, pre=version.pre)
    return updated


def upgrade_requirement(req: str, version: Version) -> str | None:
    """Rewrite ``req`` to point at ``version``; None when nothing changes."""
    parsed = VersionReq.parse(req)
    if not parsed.comparators:
        return None
    upgraded = VersionReq(tuple(_set_comparator(c, version) for c in parsed.comparators))
    text = str(upgraded)
    if text.startswith("^") and not req.startswith("^"):
        text = text[1:]
    return None if text == req else text