"""Semantic versions and the ways to step them forward."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

_NUMBER = re.compile(r"0|[1-9][0-9]*")
_IDENTIFIER = re.compile(r"[0-9A-Za-z-]+")
_U64_MAX = 2**64 - 1
_U32_MAX = 2**32 - 1


def _parse_number(text: str, part: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise ValueError(f"invalid {part} version number: {text!r}")
    value = int(text)
    if value > _U64_MAX:
        raise ValueError(f"{part} version number is too large: {text!r}")
    return value


def _check_prerelease(pre: str) -> None:
    if not pre:
        return
    for identifier in pre.split("."):
        if not _IDENTIFIER.fullmatch(identifier):
            raise ValueError(f"invalid pre-release identifier {identifier!r} in {pre!r}")
        if identifier.isdigit() and len(identifier) > 1 and identifier.startswith("0"):
            raise ValueError(f"pre-release identifier {identifier!r} has a leading zero")


def _check_build(build: str) -> None:
    if not build:
        return
    for identifier in build.split("."):
        if not _IDENTIFIER.fullmatch(identifier):
            raise ValueError(f"invalid build metadata identifier {identifier!r} in {build!r}")


def _increment_last_identifier(release: str) -> str:
    left, dot, right = release.rpartition(".")
    if dot and right.isascii() and right.isdigit() and int(right) <= _U32_MAX:
        return f"{left}.{int(right) + 1}"
    return f"{release}.1"


@dataclass(frozen=True)
class Version:
    """A semantic version: ``major.minor.patch[-pre][+build]``."""

    major: int
    minor: int
    patch: int
    pre: str = ""
    build: str = ""

    def __post_init__(self) -> None:
        for part, value in (("major", self.major), ("minor", self.minor), ("patch", self.patch)):
            if value < 0:
                raise ValueError(f"{part} version number cannot be negative")
        _check_prerelease(self.pre)
        _check_build(self.build)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string, raising ValueError if it is not valid semver."""
        core, plus, build = text.partition("+")
        if plus and not build:
            raise ValueError(f"empty build metadata in {text!r}")
        core, dash, pre = core.partition("-")
        if dash and not pre:
            raise ValueError(f"empty pre-release in {text!r}")
        parts = core.split(".")
        if len(parts) != 3:
            raise ValueError(f"expected major.minor.patch, got {text!r}")
        major, minor, patch = (
            _parse_number(value, name) for value, name in zip(parts, ("major", "minor", "patch"))
        )
        return cls(major, minor, patch, pre, build)

    def increment_major(self) -> Version:
        """Bump the major number, resetting minor, patch and pre-release."""
        return Version(self.major + 1, 0, 0, "", self.build)

    def increment_minor(self) -> Version:
        """Bump the minor number, resetting patch and pre-release."""
        return replace(self, minor=self.minor + 1, patch=0, pre="")

    def increment_patch(self) -> Version:
        """Bump the patch number, resetting the pre-release."""
        return replace(self, patch=self.patch + 1, pre="")

    def increment_prerelease(self) -> Version:
        """Bump the last numeric pre-release identifier, or append ``.1``."""
        next_pre = _increment_last_identifier(self.pre)
        try:
            return replace(self, pre=next_pre)
        except ValueError as err:
            raise ValueError(f"cannot increment pre-release of {self}: {err}") from err

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += f"-{self.pre}"
        if self.build:
            text += f"+{self.build}"
        return text