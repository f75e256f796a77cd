"""Choose the next semantic version from a list of commit messages."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum

from cratebump.conventional import Commit, ConventionalCommitError
from cratebump.versioning import Version


def _parse_commits(messages: list[str]) -> list[Commit]:
    commits = []
    for message in messages:
        try:
            commits.append(Commit.parse(message))
        except ConventionalCommitError:
            continue
    return commits


def _custom_match(pattern: re.Pattern[str] | None, commits: list[Commit]) -> bool:
    return pattern is not None and any(pattern.search(commit.type) for commit in commits)


class VersionIncrement(Enum):
    """Which part of a version to increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PRERELEASE = "prerelease"

    @classmethod
    def from_commits(
        cls, current_version: Version, commits: Iterable[str]
    ) -> VersionIncrement | None:
        """Analyse commits with the default rules; None means no change."""
        return _increment_for(VersionUpdater(), current_version, commits)

    @classmethod
    def breaking(cls, current_version: Version) -> VersionIncrement:
        """The increment that signals a breaking change for this version."""
        if current_version.pre:
            return cls.PRERELEASE
        if current_version.major == 0 and current_version.minor == 0:
            return cls.PATCH
        if current_version.major == 0:
            return cls.MINOR
        return cls.MAJOR

    def bump(self, version: Version) -> Version:
        """Apply this increment to ``version``."""
        if self is VersionIncrement.MAJOR:
            return version.increment_major()
        if self is VersionIncrement.MINOR:
            return version.increment_minor()
        if self is VersionIncrement.PATCH:
            return version.increment_patch()
        return version.increment_prerelease()


@dataclass(frozen=True)
class VersionUpdater:
    """Configurable rules for choosing the next version."""

    features_always_increment_minor: bool = False
    breaking_always_increment_major: bool = False
    custom_major_increment_regex: re.Pattern[str] | None = None
    custom_minor_increment_regex: re.Pattern[str] | None = None

    def with_features_always_increment_minor(self, value: bool) -> VersionUpdater:
        """Make features bump the minor number even when major is 0."""
        return replace(self, features_always_increment_minor=value)

    def with_breaking_always_increment_major(self, value: bool) -> VersionUpdater:
        """Make breaking changes bump the major number even when major is 0."""
        return replace(self, breaking_always_increment_major=value)

    def with_custom_major_increment_regex(self, pattern: str) -> VersionUpdater:
        """Commit types matching ``pattern`` bump the major number; raises re.error."""
        return replace(self, custom_major_increment_regex=re.compile(pattern))

    def with_custom_minor_increment_regex(self, pattern: str) -> VersionUpdater:
        """Commit types matching ``pattern`` bump the minor number; raises re.error."""
        return replace(self, custom_minor_increment_regex=re.compile(pattern))

    def increment(self, version: Version, commits: Iterable[str]) -> Version:
        """Analyse commits and return the next version."""
        increment = _increment_for(self, version, commits)
        return version if increment is None else increment.bump(version)

    def _increment_for_conventional(
        self, current: Version, commits: list[Commit]
    ) -> VersionIncrement:
        has_feature = any(commit.is_feature() for commit in commits)
        has_breaking = any(commit.breaking for commit in commits)

        major_bump = (
            has_breaking or _custom_match(self.custom_major_increment_regex, commits)
        ) and (current.major != 0 or self.breaking_always_increment_major)
        if major_bump:
            return VersionIncrement.MAJOR

        feature_bump = has_feature and (
            current.major != 0 or self.features_always_increment_minor
        )
        breaking_bump = current.major == 0 and current.minor != 0 and has_breaking
        if (
            feature_bump
            or breaking_bump
            or _custom_match(self.custom_minor_increment_regex, commits)
        ):
            return VersionIncrement.MINOR
        return VersionIncrement.PATCH


def _increment_for(
    updater: VersionUpdater, current_version: Version, commits: Iterable[str]
) -> VersionIncrement | None:
    messages = list(commits)
    if not messages:
        return None
    if current_version.pre:
        return VersionIncrement.PRERELEASE
    return updater._increment_for_conventional(current_version, _parse_commits(messages))


def next_version(version: Version, commits: Iterable[str]) -> Version:
    """The next version under the default rules."""
    return VersionUpdater().increment(version, commits)