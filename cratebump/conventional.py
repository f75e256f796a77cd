"""Parsing of commit messages that follow the conventional commits format."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SUMMARY = re.compile(
    r"(?P<type>[^\s():!]+)(?:\((?P<scope>[^()\n]+)\))?(?P<bang>!)?: (?P<description>.*)"
)
_FOOTER = re.compile(r"(?P<token>BREAKING CHANGE|[A-Za-z][\w-]*)(?P<sep>: | #)(?P<value>.*)")
_BREAKING_TOKENS = frozenset({"BREAKING CHANGE", "BREAKING-CHANGE"})


class ConventionalCommitError(ValueError):
    """The message does not follow the conventional commits format."""


def _split_footers(paragraphs: list[str]) -> tuple[list[str], list[str]]:
    for index, paragraph in enumerate(paragraphs):
        first_line = paragraph.split("\n", 1)[0]
        if _FOOTER.fullmatch(first_line):
            return paragraphs[:index], paragraphs[index:]
    return paragraphs, []


def _parse_footers(paragraphs: list[str]) -> tuple[tuple[str, str], ...]:
    footers: list[list[str]] = []
    for line in "\n\n".join(paragraphs).split("\n"):
        match = _FOOTER.fullmatch(line)
        if match:
            footers.append([match["token"], match["value"]])
        else:
            footers[-1][1] += "\n" + line
    return tuple((token, value.strip()) for token, value in footers)


@dataclass(frozen=True)
class Commit:
    """A parsed conventional commit."""

    type: str
    scope: str | None
    description: str
    body: str | None
    breaking: bool
    breaking_description: str | None
    footers: tuple[tuple[str, str], ...]

    @classmethod
    def parse(cls, message: str) -> Commit:
        """Parse a commit message, raising ConventionalCommitError if it does not conform."""
        lines = message.replace("\r\n", "\n").rstrip().split("\n")
        summary = _SUMMARY.fullmatch(lines[0])
        if summary is None:
            raise ConventionalCommitError(f"not a conventional commit summary: {lines[0]!r}")
        description = summary["description"].strip()
        if not description:
            raise ConventionalCommitError("commit description is empty")

        rest = lines[1:]
        if rest and rest[0].strip():
            raise ConventionalCommitError("the summary must be followed by a blank line")
        text = "\n".join(rest).strip("\n")
        paragraphs = [p for p in re.split(r"\n[ \t]*\n", text) if p.strip()] if text else []
        body_paragraphs, footer_paragraphs = _split_footers(paragraphs)
        footers = _parse_footers(footer_paragraphs)

        breaking_footer = next(
            (value for token, value in footers if token in _BREAKING_TOKENS), None
        )
        bang = summary["bang"] is not None
        if breaking_footer is not None:
            breaking_description: str | None = breaking_footer
        elif bang:
            breaking_description = description
        else:
            breaking_description = None

        return cls(
            type=summary["type"],
            scope=summary["scope"],
            description=description,
            body="\n\n".join(body_paragraphs) or None,
            breaking=bang or breaking_footer is not None,
            breaking_description=breaking_description,
            footers=footers,
        )

    def is_feature(self) -> bool:
        """True if the commit type is ``feat``, ignoring case."""
        return self.type.lower() == "feat"