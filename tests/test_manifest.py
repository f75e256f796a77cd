import pytest

from cratebump.deptable import DepKind, DepTable
from cratebump.manifest import Manifest, ManifestError

MANIFEST = """\
# the package
[package]
name = "demo"   # keep this comment
version = "0.1.0"

[dependencies]
serde = "1.0"

[dev-dependencies]
tempfile = "3"

[target.'cfg(unix)'.dependencies]
libc = "0.2"

[target.'cfg(windows)'.build-dependencies]
cc = "1"
"""


def test_round_trip_keeps_formatting():
    assert str(Manifest.parse(MANIFEST)) == MANIFEST


def test_invalid_toml_raises():
    with pytest.raises(ManifestError):
        Manifest.parse("[package\nname = ")


def test_duplicate_key_raises():
    with pytest.raises(ManifestError):
        Manifest.parse("a = 1\na = 2\n")


def test_sections_are_grouped_by_kind():
    sections = Manifest.parse(MANIFEST).sections()
    assert [table for table, _ in sections] == [
        DepTable.from_kind(DepKind.NORMAL),
        DepTable.from_kind(DepKind.NORMAL).with_target("cfg(unix)"),
        DepTable.from_kind(DepKind.DEVELOPMENT),
        DepTable.from_kind(DepKind.BUILD).with_target("cfg(windows)"),
    ]


def test_sections_hold_table_contents():
    sections = dict(Manifest.parse(MANIFEST).sections())
    assert sections[DepTable()]["serde"] == "1.0"
    assert sections[DepTable().with_target("cfg(unix)")]["libc"] == "0.2"


def test_inline_table_counts_as_section():
    manifest = Manifest.parse('dependencies = { rand = "0.8" }\n')
    sections = manifest.sections()
    assert [table for table, _ in sections] == [DepTable()]
    assert sections[0][1]["rand"] == "0.8"


def test_non_table_is_not_a_section():
    manifest = Manifest.parse('dependencies = "nope"\ntarget = 3\n')
    assert manifest.sections() == []