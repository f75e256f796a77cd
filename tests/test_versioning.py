import pytest

from cratebump.versioning import Version


@pytest.mark.parametrize(
    "text",
    ["1.2.3", "0.0.0", "1.0.0-alpha.1.2", "1.0.0-beta.1+1.1.0", "1.0.0+abcd", "1.0.0-beta"],
)
def test_parse_round_trip(text):
    assert str(Version.parse(text)) == text


def test_parse_fields():
    version = Version.parse("1.0.0-beta.1+1.1.0")
    assert (version.major, version.minor, version.patch) == (1, 0, 0)
    assert version.pre == "beta.1"
    assert version.build == "1.1.0"


@pytest.mark.parametrize(
    "text",
    ["1.2", "1.2.3.4", "01.2.3", "1.2.3-", "1.2.3+", "1.2.3-01", "a.b.c", " 1.2.3", "1.2.3-al..pha"],
)
def test_parse_rejects_invalid(text):
    with pytest.raises(ValueError):
        Version.parse(text)


def test_negative_number_rejected():
    with pytest.raises(ValueError):
        Version(-1, 0, 0)


def test_increment_major_resets_lower_parts_and_keeps_build():
    version = Version.parse("1.2.3-alpha.1+meta")
    bumped = version.increment_major()
    assert bumped.major == version.major + 1
    assert (bumped.minor, bumped.patch, bumped.pre) == (0, 0, "")
    assert bumped.build == version.build


def test_increment_minor_resets_patch():
    version = Version(1, 2, 3, build="abcd")
    bumped = version.increment_minor()
    assert bumped.major == version.major
    assert bumped.minor == version.minor + 1
    assert bumped.patch == 0
    assert bumped.build == "abcd"


def test_increment_patch_clears_prerelease():
    version = Version.parse("1.2.3-rc.1")
    bumped = version.increment_patch()
    assert bumped.patch == version.patch + 1
    assert bumped.pre == ""
    assert (bumped.major, bumped.minor) == (version.major, version.minor)


def test_increment_prerelease_numeric_last_identifier():
    assert Version.parse("1.0.0-alpha.1.2").increment_prerelease() == Version.parse("1.0.0-alpha.1.3")


def test_increment_prerelease_appends_one():
    assert Version.parse("1.0.0-beta").increment_prerelease() == Version.parse("1.0.0-beta.1")


def test_increment_prerelease_keeps_build():
    assert Version.parse("1.0.0-beta.1+1.1.0").increment_prerelease() == Version.parse(
        "1.0.0-beta.2+1.1.0"
    )


def test_increment_prerelease_without_prerelease_fails():
    with pytest.raises(ValueError):
        Version(1, 0, 0).increment_prerelease()


def test_equality_includes_build():
    assert Version.parse("1.0.0+a") != Version.parse("1.0.0+b")
    assert Version.parse("1.0.0+a") == Version(1, 0, 0, build="a")