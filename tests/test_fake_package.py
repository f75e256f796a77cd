import pytest

from cratebump.deptable import DepKind
from cratebump.fake_package import FakeDependency, FakePackage, fake_metadata
from cratebump.workspace import MetadataError, workspace_members


def test_dependency_defaults_to_normal():
    data = FakeDependency("serde").to_dict()
    assert data["name"] == "serde"
    assert data["req"] == "0.1.0"
    assert data["kind"] is None
    assert data["optional"] is False
    assert data["uses_default_features"] is True
    assert data["features"] == []


def test_dev_dependency():
    dep = FakeDependency("tempfile").dev()
    assert dep.kind is DepKind.DEVELOPMENT
    assert dep.to_dict()["kind"] == "dev"


def test_dev_does_not_change_original():
    dep = FakeDependency("x")
    dep.dev()
    assert dep.kind is DepKind.NORMAL


def test_package_dict():
    data = FakePackage("mycrate").to_dict()
    assert data["name"] == "mycrate"
    assert data["id"] == "mycrate"
    assert data["version"] == "0.1.0"
    assert data["manifest_path"] == "mycrate/Cargo.toml"
    assert data["dependencies"] == []
    assert data["features"] == {}
    assert data["targets"] == []


def test_package_with_dependencies():
    deps = [FakeDependency("a"), FakeDependency("b").dev()]
    package = FakePackage("root").with_dependencies(deps)
    data = package.to_dict()
    assert [d["name"] for d in data["dependencies"]] == ["a", "b"]
    assert data["dependencies"][1] == deps[1].to_dict()


def test_with_dependencies_replaces():
    package = FakePackage("p").with_dependencies([FakeDependency("a")])
    replaced = package.with_dependencies([FakeDependency("b")])
    assert [d.name for d in replaced.dependencies] == ["b"]
    assert [d.name for d in package.dependencies] == ["a"]


def test_fake_packages_work_as_workspace_metadata():
    packages = [FakePackage("one"), FakePackage("two")]
    metadata = {
        "packages": [p.to_dict() for p in packages],
        "workspace_members": ["two"],
    }
    (member,) = workspace_members(metadata)
    assert member["id"] == "two"
    assert member["manifest_path"] == "two/Cargo.toml"


def test_fake_metadata_without_manifest_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(MetadataError):
        fake_metadata()