from pathlib import Path

import pytest

from cratebump.registry import (
    CRATES_IO_INDEX,
    RegistryError,
    cargo_home,
    registry_index_url_from_env,
    registry_url,
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    home = tmp_path / "cargo-home"
    home.mkdir()
    monkeypatch.setenv("CARGO_HOME", str(home))
    root = tmp_path / "project"
    root.mkdir()
    manifest = root / "Cargo.toml"
    manifest.write_text('[package]\nname = "demo"\n')
    return root, manifest, home


def _write_config(directory: Path, text: str, name: str = "config.toml") -> None:
    cargo_dir = directory / ".cargo"
    cargo_dir.mkdir(exist_ok=True)
    (cargo_dir / name).write_text(text)


def test_default_is_crates_io(project):
    _, manifest, _ = project
    assert registry_url(manifest) == CRATES_IO_INDEX


def test_crates_io_index_name_means_crates_io(project):
    _, manifest, _ = project
    assert registry_url(manifest, CRATES_IO_INDEX) == CRATES_IO_INDEX


def test_env_index_for_registry(project, monkeypatch):
    _, manifest, _ = project
    url = "https://index.example.com/my-index"
    monkeypatch.setenv("CARGO_REGISTRIES_MY_REG_INDEX", url)
    assert registry_index_url_from_env("my_reg") == url
    assert registry_url(manifest, "my_reg") == url


def test_env_absent_returns_none(monkeypatch):
    monkeypatch.delenv("CARGO_REGISTRIES_NOPE_INDEX", raising=False)
    assert registry_index_url_from_env("nope") is None


def test_registry_from_project_config(project):
    root, manifest, _ = project
    url = "https://registry.example.com/git/index"
    _write_config(root, f'[registries.internal]\nindex = "{url}"\n')
    assert registry_url(manifest, "internal") == url


def test_registry_from_legacy_config_file(project):
    root, manifest, _ = project
    url = "sparse+https://registry.example.com/index/"
    _write_config(root, f'[registries.internal]\nindex = "{url}"\n', name="config")
    assert registry_url(manifest, "internal") == url


def test_registry_from_cargo_home(project):
    _, manifest, home = project
    url = "https://home.example.com/index"
    (home / "config.toml").write_text(f'[registries.homereg]\nindex = "{url}"\n')
    assert registry_url(manifest, "homereg") == url


def test_closest_config_wins(project):
    root, manifest, _ = project
    nested = root / "crates" / "inner"
    nested.mkdir(parents=True)
    inner_manifest = nested / "Cargo.toml"
    inner_manifest.write_text("")
    near = "https://near.example.com/index"
    far = "https://far.example.com/index"
    _write_config(nested, f'[registries.reg]\nindex = "{near}"\n')
    _write_config(root, f'[registries.reg]\nindex = "{far}"\n')
    assert registry_url(inner_manifest, "reg") == near
    assert registry_url(manifest, "reg") == far


def test_env_override_beats_config(project, monkeypatch):
    root, manifest, _ = project
    env_url = "https://env.example.com/index"
    monkeypatch.setenv("CARGO_REGISTRIES_REG_INDEX", env_url)
    _write_config(root, '[registries.reg]\nindex = "https://file.example.com/index"\n')
    assert registry_url(manifest, "reg") == env_url


def test_source_replacement_is_followed(project):
    root, manifest, _ = project
    mirror = "https://mirror.example.com/index"
    _write_config(
        root,
        '[source.crates-io]\nreplace-with = "mirror"\n\n'
        f'[source.mirror]\nregistry = "{mirror}"\n',
    )
    assert registry_url(manifest) == mirror


def test_missing_replacement_source_raises(project):
    root, manifest, _ = project
    _write_config(root, '[source.crates-io]\nreplace-with = "ghost"\n')
    with pytest.raises(RegistryError, match="ghost"):
        registry_url(manifest)


def test_unknown_registry_raises(project):
    _, manifest, _ = project
    with pytest.raises(RegistryError, match="could not be found"):
        registry_url(manifest, "unknown-registry")


def test_invalid_url_raises(project):
    root, manifest, _ = project
    _write_config(root, '[registries.bad]\nindex = "not a url"\n')
    with pytest.raises(RegistryError, match="Invalid cargo config"):
        registry_url(manifest, "bad")


def test_invalid_toml_raises(project):
    root, manifest, _ = project
    _write_config(root, "[registries\n")
    with pytest.raises(RegistryError):
        registry_url(manifest)


def test_cargo_home_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("CARGO_HOME", str(tmp_path))
    assert cargo_home() == tmp_path


def test_cargo_home_default(monkeypatch):
    monkeypatch.delenv("CARGO_HOME", raising=False)
    assert cargo_home() == Path.home() / ".cargo"