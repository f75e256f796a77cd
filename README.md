# cratebump

A Python library of building blocks for releasing Rust workspaces:

- work out the next semantic version from a list of conventional commit messages,
- parse conventional commit messages,
- read and edit `Cargo.toml` manifests without losing their formatting,
- upgrade dependency version requirements,
- find the index URL of a Cargo registry,
- list workspace members from `cargo metadata`,
- run common `git` operations on a repository.

`git` must be on your `PATH` to use `cratebump.git`. `cargo` (or the program named by the
`CARGO` environment variable) must be on your `PATH` to read metadata with
`cratebump.workspace.get_manifest_metadata`.

## Next version from commits

```python
from cratebump.versioning import Version
from cratebump.increment import VersionIncrement, VersionUpdater, next_version

next_version(Version.parse("1.2.3"), ["fix: bug"])           # 1.2.4
next_version(Version.parse("1.2.3"), ["feat: coffee"])       # 1.3.0
next_version(Version.parse("0.2.3"), ["feat: coffee"])       # 0.2.4
next_version(Version.parse("1.2.3"), ["feat!: break user"])  # 2.0.0
next_version(Version.parse("0.2.3"), ["feat!: break user"])  # 0.3.0
next_version(Version.parse("1.0.0-alpha.2"), ["my change"])  # 1.0.0-alpha.3
next_version(Version.parse("1.0.0-beta"), ["my change"])     # 1.0.0-beta.1

updater = (
    VersionUpdater()
    .with_features_always_increment_minor(True)
    .with_custom_major_increment_regex("major|another")
)
updater.increment(Version.parse("0.2.3"), ["feat: coffee"])  # 0.3.0

VersionIncrement.from_commits(Version.parse("1.2.3"), ["feat: x"])  # VersionIncrement.MINOR
VersionIncrement.breaking(Version.parse("0.3.3"))                   # VersionIncrement.MINOR
```

The default rules:

- With no commits the version stays the same (`from_commits` returns `None`).
- A pre-release version only has its last numeric pre-release identifier raised, or `.1`
  appended when the last identifier is not a number.
- If no commit is a conventional commit, the patch number goes up.
- A breaking change (`!` after the type, or a `BREAKING CHANGE:` footer) raises the major
  number, or the minor number when the major is `0`, or the patch number for `0.0.x`.
- A `feat` commit raises the minor number, or the patch number when the major is `0`.
- Build metadata is kept.

`VersionUpdater` changes these rules: `with_features_always_increment_minor`,
`with_breaking_always_increment_major`, and regular expressions matched against the commit
type with `with_custom_major_increment_regex` and `with_custom_minor_increment_regex`
(an invalid pattern raises `re.error`).

`Version` is an immutable dataclass with `parse`, `increment_major`, `increment_minor`,
`increment_patch` and `increment_prerelease`; `str(version)` gives it back as text.

## Conventional commits

```python
from cratebump.conventional import Commit, ConventionalCommitError

commit = Commit.parse("feat(api)!: drop v1")
commit.type, commit.scope, commit.description, commit.breaking
# ('feat', 'api', 'drop v1', True)

Commit.parse("just a message")   # raises ConventionalCommitError
```

## Manifests

```python
from cratebump.local_manifest import LocalManifest
from cratebump.versioning import Version

manifest = LocalManifest.find(None)          # search upwards from the current directory
manifest.set_package_version(Version.parse("0.2.0"))
manifest.gc_dep("old-dependency")            # drop feature activations of a removed dependency
manifest.write()
```

`LocalManifest` also offers `try_new` (absolute paths only), `dependency_tables`,
`workspace_dependency_table`, `version_is_inherited`, `workspace_version` and
`set_workspace_version`. The module functions `find_manifest`, `find_manifest_path`,
`workspace_manifest` and `canonical_local_manifest` locate manifest files.

`cratebump.manifest.Manifest.parse` reads manifest text held in memory; its `sections()`
method lists every dependency table as a `(DepTable, table)` pair, including
`target.<target>.*` tables. `DepTable` and `DepKind` live in `cratebump.deptable`.
Problems reading, parsing or writing raise `ManifestError`.

## Requirements

```python
from cratebump.requirement import upgrade_requirement
from cratebump.versioning import Version

upgrade_requirement("1.0", Version.parse("2.1.0"))    # "2.1"
upgrade_requirement("~1.2.3", Version.parse("1.4.0"))  # "~1.4.0"
upgrade_requirement("*", Version.parse("2.1.0"))      # None (matches everything)
upgrade_requirement(">=1.0", Version.parse("2.0.0"))  # raises UnsupportedRequirementError
```

`VersionReq.parse` and `Comparator` give access to the parsed requirement.

## Registries

```python
from pathlib import Path
from cratebump.registry import registry_url

registry_url(Path("Cargo.toml"), None)        # crates.io index unless replaced in config
registry_url(Path("Cargo.toml"), "my-registry")
```

The index comes from `CARGO_REGISTRIES_<NAME>_INDEX`, then from `.cargo/config` or
`.cargo/config.toml` in the manifest's directory and each parent, then from the Cargo home
(`cargo_home()`: `$CARGO_HOME` or `~/.cargo`). Source replacements (`replace-with`) are
followed. Failures raise `RegistryError`.

## Workspaces

```python
from cratebump.workspace import get_manifest_metadata, workspace_members

metadata = get_manifest_metadata("Cargo.toml")   # runs `cargo metadata --no-deps`
for package in workspace_members(metadata):
    print(package["name"], package["manifest_path"])
```

`cratebump.fake_package` builds small dictionaries shaped like `cargo metadata` packages for
use in tests: `FakePackage("a").with_dependencies([FakeDependency("b").dev()]).to_dict()`.

## Git

```python
from cratebump.git import Repo

repo = Repo("path/to/repo")      # raises GitError if the repository has no commit
repo.is_clean()                  # raises GitError listing uncommitted changes
repo.add_all_and_commit("feat: new file")
repo.tag("v1.0.0", "release")
repo.get_all_tags()
repo.tag_exists("v1.0.0")
```

`Repo` remembers the branch and remote it was opened on (`original_branch`,
`original_remote`) and runs any other command through `repo.git([...])`. Failed git
commands raise `cratebump.git.GitError` with the command's stdout and stderr.

## What it does not do

cratebump is a library only. It has no command-line program, and it does not generate
changelogs, open or update pull requests, create releases on a git host, or publish
packages to a registry.