"""Version bumping from conventional commits, Cargo manifest editing, registry lookup and git helpers."""

__version__ = "0.1.0"

__all__ = [
    "conventional",
    "deptable",
    "fake_package",
    "git",
    "increment",
    "local_manifest",
    "manifest",
    "registry",
    "requirement",
    "versioning",
    "workspace",
]