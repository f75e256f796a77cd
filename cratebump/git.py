"""Running git in a repository directory and reading what it prints."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

_NO_UPSTREAM = "fatal: no upstream configured for branch"
_NO_COMMITS = (
    "fatal: ambiguous argument 'HEAD': unknown revision or path not in the working tree."
)
_NO_COMMITS_MESSAGE = "git repository does not contain any commit."

PathArg = str | os.PathLike[str]


class GitError(RuntimeError):
    """A git command failed or its output could not be used."""


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8").strip()
    except UnicodeDecodeError as err:
        raise GitError(f"cannot extract stderr: {err}") from err


def git_in_dir(directory: PathArg, args: Sequence[str]) -> str:
    """Run ``git -C directory args...`` and return its trimmed stdout.

    Raises GitError if git cannot be started or exits with a failure.
    """
    directory = os.fspath(directory)
    args = [arg.strip() for arg in args]
    try:
        result = subprocess.run(
            ["git", "-C", directory, *args], capture_output=True, check=False
        )
    except OSError as err:
        raise GitError(
            f"error while running git in directory `{directory!r}` with args `{args!r}`: {err}"
        ) from err
    logger.debug("git %r: output = %r", args, result)
    stdout = _decode(result.stdout)
    if result.returncode == 0:
        return stdout

    error = f"error while running git in directory `{directory!r}` with args `{args!r}`"
    stderr = _decode(result.stderr)
    if stdout or stderr:
        error += ":"
    if stdout:
        error += f"\n- stdout: {stdout}"
    if stderr:
        error += f"\n- stderr: {stderr}"
    raise GitError(error)


def _current_branch(directory: PathArg) -> str:
    try:
        return git_in_dir(directory, ["rev-parse", "--abbrev-ref", "HEAD"])
    except GitError as err:
        if _NO_COMMITS in str(err):
            raise GitError(_NO_COMMITS_MESSAGE) from err
        raise


def _current_remote_and_branch(directory: PathArg) -> tuple[str, str]:
    try:
        output = git_in_dir(
            directory,
            ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"],
        )
    except GitError as err:
        message = str(err)
        if _NO_UPSTREAM in message:
            branch = _current_branch(directory)
            logger.warning("no upstream configured for branch %s", branch)
            return "origin", branch
        if _NO_COMMITS in message:
            raise GitError(_NO_COMMITS_MESSAGE) from err
        raise
    remote, slash, branch = output.partition("/")
    if not slash:
        raise GitError("cannot determine current remote and branch")
    return remote, branch


def changed_files(output: str, keep: Callable[[str], bool]) -> list[str]:
    """File names from ``git status --porcelain`` output, for lines where ``keep`` is true."""
    stripped = (line.strip() for line in output.splitlines())
    return [line.rsplit(" ", 1)[-1] for line in stripped if keep(line)]


def is_file_ignored(repo_path: PathArg, file: PathArg) -> bool:
    """True if git would ignore ``file``."""
    try:
        git_in_dir(repo_path, ["check-ignore", "--no-index", os.fspath(file)])
    except GitError:
        return False
    return True


def is_file_committed(repo_path: PathArg, file: PathArg) -> bool:
    """True if ``file`` is tracked by git."""
    try:
        git_in_dir(repo_path, ["ls-files", "--error-unmatch", os.fspath(file)])
    except GitError:
        return False
    return True


class Repo:
    """A git repository, remembering the branch and remote it started on."""

    def __init__(self, directory: PathArg) -> None:
        """Open the repository; raises GitError if it holds no commit."""
        logger.debug("initializing directory %r", os.fspath(directory))
        try:
            remote, branch = _current_remote_and_branch(directory)
        except GitError as err:
            raise GitError(f"cannot determine current branch: {err}") from err
        self.directory = Path(directory)
        self.original_branch = branch
        self.original_remote = remote

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(directory={str(self.directory)!r}, "
            f"original_branch={self.original_branch!r}, "
            f"original_remote={self.original_remote!r})"
        )

    def git(self, args: Sequence[str]) -> str:
        """Run a git command in the repository directory."""
        return git_in_dir(self.directory, args)

    def is_clean(self) -> None:
        """Raise GitError if there are uncommitted changes."""
        changes = self.changes_except_typechanges()
        if changes:
            raise GitError(
                "the working directory of this project has uncommitted changes. "
                "If these files are both committed and in .gitignore, either delete them "
                "or remove them from .gitignore. Otherwise, please commit or stash these "
                f"changes:\n{changes!r}"
            )

    def checkout_new_branch(self, branch: str) -> None:
        self.git(["checkout", "-b", branch])

    def delete_branch_in_remote(self, branch: str) -> None:
        try:
            self.push(f":refs/heads/{branch}")
        except GitError as err:
            raise GitError(f"can't delete temporary branch {branch}: {err}") from err

    def add_all_and_commit(self, message: str) -> None:
        self.git(["add", "."])
        self.git(["commit", "-m", message])

    def changes(self, keep: Callable[[str], bool]) -> list[str]:
        """Changed files from ``git status --porcelain`` whose line satisfies ``keep``."""
        return changed_files(self.git(["status", "--porcelain"]), keep)

    def files_of_current_commit(self) -> set[Path]:
        """Files changed in the current commit."""
        output = self.git(["show", "--oneline", "--name-only", "--pretty=format:"])
        return {Path(line.strip()) for line in output.splitlines()}

    def changes_except_typechanges(self) -> list[str]:
        return self.changes(lambda line: not line.startswith("T "))

    def add(self, paths: Iterable[PathArg]) -> None:
        self.git(["add", *(os.fspath(path) for path in paths)])

    def commit(self, message: str) -> None:
        self.git(["commit", "-m", message])

    def commit_signed(self, message: str) -> None:
        self.git(["commit", "-s", "-m", message])

    def push(self, obj: str) -> None:
        self.git(["push", self.original_remote, obj])

    def fetch(self, obj: str) -> None:
        self.git(["fetch", self.original_remote, obj])

    def force_push(self, obj: str) -> None:
        # --force-with-lease refuses to overwrite remote work we have not seen.
        self.git(["push", self.original_remote, obj, "--force-with-lease"])

    def checkout_head(self) -> None:
        """Check out the branch the repository was on when opened."""
        self.checkout(self.original_branch)

    def stash_pop(self) -> None:
        self.git(["stash", "pop"])

    def checkout_last_commit_at_paths(self, paths: Iterable[PathArg]) -> None:
        """Check out the latest commit touching ``paths``."""
        try:
            commit = self._nth_commit_at_paths(1, paths)
        except GitError as err:
            raise GitError(f"failed to get message of last commit: {err}") from err
        self.checkout(commit)

    def checkout_previous_commit_at_paths(self, paths: Iterable[PathArg]) -> None:
        """Check out the second latest commit touching ``paths``."""
        try:
            commit = self._nth_commit_at_paths(2, paths)
        except GitError as err:
            raise GitError(f"failed to get message of previous commit: {err}") from err
        self.checkout(commit)

    def _nth_commit_at_paths(self, nth: int, paths: Iterable[PathArg]) -> str:
        args = ["log", "--format=%H", "-n", str(nth), "--", *(os.fspath(p) for p in paths)]
        commits = self.git(args).splitlines()
        if len(commits) < nth:
            raise GitError("not enough commits")
        commit = commits[nth - 1]
        logger.debug("nth_commit found: %s", commit)
        return commit

    def checkout(self, obj: str) -> None:
        try:
            self.git(["checkout", obj])
        except GitError as err:
            raise GitError(f"failed to checkout: {err}") from err

    def add_worktree(self, path: PathArg, obj: str) -> None:
        """Add a detached worktree at ``path`` checked out at ``obj``."""
        try:
            self.git(["worktree", "add", "--detach", os.fspath(path), obj])
        except GitError as err:
            raise GitError(f"failed to create git worktree: {err}") from err

    def remove_worktree(self, path: PathArg) -> None:
        try:
            self.git(["worktree", "remove", os.fspath(path)])
        except GitError as err:
            raise GitError(f"failed to remove worktree: {err}") from err

    def current_commit_message(self) -> str:
        return self.git(["log", "-1", "--pretty=format:%B"])

    def get_author_name(self, commit_hash: str) -> str:
        return self._commit_info("%an", commit_hash)

    def get_author_email(self, commit_hash: str) -> str:
        return self._commit_info("%ae", commit_hash)

    def get_committer_name(self, commit_hash: str) -> str:
        return self._commit_info("%cn", commit_hash)

    def get_committer_email(self, commit_hash: str) -> str:
        return self._commit_info("%ce", commit_hash)

    def _commit_info(self, info: str, commit_hash: str) -> str:
        return self.git(["log", "-1", f"--pretty=format:{info}", commit_hash])

    def current_commit_hash(self) -> str:
        """SHA1 of HEAD."""
        try:
            return self.git(["log", "-1", "--pretty=format:%H"])
        except GitError as err:
            raise GitError(f"can't determine current commit hash: {err}") from err

    def tag(self, name: str, message: str) -> str:
        """Create an annotated tag."""
        return self.git(["tag", "-m", message, name])

    def get_tag_commit(self, tag: str) -> str | None:
        """Commit hash the tag points at, or None."""
        try:
            return self.git(["rev-list", "-n", "1", tag])
        except GitError:
            return None

    def get_all_tags(self) -> list[str]:
        """All tags, in the order git lists them."""
        try:
            output = self.git(["tag", "--list"]).strip()
        except GitError:
            return []
        return output.splitlines() if output else []

    def is_ancestor(self, maybe_ancestor: str, descendant: str) -> bool:
        """True if ``maybe_ancestor`` comes before ``descendant``."""
        try:
            self.git(["merge-base", "--is-ancestor", maybe_ancestor, descendant])
        except GitError:
            return False
        return True

    def original_remote_url(self) -> str:
        return self.git(["config", "--get", f"remote.{self.original_remote}.url"])

    def tag_exists(self, tag: str) -> bool:
        try:
            output = self.git(["tag", "-l", tag])
        except GitError as err:
            raise GitError(f"cannot determine if git tag exists: {err}") from err
        return len(output.splitlines()) >= 1

    def get_branches_of_commit(self, commit_hash: str) -> list[str]:
        output = self.git(["branch", "--contains", commit_hash])
        return [line.split()[-1] for line in output.splitlines() if line.split()]