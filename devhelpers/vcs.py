# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Git client and working tree status probe.

Helpers talk to git only through the ``VcsClient`` protocol so tests can
substitute a fake.  ``GitClient`` is the real implementation; it shells
out to ``git`` in an explicit repository directory and never consults
the process working directory on its own.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from devhelpers.errors import (
    BranchDeleteRefused,
    FastForwardImpossible,
    GitCommandFailed,
    NotARepository,
)


logger = logging.getLogger(__name__)

#: Timeout for local, read-only git queries.
QUERY_TIMEOUT = 30
#: Timeout for commands that talk to the remote.
NETWORK_TIMEOUT = 300

# Substrings of git stderr that mean a fast-forward is not possible.
_NON_FF_MARKERS = (
    "not possible to fast-forward",
    "diverging branches",
    "have diverged",
)


@dataclass(frozen=True)
class RepoStatus:
    """Snapshot of the working tree state.

    Attributes:
        branch: Checked-out branch name, or None on a detached HEAD.
        dirty: True if there are uncommitted (or untracked) changes.
        ahead: Local commits not on the remote.
        behind: Remote commits not in the local branch.
        has_upstream: Whether the branch tracks a remote branch.
    """

    branch: str | None
    dirty: bool
    ahead: int
    behind: int
    has_upstream: bool

    @property
    def detached(self) -> bool:
        return self.branch is None

    @property
    def has_unpushed(self) -> bool:
        """True if the branch needs a push.

        A branch without an upstream always does, even when its commits
        already exist on the remote under another ref.
        """
        if self.branch is not None and not self.has_upstream:
            return True
        return self.ahead > 0


class VcsClient(Protocol):
    """Interface the helpers use to read and change repository state."""

    def status(self) -> RepoStatus:
        """Probe branch, cleanliness and ahead/behind counts."""
        ...

    def current_branch(self) -> str | None:
        """Return the checked-out branch, None when detached."""
        ...

    def branch_exists(self, name: str) -> bool:
        """Return True if a local branch ``name`` exists."""
        ...

    def checkout(self, name: str) -> None:
        """Switch the working copy to branch ``name``."""
        ...

    def delete_branch(self, name: str) -> None:
        """Delete local branch ``name`` without forcing."""
        ...

    def pull_ff_only(self, branch: str) -> None:
        """Fast-forward ``branch`` from the remote, failing otherwise."""
        ...

    def push(self, branch: str) -> None:
        """Push ``branch`` to the remote and set its upstream."""
        ...


def _stderr_of(err: subprocess.CalledProcessError) -> str:
    return err.stderr.strip() if err.stderr else str(err)


class GitClient:
    """``VcsClient`` backed by the git CLI.

    Attributes:
        repo_path: Directory git commands run in.
        remote: Remote used for pull, push and unpushed-commit detection.
    """

    def __init__(self, repo_path: Path, remote: str = "origin") -> None:
        self.repo_path = repo_path
        self.remote = remote

    def _run_git(
        self, *args: str, timeout: int = QUERY_TIMEOUT
    ) -> subprocess.CompletedProcess[str]:
        """Run git and return the completed process.

        Raises:
            subprocess.CalledProcessError: If git exits non-zero.
            GitCommandFailed: If git cannot be started or times out.
        """
        cmd = ["git", *args]
        logger.debug("Running: %s (cwd=%s)", " ".join(cmd), self.repo_path)
        try:
            return subprocess.run(
                cmd,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise GitCommandFailed(f"Cannot run git: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise GitCommandFailed(
                f"git {args[0]} timed out after {timeout}s"
            ) from e

    def _output(self, *args: str) -> str:
        """Run a git query and return stripped stdout.

        Raises:
            GitCommandFailed: On any failure.
        """
        try:
            return self._run_git(*args).stdout.strip()
        except subprocess.CalledProcessError as e:
            raise GitCommandFailed(
                f"git {' '.join(args)} failed: {_stderr_of(e)}"
            ) from e

    def ensure_repository(self) -> None:
        """Raise ``NotARepository`` unless repo_path is in a work tree."""
        if not self.repo_path.is_dir():
            raise NotARepository(f"Not a directory: {self.repo_path}")
        try:
            inside = self._run_git("rev-parse", "--is-inside-work-tree")
        except subprocess.CalledProcessError as e:
            raise NotARepository(
                f"Not a git repository: {self.repo_path}"
            ) from e
        if inside.stdout.strip() != "true":
            raise NotARepository(f"Not inside a work tree: {self.repo_path}")

    def current_branch(self) -> str | None:
        self.ensure_repository()
        try:
            result = self._run_git("symbolic-ref", "--quiet", "--short", "HEAD")
        except subprocess.CalledProcessError:
            # Exit status 1 with --quiet means HEAD is detached
            return None
        return result.stdout.strip()

    def is_dirty(self) -> bool:
        return bool(self._output("status", "--porcelain"))

    def upstream(self) -> str | None:
        """Return the upstream ref (e.g. ``origin/feature``) or None."""
        try:
            result = self._run_git(
                "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"
            )
        except subprocess.CalledProcessError:
            return None
        return result.stdout.strip() or None

    def _has_commits(self) -> bool:
        try:
            self._run_git("rev-parse", "--verify", "--quiet", "HEAD")
        except subprocess.CalledProcessError:
            return False
        return True

    def _ahead_behind(self, upstream: str | None) -> tuple[int, int]:
        if not self._has_commits():
            return 0, 0
        if upstream is None:
            # Without a tracking branch, every commit missing from all of
            # the remote's refs is unpushed
            ahead = self._output(
                "rev-list",
                "--count",
                "HEAD",
                "--not",
                f"--remotes={self.remote}",
            )
            return int(ahead), 0
        counts = self._output(
            "rev-list", "--left-right", "--count", "HEAD...@{u}"
        )
        ahead, behind = counts.split()
        return int(ahead), int(behind)

    def status(self) -> RepoStatus:
        branch = self.current_branch()
        dirty = self.is_dirty()
        upstream = self.upstream() if branch is not None else None
        ahead, behind = self._ahead_behind(upstream)
        status = RepoStatus(
            branch=branch,
            dirty=dirty,
            ahead=ahead,
            behind=behind,
            has_upstream=upstream is not None,
        )
        logger.debug("Repository status: %s", status)
        return status

    def branch_exists(self, name: str) -> bool:
        try:
            self._run_git(
                "rev-parse", "--verify", "--quiet", f"refs/heads/{name}"
            )
        except subprocess.CalledProcessError:
            return False
        return True

    def checkout(self, name: str) -> None:
        logger.info("Switching to %s", name)
        self._output("checkout", name)

    def delete_branch(self, name: str) -> None:
        logger.info("Deleting branch %s", name)
        try:
            self._run_git("branch", "-d", name)
        except subprocess.CalledProcessError as e:
            raise BranchDeleteRefused(
                f"Branch '{name}' was not deleted: {_stderr_of(e)}"
            ) from e

    def pull_ff_only(self, branch: str) -> None:
        logger.info("Fast-forwarding %s from %s", branch, self.remote)
        try:
            self._run_git(
                "pull",
                "--ff-only",
                self.remote,
                branch,
                timeout=NETWORK_TIMEOUT,
            )
        except subprocess.CalledProcessError as e:
            stderr = _stderr_of(e)
            if any(m in stderr.lower() for m in _NON_FF_MARKERS):
                raise FastForwardImpossible(
                    f"Cannot fast-forward {branch} from {self.remote}: {stderr}"
                ) from e
            raise GitCommandFailed(
                f"git pull {self.remote} {branch} failed: {stderr}"
            ) from e

    def push(self, branch: str) -> None:
        logger.info("Pushing %s to %s", branch, self.remote)
        try:
            self._run_git(
                "push", "-u", self.remote, branch, timeout=NETWORK_TIMEOUT
            )
        except subprocess.CalledProcessError as e:
            raise GitCommandFailed(
                f"git push {self.remote} {branch} failed: {_stderr_of(e)}"
            ) from e
