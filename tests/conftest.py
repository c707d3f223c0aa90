# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared pytest fixtures: throwaway git repositories and fake clients."""

import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from devhelpers.errors import (
    BranchDeleteRefused,
    FastForwardImpossible,
    UnresolvedPullRequest,
)
from devhelpers.gh.checks import CheckLine, parse_check_output
from devhelpers.logging import SecretFilter
from devhelpers.vcs import RepoStatus


GitRunner = Callable[..., str]


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Point config at a missing file and skip .env loading."""
    monkeypatch.setenv("DEVHELPERS_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.setattr("devhelpers.config._dotenv_loaded", True)
    monkeypatch.setenv("NO_COLOR", "1")
    SecretFilter.clear_secrets()


@pytest.fixture
def git() -> GitRunner:
    """Return a function running git in a directory and returning stdout."""

    def run(repo: Path, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
        )
        return result.stdout.strip()

    return run


@pytest.fixture
def git_repo(tmp_path: Path, git: GitRunner) -> Path:
    """Create a repository on ``main`` tracking a bare ``origin``.

    Returns:
        Path to the work tree.
    """
    remote = tmp_path / "remote.git"
    work = tmp_path / "work"
    work.mkdir()

    git(tmp_path, "init", "--bare", str(remote))
    git(work, "init")
    git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    git(work, "config", "user.name", "Test User")
    git(work, "config", "user.email", "test@example.com")
    git(work, "config", "commit.gpgsign", "false")

    (work / "README.md").write_text("# Test Repo\n")
    git(work, "add", "README.md")
    git(work, "commit", "-m", "Initial commit")
    git(work, "remote", "add", "origin", str(remote))
    git(work, "push", "-u", "origin", "main")
    git(remote, "symbolic-ref", "HEAD", "refs/heads/main")
    return work


@pytest.fixture
def other_clone(tmp_path: Path, git_repo: Path, git: GitRunner) -> Path:
    """Second clone of the ``git_repo`` remote, for upstream changes."""
    other = tmp_path / "other"
    git(tmp_path, "clone", str(tmp_path / "remote.git"), str(other))
    git(other, "config", "user.name", "Other User")
    git(other, "config", "user.email", "other@example.com")
    git(other, "config", "commit.gpgsign", "false")
    return other


@pytest.fixture
def commit(git: GitRunner) -> Callable[[Path, str], None]:
    """Return a function that commits a new file in a repository."""

    def make_commit(repo: Path, filename: str) -> None:
        (repo / filename).write_text(f"{filename}\n")
        git(repo, "add", filename)
        git(repo, "commit", "-m", f"Add {filename}")

    return make_commit


class FakeVcs:
    """In-memory ``VcsClient`` that records mutating calls."""

    def __init__(self) -> None:
        self.branches: set[str] = {"main"}
        self.current: str | None = "main"
        self.dirty = False
        self.ahead = 0
        self.behind = 0
        self.has_upstream = True
        self.unmerged: set[str] = set()
        self.diverged = False
        self.calls: list[tuple[str, ...]] = []

    def status(self) -> RepoStatus:
        return RepoStatus(
            branch=self.current,
            dirty=self.dirty,
            ahead=self.ahead,
            behind=self.behind,
            has_upstream=self.has_upstream,
        )

    def current_branch(self) -> str | None:
        return self.current

    def branch_exists(self, name: str) -> bool:
        return name in self.branches

    def checkout(self, name: str) -> None:
        self.calls.append(("checkout", name))
        self.current = name

    def delete_branch(self, name: str) -> None:
        if name in self.unmerged:
            raise BranchDeleteRefused(f"{name} is not fully merged")
        self.calls.append(("delete", name))
        self.branches.discard(name)

    def pull_ff_only(self, branch: str) -> None:
        if self.diverged:
            raise FastForwardImpossible(f"{branch} diverged")
        self.calls.append(("pull", branch))

    def push(self, branch: str) -> None:
        self.calls.append(("push", branch))
        self.ahead = 0
        self.has_upstream = True


class FakeCi:
    """In-memory ``CiClient``."""

    def __init__(self) -> None:
        self.prs: dict[str, int] = {}
        self.checks: dict[int, str] = {}
        self.query_error: Exception | None = None
        self.calls: list[tuple[str, ...]] = []

    def resolve_pr_number(self, branch: str | None) -> int:
        self.calls.append(("resolve", str(branch)))
        if branch not in self.prs:
            raise UnresolvedPullRequest(f"No pull request found for {branch}")
        return self.prs[branch]

    def fetch_checks(self, pr_number: int) -> list[CheckLine]:
        self.calls.append(("checks", str(pr_number)))
        if self.query_error is not None:
            raise self.query_error
        return parse_check_output(self.checks.get(pr_number, ""))

    def open_create_flow(self, base: str | None = None) -> None:
        self.calls.append(("create", str(base)))


class FakeDb:
    """``DatabaseClient`` that applies drop/create statements to a set."""

    def __init__(self) -> None:
        self.databases: set[str] = set()
        self.statements: list[str] = []

    def execute(self, sql: str) -> None:
        self.statements.append(sql)
        for statement in filter(None, (s.strip() for s in sql.split(";"))):
            name = statement.rsplit(" ", 1)[-1].strip("`").replace("``", "`")
            if statement.startswith("DROP DATABASE IF EXISTS"):
                self.databases.discard(name)
            elif statement.startswith("CREATE DATABASE"):
                if name in self.databases:
                    raise AssertionError(f"database exists: {name}")
                self.databases.add(name)


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def fake_ci() -> FakeCi:
    return FakeCi()


@pytest.fixture
def fake_db() -> FakeDb:
    return FakeDb()
