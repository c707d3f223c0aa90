# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""GitHub CLI wrapper.

All pull request and CI queries go through the ``CiClient`` protocol.
``GhClient`` implements it with the ``gh`` CLI, which must already be
authenticated (``gh auth login``).
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Protocol

from devhelpers.errors import (
    GhCommandFailed,
    StatusQueryFailed,
    UnresolvedPullRequest,
)
from devhelpers.gh.checks import (
    CheckLine,
    parse_check_json,
    parse_check_output,
)


logger = logging.getLogger(__name__)

GH_TIMEOUT = 60

_CHECK_FIELDS = "name,bucket,link"


class CiClient(Protocol):
    """Interface the helpers use to talk to the hosting platform."""

    def resolve_pr_number(self, branch: str | None) -> int:
        """Return the number of the PR whose head is ``branch``."""
        ...

    def fetch_checks(self, pr_number: int) -> list[CheckLine]:
        """Return the classified checks of a PR."""
        ...

    def open_create_flow(self, base: str | None = None) -> None:
        """Open the pull request creation UI."""
        ...


class GhClient:
    """``CiClient`` backed by the gh CLI.

    Attributes:
        repo_path: Directory gh runs in (selects the repository when
            ``repo`` is not set).
        repo: Optional ``OWNER/REPO`` passed as ``--repo``.
        command: gh executable.
    """

    def __init__(
        self,
        repo_path: Path,
        repo: str | None = None,
        command: str = "gh",
    ) -> None:
        self.repo_path = repo_path
        self.repo = repo
        self.command = command

    def _repo_args(self) -> list[str]:
        return ["--repo", self.repo] if self.repo else []

    def _run_gh(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run gh capturing output. Does not check the exit status.

        Raises:
            StatusQueryFailed: If gh cannot be started or times out.
        """
        cmd = [self.command, *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                timeout=GH_TIMEOUT,
            )
        except FileNotFoundError as e:
            raise StatusQueryFailed(f"Cannot run {self.command}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise StatusQueryFailed(
                f"{self.command} {args[0]} {args[1]} timed out "
                f"after {GH_TIMEOUT}s"
            ) from e

    def resolve_pr_number(self, branch: str | None) -> int:
        """Look up the PR for ``branch``.

        Without ``--repo`` gh resolves the current branch itself.  With
        ``--repo`` it needs the branch name as an explicit argument.

        Raises:
            UnresolvedPullRequest: If no PR exists for the branch.
            StatusQueryFailed: If the lookup itself fails.
        """
        args = ["pr", "view"]
        if self.repo:
            if branch is None:
                raise UnresolvedPullRequest(
                    "Cannot resolve a PR from a detached HEAD; "
                    "pass a PR number"
                )
            args.append(branch)
        args += [*self._repo_args(), "--json", "number"]

        result = self._run_gh(*args)
        if result.returncode != 0:
            stderr = result.stderr.strip()
            if "no pull requests found" in stderr.lower():
                target = branch or "the current branch"
                raise UnresolvedPullRequest(
                    f"No pull request found for {target}"
                )
            raise StatusQueryFailed(f"gh pr view failed: {stderr}")

        try:
            number = int(json.loads(result.stdout)["number"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StatusQueryFailed(f"Failed to parse gh output: {e}") from e
        logger.debug("Resolved PR #%d for %s", number, branch)
        return number

    def fetch_checks(self, pr_number: int) -> list[CheckLine]:
        """Fetch and classify the checks of a PR.

        Uses ``gh pr checks --json``.  Releases of gh that lack the flag
        get the tab separated listing instead.  gh exits 1 when checks
        failed and 8 when some are pending while still printing them, so
        only a non-zero exit without output counts as a failed query.

        Raises:
            StatusQueryFailed: If the query fails (network, auth, bad PR).
        """
        base_args = ["pr", "checks", str(pr_number), *self._repo_args()]
        result = self._run_gh(*base_args, "--json", _CHECK_FIELDS)
        stderr = result.stderr.strip()
        if result.returncode != 0 and "unknown flag: --json" in stderr:
            logger.debug("gh has no --json for pr checks, using text output")
            output = self._checked_output(pr_number, self._run_gh(*base_args))
            return parse_check_output(output)

        output = self._checked_output(pr_number, result)
        if not output.strip():
            return []
        try:
            entries = json.loads(output)
        except json.JSONDecodeError as e:
            raise StatusQueryFailed(
                f"Failed to parse gh pr checks output: {e}"
            ) from e
        if not isinstance(entries, list):
            raise StatusQueryFailed(
                f"Unexpected gh pr checks output: {type(entries).__name__}"
            )
        return parse_check_json(entries)

    def _checked_output(
        self, pr_number: int, result: subprocess.CompletedProcess[str]
    ) -> str:
        """Return stdout of a ``gh pr checks`` run, "" for no checks.

        Raises:
            StatusQueryFailed: If gh failed without printing checks.
        """
        if result.returncode == 0 or result.stdout.strip():
            return result.stdout

        stderr = result.stderr.strip()
        if "no checks reported" in stderr.lower():
            logger.debug("No checks reported for PR #%d", pr_number)
            return ""
        raise StatusQueryFailed(
            f"gh pr checks {pr_number} failed (exit {result.returncode}): "
            f"{stderr}"
        )

    def open_create_flow(self, base: str | None = None) -> None:
        """Run ``gh pr create --web`` attached to the terminal.

        Raises:
            GhCommandFailed: If gh cannot be started or exits non-zero.
        """
        cmd = [self.command, "pr", "create", "--web", *self._repo_args()]
        if base:
            cmd += ["--base", base]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            subprocess.run(cmd, cwd=self.repo_path, check=True)
        except FileNotFoundError as e:
            raise GhCommandFailed(f"Cannot run {self.command}: {e}") from e
        except subprocess.CalledProcessError as e:
            raise GhCommandFailed(
                f"gh pr create exited with status {e.returncode}"
            ) from e
