# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Push the current branch if needed and open the PR creation flow."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from devhelpers.errors import GitCommandFailed, UserAborted
from devhelpers.gh.client import CiClient
from devhelpers.vcs import VcsClient


logger = logging.getLogger(__name__)

DIRTY_PROMPT = "Working tree has uncommitted changes. Continue anyway? [y/N] "

_YES = frozenset({"y", "yes"})


def ask_yes_no(prompt: str) -> bool:
    """Block on stdin until the user answers; only y/yes confirms."""
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in _YES


@dataclass(frozen=True)
class OpenPrResult:
    """Outcome of ``open_pr``."""

    branch: str
    pushed: bool


def open_pr(
    vcs: VcsClient,
    ci: CiClient,
    confirm: Callable[[str], bool] = ask_yes_no,
    base: str | None = None,
) -> OpenPrResult:
    """Open a pull request for the current branch.

    Args:
        vcs: Repository client.
        ci: Hosting platform client.
        confirm: Asked before continuing with a dirty tree.
        base: Optional base branch for the PR.

    Raises:
        UserAborted: If the user declines the dirty-tree prompt.
        GitCommandFailed: If HEAD is detached or the push fails.
    """
    status = vcs.status()
    if status.branch is None:
        raise GitCommandFailed("HEAD is detached; check out a branch first")

    if status.dirty and not confirm(DIRTY_PROMPT):
        raise UserAborted("Aborted: uncommitted changes")

    pushed = False
    if status.has_unpushed:
        if status.has_upstream:
            logger.info(
                "%s has %d unpushed commit(s)", status.branch, status.ahead
            )
        else:
            logger.info("%s has no upstream", status.branch)
        vcs.push(status.branch)
        pushed = True

    ci.open_create_flow(base=base)
    return OpenPrResult(branch=status.branch, pushed=pushed)
