# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Return to the primary branch and clean up the branch just left."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from devhelpers.config import DEFAULT_PRIMARY_BRANCHES
from devhelpers.errors import NoPrimaryBranchFound
from devhelpers.vcs import VcsClient


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResetResult:
    """Outcome of ``origin_reset``.

    Attributes:
        primary: Branch now checked out.
        previous: Branch checked out before, None if HEAD was detached.
        deleted: The deleted branch, if any.
    """

    primary: str
    previous: str | None
    deleted: str | None


def find_primary_branch(
    vcs: VcsClient, candidates: Sequence[str] = DEFAULT_PRIMARY_BRANCHES
) -> str:
    """Return the first candidate that exists as a local branch.

    Raises:
        NoPrimaryBranchFound: If none of them exist.
    """
    for name in candidates:
        if vcs.branch_exists(name):
            return name
    raise NoPrimaryBranchFound(
        f"No primary branch found (tried {', '.join(candidates)})"
    )


def origin_reset(
    vcs: VcsClient, candidates: Sequence[str] = DEFAULT_PRIMARY_BRANCHES
) -> ResetResult:
    """Switch to the primary branch, delete the old one, fast-forward.

    The primary branch is resolved before anything is switched, so a
    missing primary leaves the working copy untouched.  The branch left
    behind is deleted with ``git branch -d`` unless it is itself a primary
    branch name; git's refusal to drop unmerged work stops the reset
    before the pull.

    Raises:
        NotARepository: If the client is not pointed at a work tree.
        NoPrimaryBranchFound: If no candidate branch exists.
        BranchDeleteRefused: If the previous branch has unmerged work.
        FastForwardImpossible: If the pull would require a merge.
    """
    previous = vcs.current_branch()
    primary = find_primary_branch(vcs, candidates)

    if previous != primary:
        vcs.checkout(primary)

    deleted = None
    if previous is not None and previous not in candidates:
        vcs.delete_branch(previous)
        deleted = previous
    elif previous is not None and previous != primary:
        logger.info("Keeping %s (primary branch name)", previous)

    vcs.pull_ff_only(primary)
    return ResetResult(primary=primary, previous=previous, deleted=deleted)
