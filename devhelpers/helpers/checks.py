# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Summarize CI checks for a pull request."""

import logging

from devhelpers.gh.checks import CheckSummary
from devhelpers.gh.client import CiClient
from devhelpers.vcs import VcsClient


logger = logging.getLogger(__name__)


def check_summary(
    ci: CiClient,
    vcs: VcsClient,
    pr_number: int | None = None,
) -> CheckSummary:
    """Fetch and classify the checks of a pull request.

    Args:
        ci: Hosting platform client (already bound to a repo, if any).
        vcs: Repository client, used only to name the current branch
            when ``pr_number`` is omitted.
        pr_number: PR to inspect. Defaults to the current branch's PR.

    Raises:
        UnresolvedPullRequest: If no PR is associated with the branch.
        StatusQueryFailed: If the status query fails.
    """
    if pr_number is None:
        pr_number = ci.resolve_pr_number(vcs.current_branch())

    summary = CheckSummary(
        pr_number=pr_number, checks=ci.fetch_checks(pr_number)
    )
    logger.debug(
        "PR #%d: %d total, %d passed, %d failed, %d pending",
        pr_number,
        summary.total,
        summary.passed,
        summary.failed,
        summary.pending,
    )
    return summary
