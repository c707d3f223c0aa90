# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Exceptions raised by the helpers.

Every helper failure derives from ``HelperError``.  The CLI catches it at
the command boundary, prints the message and exits with ``exit_code``.
"""


class HelperError(Exception):
    """Base exception for helper failures."""

    exit_code = 1


class NotARepository(HelperError):
    """Path is not inside a git work tree."""


class GitCommandFailed(HelperError):
    """A git invocation failed for a reason with no dedicated error."""


class NoPrimaryBranchFound(HelperError):
    """None of the primary branch candidates exist locally."""


class BranchDeleteRefused(HelperError):
    """``git branch -d`` refused to delete a branch with unmerged work."""


class FastForwardImpossible(HelperError):
    """Local and remote histories diverged; a fast-forward is not possible."""


class UserAborted(HelperError):
    """User declined an interactive confirmation."""


class UnresolvedPullRequest(HelperError):
    """No pull request is associated with the current branch."""


class StatusQueryFailed(HelperError):
    """The CI status query itself failed (network, auth, missing gh)."""


class GhCommandFailed(HelperError):
    """A gh invocation other than the status query failed."""


class DatabaseCommandFailed(HelperError):
    """The database client exited with an error."""


class MissingRequiredArgument(HelperError):
    """A required command-line argument was omitted."""

    exit_code = 2
