# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Helper operations, one module per command."""

from devhelpers.helpers.checks import check_summary
from devhelpers.helpers.make_db import make_db
from devhelpers.helpers.open_pr import OpenPrResult, ask_yes_no, open_pr
from devhelpers.helpers.origin_reset import (
    ResetResult,
    find_primary_branch,
    origin_reset,
)


__all__ = [
    "OpenPrResult",
    "ResetResult",
    "ask_yes_no",
    "check_summary",
    "find_primary_branch",
    "make_db",
    "open_pr",
    "origin_reset",
]
