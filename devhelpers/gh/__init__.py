# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""GitHub CLI wrapper and CI check classification."""

from devhelpers.gh.checks import (
    CheckLine,
    CheckResult,
    CheckSummary,
    classify_indicator,
    format_summary,
    parse_check_json,
    parse_check_line,
    parse_check_output,
)
from devhelpers.gh.client import CiClient, GhClient


__all__ = [
    # Checks module
    "CheckLine",
    "CheckResult",
    "CheckSummary",
    "classify_indicator",
    "format_summary",
    "parse_check_json",
    "parse_check_line",
    "parse_check_output",
    # Client module
    "CiClient",
    "GhClient",
]
