# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Classification of ``gh pr checks`` output.

``gh pr checks --json`` reports a ``bucket`` word per check.  Releases of
gh without ``--json`` print one line per check instead.  Captured
(non-TTY) output is tab separated with the bucket word in the second
column::

    build\tpass\t1m2s\thttps://github.com/o/r/actions/runs/1/job/2
    lint\tfail\t12s\thttps://github.com/o/r/actions/runs/1/job/3

Terminal output instead starts each line with a glyph (``✓``, ``X``,
``*``, ``-``).  Both forms are accepted.  The indicator vocabulary belongs
to gh and may change, so anything not recognized is counted as pending
rather than dropped.
"""

from dataclasses import dataclass, field
from enum import Enum


class CheckResult(Enum):
    """Outcome of a single check."""

    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


_INDICATORS: dict[str, CheckResult] = {
    # Bucket words from non-TTY output
    "pass": CheckResult.PASSED,
    "skipping": CheckResult.PASSED,
    "fail": CheckResult.FAILED,
    "cancel": CheckResult.FAILED,
    "pending": CheckResult.PENDING,
    # Glyphs from TTY output
    "✓": CheckResult.PASSED,
    "✔": CheckResult.PASSED,
    "-": CheckResult.PASSED,
    "x": CheckResult.FAILED,
    "✗": CheckResult.FAILED,
    "✘": CheckResult.FAILED,
    "*": CheckResult.PENDING,
}


def classify_indicator(indicator: str) -> CheckResult:
    """Map a status indicator to a CheckResult, defaulting to PENDING."""
    return _INDICATORS.get(indicator.strip().lower(), CheckResult.PENDING)


@dataclass(frozen=True)
class CheckLine:
    """One parsed check.

    Attributes:
        name: Check name.
        indicator: The raw indicator (bucket word or glyph).
        result: Classified outcome.
        detail: The original output line, used in failure listings.
    """

    name: str
    indicator: str
    result: CheckResult
    detail: str


def parse_check_line(line: str) -> CheckLine | None:
    """Parse one output line. Returns None for blank lines."""
    detail = line.rstrip("\r\n")
    if not detail.strip():
        return None

    if "\t" in detail:
        fields = detail.split("\t")
        name = fields[0].strip()
        indicator = fields[1].strip() if len(fields) > 1 else ""
    else:
        indicator, _, name = detail.strip().partition(" ")
        name = name.strip()

    return CheckLine(
        name=name,
        indicator=indicator,
        result=classify_indicator(indicator),
        detail=detail,
    )


def parse_check_output(output: str) -> list[CheckLine]:
    """Parse the full ``gh pr checks`` output into CheckLines."""
    checks = []
    for line in output.splitlines():
        check = parse_check_line(line)
        if check is not None:
            checks.append(check)
    return checks


def parse_check_json(entries: list[dict]) -> list[CheckLine]:
    """Build CheckLines from ``gh pr checks --json name,bucket,link``.

    The bucket word is the indicator.  The detail line uses the same tab
    separated layout as the text listing.
    """
    checks = []
    for entry in entries:
        name = str(entry.get("name") or "unknown")
        bucket = str(entry.get("bucket") or "")
        link = str(entry.get("link") or "")
        fields = [part for part in (name, bucket, link) if part]
        checks.append(
            CheckLine(
                name=name,
                indicator=bucket,
                result=classify_indicator(bucket),
                detail="\t".join(fields),
            )
        )
    return checks


@dataclass
class CheckSummary:
    """Aggregate counts over the checks of one pull request."""

    pr_number: int
    checks: list[CheckLine] = field(default_factory=list)

    def _count(self, result: CheckResult) -> int:
        return sum(1 for c in self.checks if c.result == result)

    @property
    def total(self) -> int:
        return len(self.checks)

    @property
    def passed(self) -> int:
        return self._count(CheckResult.PASSED)

    @property
    def failed(self) -> int:
        return self._count(CheckResult.FAILED)

    @property
    def pending(self) -> int:
        return self._count(CheckResult.PENDING)

    @property
    def failed_checks(self) -> list[CheckLine]:
        return [c for c in self.checks if c.result == CheckResult.FAILED]

    @property
    def all_passed(self) -> bool:
        """True when every check passed. False for an empty list."""
        return self.total > 0 and self.passed == self.total


def format_summary(summary: CheckSummary) -> str:
    """Render the one-line verdict plus failing detail lines.

    Failures take precedence over pending checks.
    """
    pr = f"PR #{summary.pr_number}"
    if summary.total == 0:
        return f"{pr}: No checks reported"
    if summary.all_passed:
        return f"{pr}: All {summary.total} checks passed"
    if summary.failed:
        lines = [
            f"{pr}: {summary.failed} failed, {summary.passed} passed, "
            f"{summary.pending} pending"
        ]
        lines.extend(f"  {c.detail}" for c in summary.failed_checks)
        return "\n".join(lines)
    return (
        f"{pr}: {summary.pending} pending, {summary.passed} passed "
        f"of {summary.total}"
    )
