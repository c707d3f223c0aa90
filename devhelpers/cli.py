# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""devhelpers CLI: multi-command entry point.

Provides ``devhelpers <command>`` plus a console script per helper so the
familiar shell names keep working (``origin-reset``, ``open-pr``,
``checks``, ``make-db``).

Subcommands:

* ``origin-reset`` - switch to the primary branch, delete the old one, pull
* ``open-pr``      - push if needed and open the PR creation flow
* ``checks``       - summarize CI checks for a pull request
* ``make-db``      - drop and recreate a local database
* ``status``       - show branch, dirty state and ahead/behind counts
* ``init``         - create a stub config file
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from collections.abc import Callable
from pathlib import Path

from devhelpers.config import STUB_CONFIG, Config, ConfigError, get_config_path
from devhelpers.db import MysqlClient
from devhelpers.errors import HelperError, MissingRequiredArgument
from devhelpers.gh.checks import CheckSummary, format_summary
from devhelpers.gh.client import GhClient
from devhelpers.helpers import (
    ask_yes_no,
    check_summary,
    make_db,
    open_pr,
    origin_reset,
)
from devhelpers.logging import configure_logging
from devhelpers.vcs import GitClient, RepoStatus


logger = logging.getLogger(__name__)

_USAGE = """\
usage: devhelpers <command> [args]

commands:
  origin-reset  Switch to the primary branch, delete the old one, pull
  open-pr       Push if needed and open the PR creation flow
  checks        Summarize CI checks for a pull request
  make-db       Drop and recreate a local database
  status        Show branch, dirty state and ahead/behind counts
  init          Create a stub config file

Run 'devhelpers <command> --help' for command-specific help.\
"""

#: Exit status after Ctrl-C.
_INTERRUPTED = 130

_PR_URL = re.compile(
    r"^https?://[^/]+/(?P<repo>[^/]+/[^/]+)/pull/(?P<number>\d+)/?$"
)


# ── Terminal colors ─────────────────────────────────────────────────


def _use_color() -> bool:
    """Color only on a TTY, unless ``NO_COLOR`` or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return sys.stdout.isatty()


class _Style:
    """ANSI escape helpers.  All methods return plain text when color is off."""

    def __init__(self, color: bool) -> None:
        self._on = color

    def _wrap(self, code: str, text: str) -> str:
        if not self._on:
            return text
        return f"\033[{code}m{text}\033[0m"

    def green(self, text: str) -> str:
        return self._wrap("32", text)

    def red(self, text: str) -> str:
        return self._wrap("31", text)

    def yellow(self, text: str) -> str:
        return self._wrap("33", text)

    def dim(self, text: str) -> str:
        return self._wrap("2", text)


# ── Shared plumbing ─────────────────────────────────────────────────


def _parser(prog: str, description: str) -> argparse.ArgumentParser:
    """Argument parser with the options every command accepts."""
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "-C",
        dest="repo_path",
        type=Path,
        default=Path.cwd(),
        metavar="PATH",
        help="Run as if started in PATH (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def _report(command: str, err: HelperError | ConfigError) -> int:
    """Print an error for the user and return its exit status."""
    print(f"{command}: {err}", file=sys.stderr)
    logger.debug("%s failed", command, exc_info=err)
    return err.exit_code


def _guarded(command: str, body: Callable[[], int]) -> int:
    """Run a command body, turning helper errors into exit statuses."""
    try:
        return body()
    except (HelperError, ConfigError) as e:
        return _report(command, e)


# ── origin-reset ────────────────────────────────────────────────────


def cmd_origin_reset(argv: list[str]) -> int:
    """Switch to the primary branch, delete the previous one and pull.

    Returns:
        0 on success, 1 if no primary branch exists, the previous branch
        has unmerged work or a fast-forward is impossible.
    """
    parser = _parser(
        "origin-reset",
        "Switch to the primary branch, delete the branch just left "
        "and fast-forward pull",
    )
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    def body() -> int:
        config = Config.load()
        vcs = GitClient(args.repo_path, remote=config.git.remote)
        result = origin_reset(vcs, config.git.primary_branches)
        s = _Style(_use_color())
        if result.deleted:
            print(f"Deleted branch {result.deleted}")
        print(s.green(f"On {result.primary}, up to date with {vcs.remote}"))
        return 0

    return _guarded("origin-reset", body)


# ── open-pr ─────────────────────────────────────────────────────────


def _always_yes(prompt: str) -> bool:
    return True


def cmd_open_pr(argv: list[str]) -> int:
    """Push unpushed commits and open the PR creation flow.

    Returns:
        0 on success, 1 if the user aborts or a command fails.
    """
    parser = _parser(
        "open-pr", "Push the current branch if needed and open a pull request"
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Continue without asking when the tree is dirty",
    )
    parser.add_argument("--base", help="Base branch for the pull request")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    def body() -> int:
        config = Config.load()
        vcs = GitClient(args.repo_path, remote=config.git.remote)
        ci = GhClient(args.repo_path, command=config.gh.command)
        confirm = _always_yes if args.yes else ask_yes_no
        result = open_pr(vcs, ci, confirm=confirm, base=args.base)
        if result.pushed:
            print(f"Pushed {result.branch} to {vcs.remote}")
        return 0

    return _guarded("open-pr", body)


# ── checks ──────────────────────────────────────────────────────────


def _parse_pr_number(value: str) -> int:
    """Accept ``123`` or ``#123``.

    Raises:
        ValueError: If value is not a positive integer.
    """
    number = int(value.removeprefix("#"))
    if number < 1:
        raise ValueError(f"invalid PR number: {value}")
    return number


def format_checks(summary: CheckSummary, style: _Style) -> str:
    """Color the verdict line of a summary."""
    text = format_summary(summary)
    head, sep, rest = text.partition("\n")
    if summary.failed:
        head = style.red(head)
    elif summary.pending:
        head = style.yellow(head)
    elif summary.all_passed:
        head = style.green(head)
    return head + sep + rest


def cmd_checks(argv: list[str]) -> int:
    """Print aggregated CI status for a pull request.

    Returns:
        0 if every check passed or none are reported, 1 if any failed or
        are pending, or if the PR cannot be resolved or queried.
    """
    parser = _parser("checks", "Summarize CI checks for a pull request")
    parser.add_argument(
        "pr",
        nargs="?",
        help="PR number or URL (default: current branch's PR)",
    )
    parser.add_argument("repo", nargs="?", help="Repository as OWNER/REPO")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    pr_arg, repo = args.pr, args.repo
    url = _PR_URL.match(pr_arg) if pr_arg is not None else None
    if url is not None:
        pr_arg = url.group("number")
        if repo is None:
            repo = url.group("repo")
    elif pr_arg is not None and "://" in pr_arg:
        parser.error(f"not a pull request URL: {pr_arg}")
    elif pr_arg is not None and repo is None and "/" in pr_arg:
        # Only a repository was given
        pr_arg, repo = None, pr_arg

    pr_number = None
    if pr_arg is not None:
        try:
            pr_number = _parse_pr_number(pr_arg)
        except ValueError:
            parser.error(f"invalid PR number: {pr_arg}")

    def body() -> int:
        config = Config.load()
        vcs = GitClient(args.repo_path, remote=config.git.remote)
        ci = GhClient(args.repo_path, repo=repo, command=config.gh.command)
        summary = check_summary(ci, vcs, pr_number)
        print(format_checks(summary, _Style(_use_color())))
        if summary.failed or summary.pending:
            return 1
        return 0

    return _guarded("checks", body)


# ── make-db ─────────────────────────────────────────────────────────


def cmd_make_db(argv: list[str]) -> int:
    """Drop and recreate a database.

    Returns:
        0 on success, 2 if the name is missing, 1 if the client fails.
    """
    parser = _parser("make-db", "Drop a database if it exists and create it")
    parser.add_argument("name", nargs="?", help="Database name")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    def body() -> int:
        if args.name is None:
            raise MissingRequiredArgument("usage: make-db <name>")
        config = Config.load()
        name = make_db(MysqlClient(config.database), args.name)
        print(f"Created database {name}")
        return 0

    return _guarded("make-db", body)


# ── status ──────────────────────────────────────────────────────────


def format_status(status: RepoStatus, style: _Style) -> str:
    """Render a RepoStatus as a short multi-line report."""
    branch = status.branch or style.yellow("(detached HEAD)")
    tree = style.red("dirty") if status.dirty else style.green("clean")
    lines = [f"Branch: {branch}", f"Tree:   {tree}"]
    if status.has_upstream:
        lines.append(f"Remote: {status.ahead} ahead, {status.behind} behind")
    elif status.branch is not None:
        lines.append(
            f"Remote: {style.dim('no upstream')}, "
            f"{status.ahead} unpushed commit(s)"
        )
    return "\n".join(lines)


def cmd_status(argv: list[str]) -> int:
    """Show the working tree status.

    Returns:
        0 on success, 1 if the path is not a git repository.
    """
    parser = _parser("status", "Show branch, dirty state and ahead/behind")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    def body() -> int:
        config = Config.load()
        vcs = GitClient(args.repo_path, remote=config.git.remote)
        print(format_status(vcs.status(), _Style(_use_color())))
        return 0

    return _guarded("status", body)


# ── init ────────────────────────────────────────────────────────────


def cmd_init(argv: list[str]) -> int:
    """Create a stub config file if none exists.

    Returns:
        0 on success, 1 if the file cannot be written.
    """
    parser = argparse.ArgumentParser(
        prog="devhelpers init", description="Create a stub config file"
    )
    parser.parse_args(argv)

    config_path = get_config_path()
    if config_path.exists():
        print(f"Config already exists: {config_path}")
        return 0

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(STUB_CONFIG)
    except OSError as e:
        print(f"init: Cannot write {config_path}: {e}", file=sys.stderr)
        return 1
    print(f"Created stub config: {config_path}")
    return 0


# ── CLI plumbing ────────────────────────────────────────────────────


_DISPATCH: dict[str, str] = {
    "origin-reset": "cmd_origin_reset",
    "open-pr": "cmd_open_pr",
    "checks": "cmd_checks",
    "make-db": "cmd_make_db",
    "status": "cmd_status",
    "init": "cmd_init",
}


def _run(command: str, argv: list[str]) -> int:
    """Dispatch to a command handler, mapping Ctrl-C to exit 130."""
    # Look up handler by name so tests can mock individual commands.
    import devhelpers.cli as _self

    handler = getattr(_self, _DISPATCH[command])
    try:
        return handler(argv)
    except KeyboardInterrupt:
        print(f"\n{command}: interrupted", file=sys.stderr)
        return _INTERRUPTED


def cli() -> None:
    """Entry point for ``devhelpers``.

    With no arguments prints usage information.
    """
    argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        print(_USAGE)
        sys.exit(0)

    if argv[0] not in _DISPATCH:
        print(f"devhelpers: unknown command '{argv[0]}'", file=sys.stderr)
        print(_USAGE, file=sys.stderr)
        sys.exit(2)

    sys.exit(_run(argv[0], argv[1:]))


def origin_reset_cli() -> None:
    """Entry point for the ``origin-reset`` console script."""
    sys.exit(_run("origin-reset", sys.argv[1:]))


def open_pr_cli() -> None:
    """Entry point for the ``open-pr`` console script."""
    sys.exit(_run("open-pr", sys.argv[1:]))


def checks_cli() -> None:
    """Entry point for the ``checks`` console script."""
    sys.exit(_run("checks", sys.argv[1:]))


def make_db_cli() -> None:
    """Entry point for the ``make-db`` console script."""
    sys.exit(_run("make-db", sys.argv[1:]))
