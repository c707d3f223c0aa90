# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Logging setup for the CLI with secret redaction.

Helper output meant for the user is printed directly; log records carry
diagnostics (commands run, tool stderr) and go to stderr.

Usage:
    # In the CLI entry point
    from devhelpers.logging import configure_logging
    configure_logging(verbose=args.verbose)

    # In library modules
    import logging
    logger = logging.getLogger(__name__)
    logger.debug("Running: %s", cmd)
"""

import logging
import re
import sys
from typing import ClassVar


DEFAULT_FORMAT = "%(levelname)s: %(name)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

REDACTED = "[REDACTED]"


class SecretFilter(logging.Filter):
    """Logging filter that replaces registered secrets with ``[REDACTED]``.

    The registry is shared by every instance, so a password registered
    while loading config is hidden from all handlers.
    """

    _secrets: ClassVar[set[str]] = set()
    _pattern: ClassVar[re.Pattern[str] | None] = None

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact secrets in the message and its string arguments.

        Returns:
            Always True; records are rewritten, never dropped.
        """
        pattern = self._pattern
        if pattern is None:
            return True
        record.msg = pattern.sub(REDACTED, str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(
                pattern.sub(REDACTED, arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True

    @classmethod
    def register_secret(cls, secret: str | None) -> None:
        """Register a value to redact. Empty values are ignored."""
        if not secret:
            return
        cls._secrets.add(secret)
        # Longest first so overlapping secrets are fully covered
        ordered = sorted(cls._secrets, key=len, reverse=True)
        cls._pattern = re.compile("|".join(re.escape(s) for s in ordered))

    @classmethod
    def clear_secrets(cls) -> None:
        """Forget all registered secrets. For tests."""
        cls._secrets.clear()
        cls._pattern = None


def configure_logging(verbose: bool = False) -> None:
    """Configure the ``devhelpers`` logger hierarchy.

    Args:
        verbose: Log at DEBUG with timestamps instead of WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(VERBOSE_FORMAT if verbose else DEFAULT_FORMAT)
    )
    handler.addFilter(SecretFilter())

    root = logging.getLogger("devhelpers")
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.propagate = False
