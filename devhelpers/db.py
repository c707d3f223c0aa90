# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""MySQL client wrapper."""

import logging
import os
import subprocess
from typing import Protocol

from devhelpers.config import DatabaseSettings
from devhelpers.errors import DatabaseCommandFailed


logger = logging.getLogger(__name__)

DB_TIMEOUT = 60


def quote_identifier(name: str) -> str:
    """Backtick-quote a MySQL identifier, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


def recreate_statement(name: str) -> str:
    """SQL that drops ``name`` if present and creates it afresh."""
    ident = quote_identifier(name)
    return f"DROP DATABASE IF EXISTS {ident}; CREATE DATABASE {ident};"


class DatabaseClient(Protocol):
    """Interface for executing SQL against the configured server."""

    def execute(self, sql: str) -> None:
        """Run ``sql`` in one client session."""
        ...


class MysqlClient:
    """``DatabaseClient`` backed by the ``mysql`` command-line client.

    The password travels in ``MYSQL_PWD`` so it never appears in the
    process list or in logged command lines.
    """

    def __init__(self, settings: DatabaseSettings) -> None:
        self.settings = settings

    def _command(self, sql: str) -> list[str]:
        s = self.settings
        return [
            s.client,
            "-h",
            s.host,
            "-P",
            str(s.port),
            "-u",
            s.user,
            "-e",
            sql,
        ]

    def execute(self, sql: str) -> None:
        """Run SQL through the client.

        Raises:
            DatabaseCommandFailed: If the client is missing, times out or
                exits non-zero.
        """
        cmd = self._command(sql)
        env = os.environ.copy()
        if self.settings.password:
            env["MYSQL_PWD"] = self.settings.password
        logger.debug("Running: %s", " ".join(cmd))
        try:
            subprocess.run(
                cmd,
                env=env,
                capture_output=True,
                text=True,
                check=True,
                timeout=DB_TIMEOUT,
            )
        except FileNotFoundError as e:
            raise DatabaseCommandFailed(
                f"Cannot run {self.settings.client}: {e}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise DatabaseCommandFailed(
                f"{self.settings.client} timed out after {DB_TIMEOUT}s"
            ) from e
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else str(e)
            raise DatabaseCommandFailed(
                f"{self.settings.client} failed: {error_msg}"
            ) from e
