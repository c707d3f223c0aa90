# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Recreate a local database."""

import logging

from devhelpers.db import DatabaseClient, recreate_statement
from devhelpers.errors import MissingRequiredArgument


logger = logging.getLogger(__name__)


def make_db(db: DatabaseClient, name: str | None) -> str:
    """Drop ``name`` if it exists and create it empty.

    Returns:
        The database name.

    Raises:
        MissingRequiredArgument: If name is missing or blank.
        DatabaseCommandFailed: If the client fails.
    """
    if name is None or not name.strip():
        raise MissingRequiredArgument("Database name is required")
    logger.info("Recreating database %s", name)
    db.execute(recreate_statement(name))
    return name
