# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for devhelpers.helpers.make_db."""

import pytest

from devhelpers.errors import MissingRequiredArgument
from devhelpers.helpers.make_db import make_db


class TestMakeDb:
    def test_creates_database(self, fake_db) -> None:
        assert make_db(fake_db, "foo") == "foo"
        assert fake_db.databases == {"foo"}
        assert fake_db.statements == [
            "DROP DATABASE IF EXISTS `foo`; CREATE DATABASE `foo`;"
        ]

    def test_twice_leaves_one_database(self, fake_db) -> None:
        make_db(fake_db, "foo")
        make_db(fake_db, "foo")
        assert fake_db.databases == {"foo"}
        assert len(fake_db.statements) == 2
        assert fake_db.statements[0] == fake_db.statements[1]

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_missing_name(self, fake_db, name) -> None:
        with pytest.raises(MissingRequiredArgument) as exc_info:
            make_db(fake_db, name)
        assert exc_info.value.exit_code == 2
        assert fake_db.statements == []
