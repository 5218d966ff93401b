from __future__ import annotations

from datetime import time, timedelta
from unittest.mock import MagicMock

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.mosque_community.mosque_community.core.exceptions import (
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from src.mosque_community.mosque_community.database.mysql_base import (
    db_cursor,
    normalize_mysql_time,
    translate_db_error,
)


@pytest.mark.parametrize(
    "errno, expected",
    [
        (errorcode.ER_DUP_ENTRY, ConflictError),
        (errorcode.ER_NO_REFERENCED_ROW_2, ValidationError),
        (errorcode.ER_ROW_IS_REFERENCED_2, ValidationError),
        (errorcode.CR_CONN_HOST_ERROR, InfrastructureError),
    ],
)
def test_translate_db_error(errno, expected):
    err = translate_db_error(mysql.connector.Error(msg="Duplicate entry 'ali' for key 'username'", errno=errno))
    assert isinstance(err, expected)
    assert "ali" not in err.message


def _factory():
    conn = MagicMock()
    factory = MagicMock()
    factory.connect.return_value = conn
    return factory, conn


def test_db_cursor_commits_on_success():
    factory, conn = _factory()
    with db_cursor(factory) as (c, cur):
        cur.execute("SELECT 1")

    conn.cursor.assert_called_once_with(dictionary=True)
    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()
    conn.close.assert_called_once()


def test_db_cursor_rolls_back_domain_errors():
    factory, conn = _factory()
    with pytest.raises(NotFoundError):
        with db_cursor(factory):
            raise NotFoundError("gone")

    conn.commit.assert_not_called()
    conn.rollback.assert_called_once()
    conn.close.assert_called_once()


def test_db_cursor_translates_connector_errors():
    factory, conn = _factory()
    with pytest.raises(ConflictError):
        with db_cursor(factory):
            raise mysql.connector.Error(msg="dup", errno=errorcode.ER_DUP_ENTRY)
    conn.rollback.assert_called_once()


def test_db_cursor_connect_failure():
    factory = MagicMock()
    factory.connect.side_effect = mysql.connector.Error(msg="refused", errno=errorcode.CR_CONN_HOST_ERROR)
    with pytest.raises(InfrastructureError):
        with db_cursor(factory):
            pass


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        (time(5, 30), time(5, 30)),
        (timedelta(hours=5, minutes=15), time(5, 15)),
        ("04:45", time(4, 45)),
        ("19:05:30", time(19, 5, 30)),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected
