import sqlite3
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import partial

import pytest

from domesque.sql import (
    Row,
    bind_parameters,
    select,
    select_first,
    update,
    with_connection,
)


class Color(Enum):
    RED = 1
    BLUE = 2


@pytest.fixture
def connect(tmp_path):
    connect = partial(sqlite3.connect, tmp_path / "test.db")
    update(
        connect,
        "create table person (id integer primary key, name text, color text)",
    )
    return connect


def test_update_and_select(connect):
    sql = "insert into person (id, name, color) values (?, ?, ?)"
    assert update(connect, sql, 1, "James", Color.RED) == 1
    assert update(connect, sql, 2, "Jane", None) == 1

    result = select(
        connect,
        lambda row: (row["ID"], row["name"], row[2]),
        "select id, name, color from person order by id",
    )
    assert result == [(1, "James", "RED"), (2, "Jane", None)]


def test_update_row_count(connect):
    sql = "insert into person (id, name) values (?, ?)"
    for id_ in range(3):
        update(connect, sql, id_, "x")
    assert update(connect, "update person set name = ? where id > ?", "y", 0) == 2
    assert update(connect, "delete from person") == 3


def test_select_without_result(connect):
    assert select(connect, tuple, "select * from person") == []
    assert select_first(connect, tuple, "select * from person") is None


def test_select_first(connect):
    sql = "insert into person (id, name) values (?, ?)"
    update(connect, sql, 1, "James")
    update(connect, sql, 2, "Jane")

    name = select_first(
        connect, lambda row: row["name"], "select name from person order by id desc"
    )
    assert name == "Jane"


def test_failing_update_is_rolled_back(connect):
    sql = "insert into person (id, name) values (?, ?)"
    update(connect, sql, 1, "James")

    with pytest.raises(sqlite3.IntegrityError):
        update(connect, sql, 1, "Jane")
    with pytest.raises(sqlite3.OperationalError):
        update(connect, "insert into nothing values (?)", 1)

    assert select(connect, tuple, "select id, name from person") == [(1, "James")]


def test_connections_are_closed(connect):
    connections = []

    def tracking_connect():
        connection = connect()
        connections.append(connection)
        return connection

    select(tracking_connect, tuple, "select 1")
    update(tracking_connect, "delete from person")
    assert with_connection(tracking_connect, lambda c: 1) == 1

    assert len(connections) == 3
    for connection in connections:
        with pytest.raises(sqlite3.ProgrammingError):
            connection.cursor()


def test_bind_parameters():
    aware = datetime(2024, 1, 1, 12, tzinfo=timezone(timedelta(hours=2)))
    naive = datetime(2024, 1, 1, 12)

    result = bind_parameters((Color.BLUE, aware, naive, None, 1, "s"))

    assert result[0] == "BLUE"
    assert result[1] == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
    assert result[1].tzinfo is timezone.utc
    assert result[2] is naive
    assert result[3:] == (None, 1, "s")


def test_row():
    row = Row((1, "James"), {"id": 0, "name": 1})

    assert len(row) == 2
    assert list(row) == [1, "James"]
    assert row[0] == row["id"] == row["ID"] == 1
    assert row[-1] == row["Name"] == "James"
    assert row.get("missing") is None
    assert row.get("missing", 0) == 0
    assert list(row.keys()) == ["id", "name"]
    assert dict(row.items()) == {"id": 1, "name": "James"}

    with pytest.raises(KeyError):
        row["missing"]
    with pytest.raises(IndexError):
        row[2]
