# Copyright (C) 2019-'26  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Helpers to execute parameterized SQL statements with any :pep:`249` (DB-API 2.0)
compliant driver.

Each call obtains a fresh connection from a *connection provider*, a callable without
arguments, and closes it before returning. Statements that alter data are committed
immediately, as if the connection were in auto-commit mode:

>>> connect = partial(sqlite3.connect, "people.db")  # doctest: +SKIP
>>> sql = "insert into person (id, name) values (?, ?)"
>>> update(connect, sql, 1, "James")  # doctest: +SKIP
1
>>> sql = "select * from person"
>>> select_first(connect, lambda row: row["name"], sql)  # doctest: +SKIP
'James'

The placeholders in statements must follow the driver's ``paramstyle``. Exceptions
that the driver raises are propagated as they are.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from contextlib import closing
from datetime import datetime, timezone
from enum import Enum
from functools import singledispatch
from typing import Any, Optional, TypeAlias, TypeVar


logger = logging.getLogger(__name__)


T = TypeVar("T")

ConnectionProvider: TypeAlias = Callable[[], Any]


class Row(Sequence[Any]):
    """
    A result row whose values can be addressed by position or by the
    case-insensitive column name.
    """

    __slots__ = ("_columns", "_values")

    def __init__(self, values: Iterable[Any], columns: Mapping[str, int]):
        self._values = tuple(values)
        self._columns = columns

    def __getitem__(self, item):
        if isinstance(item, str):
            try:
                index = self._columns[item.casefold()]
            except KeyError:
                raise KeyError(item) from None
            return self._values[index]
        return self._values[item]

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({dict(self.items())})>"

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default

    def items(self) -> Iterator[tuple[str, Any]]:
        for name, index in self._columns.items():
            yield name, self._values[index]

    def keys(self) -> Iterator[str]:
        yield from self._columns


RowMapper: TypeAlias = Callable[[Row], T]


# parameter binding


@singledispatch
def bind_value(value: Any) -> Any:
    """
    Converts a statement argument to a value that drivers can bind. Further types can
    be registered, e.g. ``bind_value.register(Decimal, float)``.
    """
    return value


@bind_value.register
def _(value: Enum) -> str:
    return value.name


@bind_value.register
def _(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def bind_parameters(args: Iterable[Any]) -> tuple[Any, ...]:
    """
    Converts statement arguments for binding. :obj:`None` is bound as SQL ``NULL``,
    enumeration members by their name and timezone aware timestamps as UTC.
    """
    return tuple(bind_value(x) for x in args)


# statement execution


def with_connection(connect: ConnectionProvider, callback: Callable[[Any], T]) -> T:
    """
    Calls ``callback`` with a connection from ``connect`` and closes the connection
    afterwards.
    """
    with closing(connect()) as connection:
        return callback(connection)


def select(
    connect: ConnectionProvider, mapper: RowMapper[T], sql: str, *args: Any
) -> list[T]:
    """
    Executes a query and maps each result row with ``mapper``.

    :param connect: The connection provider.
    :param mapper: A callable that receives a :class:`Row` and returns a value.
    :param sql: The query with placeholders.
    :param args: The arguments that are bound to the placeholders in order.
    :returns: The mapped values in the order of the result rows.
    """

    def query(connection) -> list[T]:
        with closing(connection.cursor()) as cursor:
            logger.debug("Executing query %r with %d arguments.", sql, len(args))
            cursor.execute(sql, bind_parameters(args))
            columns = {
                column[0].casefold(): index
                for index, column in enumerate(cursor.description or ())
            }
            return [
                mapper(Row(values, columns))
                for values in iter(cursor.fetchone, None)
            ]

    return with_connection(connect, query)


def select_first(
    connect: ConnectionProvider, mapper: RowMapper[T], sql: str, *args: Any
) -> Optional[T]:
    """
    The same as :func:`select`, but returns only the first mapped value or
    :obj:`None` if the query has no result.
    """
    results = select(connect, mapper, sql, *args)
    return results[0] if results else None


def update(connect: ConnectionProvider, sql: str, *args: Any) -> int:
    """
    Executes a data or schema altering statement and commits it.

    :param connect: The connection provider.
    :param sql: The statement with placeholders.
    :param args: The arguments that are bound to the placeholders in order.
    :returns: The number of affected rows as reported by the driver, ``-1`` when it
              can't be determined.
    """

    def execute(connection) -> int:
        with closing(connection.cursor()) as cursor:
            logger.debug("Executing statement %r with %d arguments.", sql, len(args))
            try:
                cursor.execute(sql, bind_parameters(args))
            except Exception:
                connection.rollback()
                raise
            connection.commit()
            return cursor.rowcount

    return with_connection(connect, execute)


__all__ = (
    "ConnectionProvider",
    "RowMapper",
    Row.__name__,
    bind_parameters.__name__,
    bind_value.__name__,
    select.__name__,
    select_first.__name__,
    update.__name__,
    with_connection.__name__,
)
