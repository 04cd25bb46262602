"""Portable SQL functions used by the ranking queries.

PostgreSQL is the production database and SQLite backs the test suite; the
scoring expressions need the same arithmetic on both.
"""
from __future__ import annotations

import math
import sqlite3
from typing import Any

from sqlalchemy import Float, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


class hours_between(FunctionElement):
    """Fractional hours from ``start`` to ``end``: ``hours_between(end, start)``."""

    type = Float()
    name = "hours_between"
    inherit_cache = True


class greatest(FunctionElement):
    """Largest of its arguments."""

    type = Float()
    name = "greatest"
    inherit_cache = True


@compiles(hours_between)
def _hours_between_default(element: hours_between, compiler: Any, **kw: Any) -> str:
    end, start = list(element.clauses)
    return "(EXTRACT(EPOCH FROM (%s - %s)) / 3600.0)" % (
        compiler.process(end, **kw),
        compiler.process(start, **kw),
    )


@compiles(hours_between, "sqlite")
def _hours_between_sqlite(element: hours_between, compiler: Any, **kw: Any) -> str:
    end, start = list(element.clauses)
    return "((julianday(%s) - julianday(%s)) * 24.0)" % (
        compiler.process(end, **kw),
        compiler.process(start, **kw),
    )


@compiles(greatest)
def _greatest_default(element: greatest, compiler: Any, **kw: Any) -> str:
    return "GREATEST(%s)" % compiler.process(element.clauses, **kw)


@compiles(greatest, "sqlite")
def _greatest_sqlite(element: greatest, compiler: Any, **kw: Any) -> str:
    # sqlite's multi-argument max() is the scalar form, not the aggregate
    return "max(%s)" % compiler.process(element.clauses, **kw)


def _power(base: float | None, exponent: float | None) -> float | None:
    if base is None or exponent is None:
        return None
    return math.pow(base, exponent)


@event.listens_for(Engine, "connect")
def _register_sqlite_functions(dbapi_connection: Any, connection_record: Any) -> None:
    """Give SQLite connections the ``power`` function PostgreSQL has built in."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("power", 2, _power, deterministic=True)
