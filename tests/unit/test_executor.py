from __future__ import annotations

import asyncio
import datetime as dt
import decimal
import uuid
from contextlib import asynccontextmanager

import asyncpg
import pytest

from askdata.config import DatabaseConfig
from askdata.errors import ExecutionFailure
from askdata.executor import QueryExecutor, to_scalar


class FakeConnection:
    def __init__(self, rows=None, error: Exception | None = None, delay: float = 0.0):
        self.rows = rows or []
        self.error = error
        self.delay = delay
        self.readonly_transactions = 0

    @asynccontextmanager
    async def _transaction(self):
        self.readonly_transactions += 1
        yield

    def transaction(self, readonly: bool = False):
        assert readonly
        return self._transaction()

    async def fetch(self, sql: str):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.rows


class FakeDatabase:
    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.released = 0

    async def acquire(self):
        return self.conn

    async def release(self, conn) -> None:
        self.released += 1


def make_executor(conn: FakeConnection, **overrides) -> tuple[QueryExecutor, FakeDatabase]:
    cfg = DatabaseConfig(dsn="postgresql://placeholder", **overrides)
    database = FakeDatabase(conn)
    return QueryExecutor(database, cfg), database  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_execute_returns_columns_in_row_order() -> None:
    conn = FakeConnection(rows=[
        {"product_name": "MegaGadget", "cpc": decimal.Decimal("0.40")},
        {"product_name": "SuperWidget", "cpc": decimal.Decimal("0.35")},
    ])
    executor, database = make_executor(conn)

    result = await executor.execute("SELECT product_name, cpc FROM x")

    assert result.columns == ["product_name", "cpc"]
    assert result.rows[0] == {"product_name": "MegaGadget", "cpc": 0.4}
    assert conn.readonly_transactions == 1
    assert database.released == 1


@pytest.mark.asyncio
async def test_zero_rows_is_empty_result() -> None:
    executor, _ = make_executor(FakeConnection(rows=[]))

    result = await executor.execute("SELECT 1 WHERE false")

    assert result.columns == []
    assert result.rows == []


@pytest.mark.asyncio
async def test_rows_truncated_to_limit() -> None:
    executor, _ = make_executor(FakeConnection(rows=[{"n": i} for i in range(5)]), row_limit=2)

    result = await executor.execute("SELECT n FROM t")

    assert result.rows == [{"n": 0}, {"n": 1}]


@pytest.mark.asyncio
async def test_engine_error_becomes_execution_failure() -> None:
    executor, database = make_executor(FakeConnection(error=OSError("connection reset by peer")))

    with pytest.raises(ExecutionFailure, match="Database query failed: connection reset by peer"):
        await executor.execute("SELECT * FROM orders")
    assert database.released == 1


@pytest.mark.asyncio
async def test_timeout_becomes_execution_failure() -> None:
    executor, _ = make_executor(FakeConnection(rows=[{"n": 1}], delay=1.0), statement_timeout_ms=100)

    with pytest.raises(ExecutionFailure, match="timed out"):
        await executor.execute("SELECT pg_sleep(1)")


def test_to_scalar_converts_driver_types() -> None:
    ident = uuid.uuid4()
    assert to_scalar(decimal.Decimal("1.5")) == 1.5
    assert to_scalar(dt.date(2024, 7, 13)) == "2024-07-13"
    assert to_scalar(dt.datetime(2024, 7, 13, 8, 30)) == "2024-07-13T08:30:00"
    assert to_scalar(ident) == str(ident)
    assert to_scalar(True) is True
    assert to_scalar(None) is None
    assert to_scalar(3) == 3


class UnreachableDatabase(FakeDatabase):
    def __init__(self, error: Exception):
        super().__init__(FakeConnection())
        self.error = error

    async def acquire(self):
        raise self.error


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, message",
    [
        (asyncio.TimeoutError(), "Database query failed: timed out acquiring a connection"),
        (asyncpg.InterfaceError("pool is closing"), "Database query failed: pool is closing"),
        (ConnectionRefusedError("connection refused"), "Database query failed: connection refused"),
    ],
)
async def test_connection_errors_become_execution_failure(error: Exception, message: str) -> None:
    database = UnreachableDatabase(error)
    executor = QueryExecutor(database, DatabaseConfig(dsn="postgresql://placeholder"))  # type: ignore[arg-type]

    with pytest.raises(ExecutionFailure) as excinfo:
        await executor.execute("SELECT 1")

    assert str(excinfo.value).startswith(message)
    assert database.released == 0
