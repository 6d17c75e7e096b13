from __future__ import annotations

import abc
import asyncio
import datetime as dt
import decimal
from typing import Any, Dict, List, Mapping

import asyncpg

from .config import DatabaseConfig
from .db import Database
from .errors import ExecutionFailure
from .logging_utils import get_logger
from .models import QueryResult

logger = get_logger(__name__)


class SQLExecutor(abc.ABC):
    @abc.abstractmethod
    async def execute(self, sql: str) -> QueryResult:
        """Run one statement; raise ExecutionFailure with the engine message on error."""
        raise NotImplementedError


class QueryExecutor(SQLExecutor):
    def __init__(self, database: Database, cfg: DatabaseConfig):
        self._database = database
        self._cfg = cfg

    async def execute(self, sql: str) -> QueryResult:
        timeout_s = self._cfg.statement_timeout_ms / 1000
        logger.info("execute_sql", sql=sql)
        try:
            conn = await self._database.acquire()
        except asyncio.TimeoutError as exc:
            raise ExecutionFailure("Database query failed: timed out acquiring a connection") from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            raise ExecutionFailure(f"Database query failed: {exc}") from exc
        try:
            records = await asyncio.wait_for(self._fetch(conn, sql), timeout=timeout_s)
        except asyncio.TimeoutError as exc:
            raise ExecutionFailure("Database query failed: query execution timed out") from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            raise ExecutionFailure(f"Database query failed: {exc}") from exc
        finally:
            await self._database.release(conn)

        rows = [_to_row(record) for record in records[: self._cfg.row_limit]]
        if len(records) > len(rows):
            logger.warning("execute_sql_truncated", returned=len(records), kept=len(rows))
        return QueryResult.from_rows(rows)

    async def _fetch(self, conn: asyncpg.Connection, sql: str) -> List[asyncpg.Record]:
        if not self._cfg.read_only:
            return await conn.fetch(sql)
        async with conn.transaction(readonly=True):
            return await conn.fetch(sql)


def _to_row(record: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: to_scalar(value) for key, value in record.items()}


def to_scalar(value: Any) -> Any:
    """Coerce a driver value into a JSON scalar (str, int, float, bool or None)."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, decimal.Decimal):
        return float(value)
    if isinstance(value, (dt.date, dt.datetime, dt.time)):
        return value.isoformat()
    return str(value)


__all__ = ["SQLExecutor", "QueryExecutor", "to_scalar"]
