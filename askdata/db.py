from __future__ import annotations

import asyncpg
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import DatabaseConfig
from .logging_utils import get_logger

logger = get_logger(__name__)


class Database:
    """Owns the asyncpg pool; built once per process and handed to the executor."""

    def __init__(self, cfg: DatabaseConfig):
        self._cfg = cfg
        self._pool: asyncpg.pool.Pool | None = None

    async def connect(self) -> None:
        if self._pool is not None:
            return
        retry_cfg = self._cfg.connect_retry
        async for attempt in AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(retry_cfg.attempts),
            wait=wait_exponential(multiplier=retry_cfg.backoff_seconds, max=10),
            retry=retry_if_exception_type((OSError, asyncpg.PostgresError)),
        ):
            with attempt:
                logger.info("database_connect", attempt=attempt.retry_state.attempt_number)
                self._pool = await asyncpg.create_pool(
                    dsn=self._cfg.dsn,
                    min_size=self._cfg.min_pool_size,
                    max_size=self._cfg.max_pool_size,
                )

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def acquire(self) -> asyncpg.Connection:
        if self._pool is None:
            await self.connect()
        assert self._pool is not None
        return await self._pool.acquire()

    async def release(self, conn: asyncpg.Connection) -> None:
        if self._pool is None:
            return
        await self._pool.release(conn)


__all__ = ["Database"]
