"""
Base repository with connection management and schema initialization.

All store repositories inherit from this class.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, List, Optional

import duckdb

from core.exceptions import QueryTimeoutError, ReportingStoreError
from core.observability import get_logger, metrics

logger = get_logger(__name__)

DEFAULT_QUERY_TIMEOUT = 30.0  # seconds


class BaseRepository:
    """
    Base repository with DuckDB connection management.

    Blocking DuckDB calls run on a single-worker thread pool so the event
    loop stays free; the lock serializes access because a DuckDB
    connection is not thread-safe.

    Usage:
        class ReportsRepository(BaseRepository):
            SCHEMA_SQL = "CREATE TABLE IF NOT EXISTS ..."

            async def get_report(self, site_id: int):
                return await self._fetch_one("SELECT * FROM reports WHERE site_id = ?", [site_id])
    """

    SCHEMA_SQL: str = ""
    store_name: str = "store"

    def __init__(self, db_path: Path, query_timeout: float = DEFAULT_QUERY_TIMEOUT):
        self.db_path = Path(db_path)
        self.query_timeout = query_timeout
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = asyncio.Lock()
        self._total_queries = 0

    async def connect(self) -> None:
        """Initialize database connection, schema, and thread pool."""
        async with self._lock:
            if self._connection is not None:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                self._connection = duckdb.connect(str(self.db_path))
                if self.SCHEMA_SQL:
                    self._connection.execute(self.SCHEMA_SQL)
            except duckdb.Error as e:
                self._connection = None
                raise ReportingStoreError(
                    f"Could not open {self.store_name}", str(e)
                ) from e
            self._executor = ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix=f"duckdb-{self.store_name}",
            )
            logger.info(f"DuckDB connected: {self.db_path}")

    async def close(self) -> None:
        """Close database connection and thread pool."""
        async with self._lock:
            if self._executor:
                self._executor.shutdown(wait=True)
                self._executor = None
            if self._connection:
                self._connection.close()
                self._connection = None
                logger.info(f"DuckDB connection closed: {self.db_path}")

    @asynccontextmanager
    async def connection(self):
        """Get database connection, connecting lazily, under the access lock."""
        if self._connection is None:
            await self.connect()
        async with self._lock:
            yield self._connection

    async def _run(self, query: str, params: Optional[list], fetch: str, timeout: Optional[float]) -> Any:
        timeout = timeout or self.query_timeout
        async with self.connection() as conn:
            self._total_queries += 1

            def _work():
                cursor = conn.execute(query, params or [])
                if fetch == "one":
                    return cursor.fetchone()
                if fetch == "all":
                    return cursor.fetchall()
                return None

            loop = asyncio.get_running_loop()
            try:
                return await asyncio.wait_for(
                    loop.run_in_executor(self._executor, _work),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                metrics.record_error("QueryTimeoutError")
                raise QueryTimeoutError(query, timeout, f"{self.store_name} {fetch} failed")
            except duckdb.Error as e:
                metrics.record_error(type(e).__name__)
                raise ReportingStoreError(
                    f"{self.store_name} query failed", str(e), query=query
                ) from e

    async def _execute(self, query: str, params: list = None, timeout: float = None) -> None:
        """Execute a statement (INSERT/UPDATE/DELETE) with timeout."""
        await self._run(query, params, "none", timeout)

    async def _fetch_one(self, query: str, params: list = None, timeout: float = None) -> Optional[tuple]:
        """Execute query and fetch one row with timeout."""
        return await self._run(query, params, "one", timeout)

    async def _fetch_all(self, query: str, params: list = None, timeout: float = None) -> List[tuple]:
        """Execute query and fetch all rows with timeout."""
        return await self._run(query, params, "all", timeout)

    def get_connection_info(self) -> dict:
        """Get connection info for monitoring."""
        return {
            "status": "active" if self._connection else "not_initialized",
            "total_queries": self._total_queries,
            "db_path": str(self.db_path),
        }
