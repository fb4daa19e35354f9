"""
Reporting store: daily revenue reports and audited health-check shares.

Supplies the two inputs the engine cannot compute itself:
- the trailing paid-impression volume for a site
- a previously audited revenue share for a (site, date), if one exists
"""
import asyncio
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from core.config import config
from core.observability import get_logger
from core.repositories.base import BaseRepository

logger = get_logger(__name__)

# Window is [target - 31 days, target - 1 day], both ends inclusive
IMPRESSION_WINDOW_START_DAYS = 31
IMPRESSION_WINDOW_END_DAYS = 1


def get_impression_window(target_date: date) -> tuple:
    """(start, end) dates of the paid-impression window for a target date."""
    return (
        target_date - timedelta(days=IMPRESSION_WINDOW_START_DAYS),
        target_date - timedelta(days=IMPRESSION_WINDOW_END_DAYS),
    )


class ReportingRepository(BaseRepository):
    """Revenue reports and health checks keyed by (site_id, date)."""

    store_name = "reporting"

    SCHEMA_SQL = """
    -- One row per site per day
    CREATE TABLE IF NOT EXISTS revenue_reports (
        site_id INTEGER NOT NULL,
        date DATE NOT NULL,
        paid_impressions BIGINT DEFAULT 0,
        revenue DECIMAL(14, 2) DEFAULT 0,
        net_revenue DECIMAL(14, 2) DEFAULT 0,
        PRIMARY KEY (site_id, date)
    );

    -- Audited share per site per day, in hundredths of a percent
    CREATE TABLE IF NOT EXISTS health_checks (
        site_id INTEGER NOT NULL,
        date DATE NOT NULL,
        revenue_share INTEGER,
        PRIMARY KEY (site_id, date)
    );
    """

    def __init__(self, db_path: Path = None, query_timeout: float = None,
                 health_check_scale: int = None):
        super().__init__(
            db_path or config.reporting.db_path,
            query_timeout or config.reporting.query_timeout,
        )
        self.health_check_scale = health_check_scale or config.reporting.health_check_scale

    async def get_revenue_share_impression_count(self, site_id: int, target_date: date) -> int:
        """
        Sum of paid impressions in the 31 days ending the day before target_date.

        Returns 0 when the site has no reports in the window.
        """
        start_date, end_date = get_impression_window(target_date)
        row = await self._fetch_one(
            """
            SELECT SUM(paid_impressions)
            FROM revenue_reports
            WHERE site_id = ? AND date BETWEEN ? AND ?
            """,
            [site_id, start_date, end_date],
        )
        return int(row[0] or 0) if row else 0

    async def get_health_check_revenue_share(self, site_id: int, target_date: date) -> Optional[float]:
        """
        Audited share for (site, date), or None when there is no health check.

        A health check row with a NULL share counts as an audited 0.
        """
        row = await self._fetch_one(
            "SELECT revenue_share FROM health_checks WHERE site_id = ? AND date = ? LIMIT 1",
            [site_id, target_date],
        )
        if row is None:
            return None
        return (row[0] or 0) / self.health_check_scale

    async def record_revenue_report(
        self,
        site_id: int,
        report_date: date,
        paid_impressions: int,
        revenue: float = 0,
        net_revenue: float = 0,
    ) -> None:
        """Insert or replace one day's report for a site."""
        await self._execute(
            """
            INSERT OR REPLACE INTO revenue_reports
                (site_id, date, paid_impressions, revenue, net_revenue)
            VALUES (?, ?, ?, ?, ?)
            """,
            [site_id, report_date, paid_impressions, revenue, net_revenue],
        )

    async def record_health_check(self, site_id: int, check_date: date,
                                  revenue_share: Optional[float]) -> None:
        """Store an audited share (as a fraction) for a site and date."""
        stored = None
        if revenue_share is not None:
            stored = round(revenue_share * self.health_check_scale)
        await self._execute(
            "INSERT OR REPLACE INTO health_checks (site_id, date, revenue_share) VALUES (?, ?, ?)",
            [site_id, check_date, stored],
        )


# ─── Singleton ───────────────────────────────────────────────────────────────

_reporting_instance: Optional[ReportingRepository] = None
_reporting_lock = asyncio.Lock()


async def get_reporting_repository() -> ReportingRepository:
    """Get singleton reporting repository (coroutine-safe)."""
    global _reporting_instance
    async with _reporting_lock:
        if _reporting_instance is None:
            _reporting_instance = ReportingRepository()
            await _reporting_instance.connect()
    return _reporting_instance


async def close_reporting_repository() -> None:
    global _reporting_instance
    if _reporting_instance:
        await _reporting_instance.close()
        _reporting_instance = None
