"""
Repository layer for the DuckDB stores the revenue-share service reads.

- BaseRepository: Connection management, timeouts, schema initialization
- ReportingRepository: Paid-impression windows and health-check shares
- DashboardRepository: Sites and their key/value settings
"""
from core.repositories.base import BaseRepository
from core.repositories.reporting import (
    ReportingRepository,
    get_reporting_repository,
    close_reporting_repository,
    get_impression_window,
)
from core.repositories.dashboard import (
    DashboardRepository,
    get_dashboard_repository,
    close_dashboard_repository,
)


async def close_repositories() -> None:
    """Close every singleton repository."""
    await close_reporting_repository()
    await close_dashboard_repository()


__all__ = [
    "BaseRepository",
    "ReportingRepository",
    "DashboardRepository",
    "get_reporting_repository",
    "get_dashboard_repository",
    "get_impression_window",
    "close_repositories",
]
