"""
Pytest configuration and shared fixtures.
"""
from datetime import date
from typing import Callable

import pytest
import pytest_asyncio

from core.models import RevenueShareInput, SiteSettings
from core.observability import metrics
from core.repositories import DashboardRepository, ReportingRepository


@pytest.fixture(autouse=True)
def reset_metrics():
    """Metrics are process-global; start every test from zero."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def target_date() -> date:
    """A target date well after both historical cutovers."""
    return date(2023, 1, 10)


@pytest.fixture
def make_input(target_date) -> Callable[..., RevenueShareInput]:
    """Factory for input bundles: a plain non-owned, non-tier site by default."""
    def _make(**overrides) -> RevenueShareInput:
        params = {
            "target_date": target_date,
            "impression_count": 0,
        }
        params.update(overrides)
        return RevenueShareInput(**params)
    return _make


@pytest.fixture
def pro_site_settings() -> SiteSettings:
    """Pro-accepted site with three years of tenure as of 2023-01-10."""
    return SiteSettings(
        site_id=101,
        anniversary_on=date(2020, 1, 10),
        live_on=date(2019, 6, 1),
        pro_invited=True,
        pro_accepted="accepted",
        pro_accepted_on=date(2022, 10, 1),
    )


@pytest_asyncio.fixture
async def reporting_repo(tmp_path):
    """Reporting repository on a throwaway DuckDB file."""
    repo = ReportingRepository(db_path=tmp_path / "reporting.duckdb", query_timeout=5)
    await repo.connect()
    yield repo
    await repo.close()


@pytest_asyncio.fixture
async def dashboard_repo(tmp_path):
    """Dashboard repository on a throwaway DuckDB file."""
    repo = DashboardRepository(db_path=tmp_path / "dashboard.duckdb", query_timeout=5)
    await repo.connect()
    yield repo
    await repo.close()
