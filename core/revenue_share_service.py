"""
Revenue-share service.

Assembles the engine's inputs from the dashboard and reporting stores and
renders the result the way the dashboard API shows it.

Usage:
    service = await get_revenue_share_service()
    response = await service.get_site_revenue_share(site_id=42)
"""
import asyncio
from datetime import date
from typing import Optional

from core.config import config
from core.dates import (
    get_month_day_year_date_string,
    get_yesterday_date_utc,
    round_to_decimal_places,
)
from core.exceptions import RevenueShareError
from core.models import RevenueShareInput, SiteSettings
from core.observability import get_logger, metrics, timed
from core.repositories import (
    DashboardRepository,
    ReportingRepository,
    get_dashboard_repository,
    get_reporting_repository,
)
from core.revenue_share import (
    IMPRESSIONS_FOR_80,
    IMPRESSIONS_FOR_825,
    IMPRESSIONS_FOR_85,
    RevenueShareEngine,
    engine as default_engine,
    select_branch,
)
from core.schemas import SiteLoyaltyResponse, SiteRevenueShareResponse

logger = get_logger(__name__)


class RevenueShareService:
    """Fetches a site's inputs, runs the engine and formats the result."""

    def __init__(
        self,
        reporting: ReportingRepository,
        dashboard: DashboardRepository,
        engine: RevenueShareEngine = default_engine,
        decimal_places: int = None,
    ):
        self.reporting = reporting
        self.dashboard = dashboard
        self.engine = engine
        self.decimal_places = decimal_places if decimal_places is not None else config.display.decimal_places

    @timed("get_site_revenue_share")
    async def get_site_revenue_share(
        self,
        site_id: int,
        target_date: Optional[date] = None,
    ) -> SiteRevenueShareResponse:
        """
        Revenue-share view of a site.

        target_date defaults to yesterday in UTC. The three reads are
        independent and run concurrently; if any fails the engine is not
        called and the error propagates.
        """
        target_date = target_date or get_yesterday_date_utc()

        try:
            settings, impression_count, health_check = await asyncio.gather(
                self.dashboard.get_site_settings(site_id),
                self.reporting.get_revenue_share_impression_count(site_id, target_date),
                self.reporting.get_health_check_revenue_share(site_id, target_date),
            )
            return self.calculate_for_settings(settings, target_date, impression_count, health_check)
        except RevenueShareError as e:
            metrics.record_error(type(e).__name__)
            logger.error(
                f"Revenue share lookup failed: {e}",
                extra={"site_id": site_id, "target_date": str(target_date)},
                exc_info=True,
            )
            raise

    def calculate_for_settings(
        self,
        settings: SiteSettings,
        target_date: date,
        impression_count: int,
        health_check_override: Optional[float] = None,
    ) -> SiteRevenueShareResponse:
        """Run the engine over inputs the caller already holds."""
        params = RevenueShareInput.from_settings(settings, target_date, impression_count)

        revenue_share_pro = self.engine.get_pro_modal_revenue_share(params)
        display = self.engine.get_display_revenue_share(params, health_check_override)

        branch = select_branch(params)
        metrics.increment(f"revenue_share.branch.{branch.value}")
        metrics.increment("health_check.hit" if display.used_health_check else "health_check.miss")
        logger.info(
            "Revenue share calculated",
            extra={
                "site_id": settings.site_id,
                "target_date": str(target_date),
                "branch": branch.value,
                "impressions": impression_count,
                "used_health_check": display.used_health_check,
            },
        )

        places = self.decimal_places
        return SiteRevenueShareResponse(
            site_id=settings.site_id,
            target_date=target_date,
            total_revenue_share=round_to_decimal_places(display.revenue_share, places),
            revenue_share_pro=round_to_decimal_places(revenue_share_pro, places),
            used_health_check=display.used_health_check,
            loyalty=SiteLoyaltyResponse(
                live_on=get_month_day_year_date_string(settings.live_on),
                anniversary_on=get_month_day_year_date_string(settings.anniversary_on),
                revenue_share=round_to_decimal_places(display.revenue_share_without_loyalty, places),
                loyalty_bonus=display.loyalty_revenue_share,
                impressions=impression_count,
                impressions_for_eighty=IMPRESSIONS_FOR_80,
                impressions_for_eightytwofive=IMPRESSIONS_FOR_825,
                impressions_for_eightyfive=IMPRESSIONS_FOR_85,
            ),
        )


async def get_revenue_share_service() -> RevenueShareService:
    """Service wired to the singleton repositories."""
    reporting, dashboard = await asyncio.gather(
        get_reporting_repository(),
        get_dashboard_repository(),
    )
    return RevenueShareService(reporting, dashboard)
