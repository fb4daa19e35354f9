"""
Integration tests for core/revenue_share_service.py

Runs the full path: dashboard settings + reporting window -> engine -> payload.
"""
import pytest
from datetime import date

from core.exceptions import InvalidInputError, ReportingStoreError, SiteNotFoundError
from core.models import SiteSettings
from core.observability import metrics
from core.revenue_share import IMPRESSIONS_FOR_80, IMPRESSIONS_FOR_825, IMPRESSIONS_FOR_85
from core.revenue_share_service import RevenueShareService
import core.revenue_share_service as service_module


@pytest.fixture
def service(reporting_repo, dashboard_repo):
    return RevenueShareService(reporting_repo, dashboard_repo)


async def _seed_site(dashboard_repo, settings, domain="example.com"):
    await dashboard_repo.upsert_site(
        settings.site_id,
        domain,
        anniversary_on=settings.anniversary_on,
        live_on=settings.live_on,
    )
    await dashboard_repo.set_site_settings(settings.site_id, settings.to_hstore())


class TestGetSiteRevenueShare:
    """End-to-end lookups through both stores."""

    @pytest.mark.asyncio
    async def test_pro_site_low_volume(self, service, dashboard_repo, reporting_repo,
                                       pro_site_settings, target_date):
        """Three-year Pro site below 5M sits on the 0.85 floor."""
        await _seed_site(dashboard_repo, pro_site_settings)
        await reporting_repo.record_revenue_report(101, date(2023, 1, 9), 31_000)

        response = await service.get_site_revenue_share(101, target_date)

        assert response.site_id == 101
        assert response.target_date == target_date
        assert response.total_revenue_share == 0.85
        assert response.revenue_share_pro == 0.85
        assert response.used_health_check is False
        assert response.loyalty.revenue_share == 0.82
        assert response.loyalty.loyalty_bonus == pytest.approx(0.03)
        assert response.loyalty.impressions == 31_000
        assert response.loyalty.anniversary_on == "2020-01-10"
        assert response.loyalty.live_on == "2019-06-01"

    @pytest.mark.asyncio
    async def test_pro_site_top_tier(self, service, dashboard_repo, reporting_repo,
                                     pro_site_settings, target_date):
        """Two-year Pro site just over 15M gets 0.85 + 0.02."""
        pro_site_settings.anniversary_on = date(2021, 1, 10)
        await _seed_site(dashboard_repo, pro_site_settings)
        await reporting_repo.record_revenue_report(101, date(2022, 12, 20), 15_000_000)
        await reporting_repo.record_revenue_report(101, date(2022, 12, 21), 999_999)

        response = await service.get_site_revenue_share(101, target_date)

        assert response.loyalty.impressions == 15_999_999
        assert response.total_revenue_share == 0.87
        assert response.loyalty.revenue_share == 0.85
        assert response.loyalty.loyalty_bonus == pytest.approx(0.02)
        assert response.revenue_share_pro == 0.87

    @pytest.mark.asyncio
    async def test_threshold_constants_in_payload(self, service, dashboard_repo,
                                                  pro_site_settings, target_date):
        await _seed_site(dashboard_repo, pro_site_settings)

        response = await service.get_site_revenue_share(101, target_date)

        assert response.loyalty.impressions == 0
        assert response.loyalty.impressions_for_eighty == IMPRESSIONS_FOR_80 == 5_000_000
        assert response.loyalty.impressions_for_eightytwofive == IMPRESSIONS_FOR_825
        assert response.loyalty.impressions_for_eightyfive == IMPRESSIONS_FOR_85

    @pytest.mark.asyncio
    async def test_health_check_used(self, service, dashboard_repo, reporting_repo,
                                     pro_site_settings, target_date):
        """An audited share replaces the calculation."""
        await _seed_site(dashboard_repo, pro_site_settings)
        await reporting_repo.record_revenue_report(101, date(2023, 1, 9), 31_000)
        await reporting_repo.record_health_check(101, target_date, 0.9)

        response = await service.get_site_revenue_share(101, target_date)

        assert response.used_health_check is True
        assert response.total_revenue_share == 0.9
        assert response.loyalty.revenue_share == 0.87
        # Pro modal never looks at health checks
        assert response.revenue_share_pro == 0.85
        assert metrics.get_counter("health_check.hit") == 1

    @pytest.mark.asyncio
    async def test_default_site(self, service, dashboard_repo, target_date):
        """A plain site gets 0.75 plus loyalty."""
        settings = SiteSettings(site_id=5, anniversary_on=date(2022, 1, 1))
        await _seed_site(dashboard_repo, settings)

        response = await service.get_site_revenue_share(5, target_date)

        assert response.total_revenue_share == 0.76
        assert response.loyalty.revenue_share == 0.75
        assert response.revenue_share_pro == 0.85
        assert metrics.get_counter("revenue_share.branch.default") == 1
        assert metrics.get_counter("health_check.miss") == 1

    @pytest.mark.asyncio
    async def test_defaults_to_yesterday(self, service, dashboard_repo, pro_site_settings,
                                         target_date, monkeypatch):
        """No target date means yesterday in UTC."""
        monkeypatch.setattr(service_module, "get_yesterday_date_utc", lambda: target_date)
        await _seed_site(dashboard_repo, pro_site_settings)

        response = await service.get_site_revenue_share(101)

        assert response.target_date == target_date

    @pytest.mark.asyncio
    async def test_records_timing(self, service, dashboard_repo, pro_site_settings, target_date):
        await _seed_site(dashboard_repo, pro_site_settings)

        await service.get_site_revenue_share(101, target_date)

        assert metrics.get_stats()["timing"]["get_site_revenue_share"]["count"] == 1

    @pytest.mark.asyncio
    async def test_unknown_site(self, service, target_date):
        """Missing sites propagate SiteNotFoundError."""
        with pytest.raises(SiteNotFoundError):
            await service.get_site_revenue_share(404, target_date)

        assert metrics.get_stats()["errors"]["SiteNotFoundError"] == 1

    @pytest.mark.asyncio
    async def test_stored_unmatched_pro_accepted(self, service, dashboard_repo, target_date):
        """A free-form pro_accepted value gets the default share."""
        await dashboard_repo.upsert_site(6, "example.com")
        await dashboard_repo.set_site_settings(6, {"pro_accepted": "pending"})

        response = await service.get_site_revenue_share(6, target_date)

        assert response.total_revenue_share == 0.75
        assert metrics.get_counter("revenue_share.branch.default") == 1

    @pytest.mark.asyncio
    async def test_bad_stored_settings_logged(self, service, dashboard_repo, target_date, caplog):
        """Engine contract errors from stored settings are counted and logged."""
        await dashboard_repo.upsert_site(7, "example.com")
        await dashboard_repo.set_site_settings(7, {"display_revenue_share_override": 150})

        with pytest.raises(InvalidInputError):
            await service.get_site_revenue_share(7, target_date)

        assert metrics.get_stats()["errors"]["InvalidInputError"] == 1
        assert any(
            record.levelname == "ERROR" and "display_revenue_share_override" in record.getMessage()
            for record in caplog.records
        )

    @pytest.mark.asyncio
    async def test_store_failure_skips_engine(self, service, dashboard_repo, pro_site_settings,
                                              target_date, monkeypatch):
        """A failed read never reaches the engine."""
        await _seed_site(dashboard_repo, pro_site_settings)

        async def failing_count(site_id, day):
            raise ReportingStoreError("reporting query failed", "connection lost")

        def engine_called(*args, **kwargs):
            raise AssertionError("engine should not run")

        monkeypatch.setattr(service.reporting, "get_revenue_share_impression_count", failing_count)
        monkeypatch.setattr(service, "calculate_for_settings", engine_called)

        with pytest.raises(ReportingStoreError):
            await service.get_site_revenue_share(101, target_date)


class TestCalculateForSettings:
    """Calculations over inputs the caller already holds."""

    @pytest.fixture
    def offline_service(self):
        """No store access needed for these."""
        return RevenueShareService(reporting=None, dashboard=None)

    def test_owned_site_display_quirk(self, offline_service, target_date):
        """Owned sites show a loyalty bonus carved out of 1.0."""
        settings = SiteSettings(
            site_id=9, owned=True, anniversary_on=date(2020, 1, 10)
        )

        response = offline_service.calculate_for_settings(settings, target_date, 0)

        assert response.total_revenue_share == 1.0
        assert response.loyalty.loyalty_bonus == pytest.approx(0.03)
        assert response.loyalty.revenue_share == 0.97
        assert metrics.get_counter("revenue_share.branch.owned") == 1

    def test_net30_applied(self, offline_service, target_date):
        settings = SiteSettings(site_id=9, net30_revenue_share_payments=True)

        response = offline_service.calculate_for_settings(settings, target_date, 0)

        assert response.total_revenue_share == pytest.approx(0.725)
        assert response.revenue_share_pro == pytest.approx(0.825)

    def test_custom_decimal_places(self, target_date):
        service = RevenueShareService(reporting=None, dashboard=None, decimal_places=1)
        settings = SiteSettings(site_id=9, net30_revenue_share_payments=True)

        response = service.calculate_for_settings(settings, target_date, 0)

        assert response.total_revenue_share == 0.7

    def test_payload_json(self, offline_service, pro_site_settings, target_date):
        """Serialized payload keeps the dashboard's field names."""
        response = offline_service.calculate_for_settings(pro_site_settings, target_date, 31_000)

        payload = response.model_dump(mode="json")

        assert payload["target_date"] == "2023-01-10"
        assert set(payload["loyalty"]) == {
            "live_on", "anniversary_on", "revenue_share", "loyalty_bonus", "impressions",
            "impressions_for_eighty", "impressions_for_eightytwofive", "impressions_for_eightyfive",
        }
