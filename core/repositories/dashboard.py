"""
Dashboard store: sites and their key/value settings.

Settings are kept as string key/value pairs per site (the same shape as
the settings hstore in the main dashboard database) and parsed into
SiteSettings on read.
"""
import asyncio
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from core.config import config
from core.exceptions import SiteNotFoundError
from core.models import SiteSettings
from core.observability import get_logger
from core.repositories.base import BaseRepository

logger = get_logger(__name__)


def _to_setting_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class DashboardRepository(BaseRepository):
    """Sites and site settings."""

    store_name = "dashboard"

    SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS sites (
        id INTEGER PRIMARY KEY,
        domain VARCHAR NOT NULL,
        title VARCHAR,
        slug VARCHAR,
        anniversary_on DATE,
        live_on DATE
    );

    CREATE TABLE IF NOT EXISTS site_settings (
        site_id INTEGER NOT NULL,
        key VARCHAR NOT NULL,
        value VARCHAR,
        PRIMARY KEY (site_id, key)
    );
    """

    def __init__(self, db_path: Path = None, query_timeout: float = None):
        super().__init__(
            db_path or config.dashboard.db_path,
            query_timeout or config.dashboard.query_timeout,
        )

    async def get_site_settings(self, site_id: int) -> SiteSettings:
        """
        Load a site's revenue-relevant settings.

        Raises:
            SiteNotFoundError: If the site does not exist
        """
        site = await self._fetch_one(
            "SELECT anniversary_on, live_on FROM sites WHERE id = ?",
            [site_id],
        )
        if site is None:
            raise SiteNotFoundError(site_id)

        rows = await self._fetch_all(
            "SELECT key, value FROM site_settings WHERE site_id = ?",
            [site_id],
        )
        anniversary_on, live_on = site
        return SiteSettings.from_hstore(
            site_id,
            {key: value for key, value in rows},
            anniversary_on=anniversary_on,
            live_on=live_on,
        )

    async def upsert_site(
        self,
        site_id: int,
        domain: str,
        title: Optional[str] = None,
        slug: Optional[str] = None,
        anniversary_on: Optional[date] = None,
        live_on: Optional[date] = None,
    ) -> None:
        await self._execute(
            """
            INSERT OR REPLACE INTO sites (id, domain, title, slug, anniversary_on, live_on)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [site_id, domain, title, slug, anniversary_on, live_on],
        )

    async def set_site_settings(self, site_id: int, settings: Dict[str, Any]) -> None:
        """Write settings; a None value removes the key."""
        for key, value in settings.items():
            if value is None:
                await self._execute(
                    "DELETE FROM site_settings WHERE site_id = ? AND key = ?",
                    [site_id, key],
                )
                continue
            await self._execute(
                "INSERT OR REPLACE INTO site_settings (site_id, key, value) VALUES (?, ?, ?)",
                [site_id, key, _to_setting_string(value)],
            )
        logger.debug("Site settings updated", extra={"site_id": site_id, "keys": sorted(settings)})


# ─── Singleton ───────────────────────────────────────────────────────────────

_dashboard_instance: Optional[DashboardRepository] = None
_dashboard_lock = asyncio.Lock()


async def get_dashboard_repository() -> DashboardRepository:
    """Get singleton dashboard repository (coroutine-safe)."""
    global _dashboard_instance
    async with _dashboard_lock:
        if _dashboard_instance is None:
            _dashboard_instance = DashboardRepository()
            await _dashboard_instance.connect()
    return _dashboard_instance


async def close_dashboard_repository() -> None:
    global _dashboard_instance
    if _dashboard_instance:
        await _dashboard_instance.close()
        _dashboard_instance = None
