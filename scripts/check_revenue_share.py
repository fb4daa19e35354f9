#!/usr/bin/env python3
"""
Print a site's revenue share as the dashboard would show it.

Run this when a publisher questions the share on their dashboard.

Usage:
    python scripts/check_revenue_share.py --site-id 42
    python scripts/check_revenue_share.py --site-id 42 --date 2023-01-10
    python scripts/check_revenue_share.py --site-id 42 --json
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import ConfigurationError, config, validate_config
from core.exceptions import RevenueShareError, ValidationError
from core.observability import correlation_context, get_logger, setup_logging
from core.repositories import close_repositories
from core.revenue_share_service import get_revenue_share_service
from core.validators import validate_date_string, validate_site_id

logger = get_logger(__name__)


async def main(site_id: int, date_str: str = None, as_json: bool = False) -> int:
    """Look up and print one site's revenue share."""
    try:
        validate_config()
        site_id = validate_site_id(site_id)
        target_date = validate_date_string(date_str, "date") if date_str else None
    except (ConfigurationError, ValidationError) as e:
        logger.error(f"Invalid input: {e}")
        return 1

    with correlation_context():
        try:
            service = await get_revenue_share_service()
            response = await service.get_site_revenue_share(site_id, target_date)
        except RevenueShareError as e:
            logger.error(f"Revenue share lookup failed: {e}")
            return 1
        finally:
            await close_repositories()

    if as_json:
        print(response.model_dump_json(indent=2))
        return 0

    loyalty = response.loyalty
    print(f"Site {response.site_id} on {response.target_date}")
    print(f"  Impressions (31 days):   {loyalty.impressions:,}")
    print(f"  Revenue share:           {response.total_revenue_share:.3f}"
          f"{' (health check)' if response.used_health_check else ''}")
    print(f"  Without loyalty:         {loyalty.revenue_share:.3f}")
    print(f"  Loyalty bonus:           {loyalty.loyalty_bonus:.3f}")
    print(f"  Pro tier share:          {response.revenue_share_pro:.3f}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Show a site's revenue share")
    parser.add_argument("--site-id", type=int, required=True, help="Site ID")
    parser.add_argument(
        "--date",
        default=None,
        help="Target date YYYY-MM-DD (default: yesterday in UTC)"
    )
    parser.add_argument("--json", action="store_true", help="Print the JSON payload")
    args = parser.parse_args()

    setup_logging(level=config.logging.level, json_format=config.logging.json_format)
    exit_code = asyncio.run(main(args.site_id, args.date, args.json))
    sys.exit(exit_code)
