"""
Pydantic response models for revenue-share payloads.

Field names match the JSON the dashboard API has always returned for a
site's `loyalty` block and `revenue_share_pro`.
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class SiteLoyaltyResponse(BaseModel):
    """Revenue share split into base and loyalty bonus."""
    live_on: Optional[str] = Field(None, description="Date the site went live (YYYY-MM-DD)")
    anniversary_on: Optional[str] = Field(None, description="Tenure anniversary (YYYY-MM-DD)")
    revenue_share: float = Field(description="Revenue share without the loyalty bonus, 3 decimals")
    loyalty_bonus: float = Field(description="Loyalty bonus added to revenue_share")
    impressions: int = Field(description="Paid impressions over the trailing window")
    impressions_for_eighty: int = Field(description="Impressions needed for the 80% tier")
    impressions_for_eightytwofive: int = Field(description="Impressions needed for the 82.5% tier")
    impressions_for_eightyfive: int = Field(description="Impressions needed for the 85% tier")


class SiteRevenueShareResponse(BaseModel):
    """Revenue-share view of one site on one date."""
    site_id: int
    target_date: date = Field(description="Date the shares were calculated for")
    total_revenue_share: float = Field(description="Share including loyalty, 3 decimals")
    revenue_share_pro: float = Field(description="Share the site would get on the Pro tier, 3 decimals")
    used_health_check: bool = Field(False, description="Whether an audited health-check share was used")
    loyalty: SiteLoyaltyResponse
