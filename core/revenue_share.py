"""
Revenue-share calculation engine.

Decides what fraction of ad revenue a publisher site keeps. Pure and
synchronous: callers fetch the impression volume and any health-check
override first, then hand a RevenueShareInput to the engine.

The base share comes from a priority table (first match wins):

    owned > premiere accepted > pro accepted > before 2017-12-25
          > legacy "na" sites over 5M impressions > default

then the display override floor, the loyalty bonus and the net-30 fee are
applied in that order. Several rules below look inconsistent with each
other. They are pinned to historical payout agreements and must be kept
as they are.
"""
from datetime import date, timedelta
from numbers import Real
from typing import Callable, Dict, Optional, Tuple

from core.exceptions import InvalidInputError
from core.models import (
    DecisionBranch,
    DisplayRevenueShare,
    ProAcceptance,
    RevenueShareInput,
    VolumeTier,
)
from core.observability import get_logger
from core.validators import validate_revenue_share_input

logger = get_logger(__name__)

IMPRESSIONS_FOR_80 = VolumeTier.TIER_80.min_impressions
IMPRESSIONS_FOR_825 = VolumeTier.TIER_825.min_impressions
IMPRESSIONS_FOR_85 = VolumeTier.TIER_85.min_impressions

# Historical cutovers. Compared against the target date, never "today".
LEGACY_RATE_CUTOFF = date(2017, 12, 25)
LOYALTY_BONUS_CUTOFF = date(2018, 3, 7)

OWNED_SHARE = 1.0
PREMIERE_SHARE = 0.9
PRE_LEGACY_SHARE = 0.7
DEFAULT_SHARE = 0.75
PRO_SHARE_FLOOR = 0.85
NET30_DEDUCTION = 0.025
MAX_LOYALTY_YEARS = 5


# ═══════════════════════════════════════════════════════════════════════════════
# VOLUME TIERS
# ═══════════════════════════════════════════════════════════════════════════════

def get_volume_tier(impression_count: int) -> VolumeTier:
    return VolumeTier.for_impressions(impression_count)


def get_base_pro_revenue_share(impression_count: int) -> float:
    """Base share for a trailing 30-day paid-impression count."""
    return VolumeTier.for_impressions(impression_count).pro_base_share


# ═══════════════════════════════════════════════════════════════════════════════
# LOYALTY
# ═══════════════════════════════════════════════════════════════════════════════

def get_loyalty_age(anniversary_on: Optional[date], target_date: date) -> int:
    """
    Full years of tenure as of the target date.

    Measured from the day after the target date, so a site gains a year on
    its anniversary itself rather than the day after.
    """
    if not anniversary_on:
        return 0

    next_day = target_date + timedelta(days=1)
    years_diff = next_day.year - anniversary_on.year
    if (anniversary_on.month, anniversary_on.day) > (next_day.month, next_day.day):
        # This year's anniversary has not happened yet
        years_diff -= 1
    return max(years_diff, 0)


def get_loyalty_revenue_share(
    anniversary_on: Optional[date],
    target_date: date,
    loyalty_bonus_disabled: bool,
    premiere_accepted: bool,
) -> float:
    """
    Loyalty bonus as reported for display.

    Has no owned check: the legacy API reports a bonus for owned sites too
    (a 3-year-old owned site shows loyalty_bonus 0.03 next to a share of
    0.97). Keep it that way for API compatibility.
    """
    if loyalty_bonus_disabled or premiere_accepted or target_date < LOYALTY_BONUS_CUTOFF:
        return 0.0
    return min(get_loyalty_age(anniversary_on, target_date), MAX_LOYALTY_YEARS) / 100


def get_loyalty_revenue_share_with_owned_check(
    anniversary_on: Optional[date],
    target_date: date,
    loyalty_bonus_disabled: bool,
    premiere_accepted: bool,
    owned: bool,
) -> float:
    """Loyalty bonus as used in the calculation; owned sites get none."""
    if owned:
        return 0.0
    return get_loyalty_revenue_share(
        anniversary_on, target_date, loyalty_bonus_disabled, premiere_accepted
    )


def _calculation_loyalty(params: RevenueShareInput) -> float:
    return get_loyalty_revenue_share_with_owned_check(
        params.anniversary_on,
        params.target_date,
        params.loyalty_bonus_disabled,
        params.premiere_accepted,
        params.owned,
    )


def calculate_pro_revenue_share(params: RevenueShareInput) -> float:
    """Pro tier share: volume base plus loyalty, never below 0.85."""
    base = get_base_pro_revenue_share(params.impression_count)
    return max(base + _calculation_loyalty(params), PRO_SHARE_FLOOR)


# ═══════════════════════════════════════════════════════════════════════════════
# PRIORITY TABLE
# ═══════════════════════════════════════════════════════════════════════════════

Rule = Tuple[Callable[[RevenueShareInput], bool], DecisionBranch]

DECISION_TABLE: Tuple[Rule, ...] = (
    (lambda p: p.owned, DecisionBranch.OWNED),
    (lambda p: p.premiere_accepted, DecisionBranch.PREMIERE_ACCEPTED),
    (lambda p: p.pro_accepted == ProAcceptance.ACCEPTED.value, DecisionBranch.PRO_ACCEPTED),
    (lambda p: p.target_date < LEGACY_RATE_CUTOFF, DecisionBranch.PRE_LEGACY_CUTOFF),
    (
        lambda p: p.pro_accepted == ProAcceptance.NA.value
        and p.impression_count >= IMPRESSIONS_FOR_80,
        DecisionBranch.LEGACY_VOLUME_ELIGIBLE,
    ),
    (lambda p: True, DecisionBranch.DEFAULT),
)

BASE_SHARES: Dict[DecisionBranch, Callable[[RevenueShareInput], float]] = {
    DecisionBranch.OWNED: lambda p: OWNED_SHARE,
    DecisionBranch.PREMIERE_ACCEPTED: lambda p: PREMIERE_SHARE,
    DecisionBranch.PRO_ACCEPTED: calculate_pro_revenue_share,
    DecisionBranch.PRE_LEGACY_CUTOFF: lambda p: PRE_LEGACY_SHARE,
    DecisionBranch.LEGACY_VOLUME_ELIGIBLE: lambda p: get_base_pro_revenue_share(p.impression_count),
    DecisionBranch.DEFAULT: lambda p: DEFAULT_SHARE,
}


def select_branch(params: RevenueShareInput) -> DecisionBranch:
    for predicate, branch in DECISION_TABLE:
        if predicate(params):
            return branch
    return DecisionBranch.DEFAULT


def _apply_override_floor(share: float, override: Optional[float]) -> float:
    # Zero means "no override" in the settings store
    if override:
        return max(share, override / 100)
    return share


def _apply_net30(share: float, net30_revenue_share_payments: Optional[bool]) -> float:
    # Not clamped at zero
    if net30_revenue_share_payments:
        return share - NET30_DEDUCTION
    return share


# ═══════════════════════════════════════════════════════════════════════════════
# ENGINE
# ═══════════════════════════════════════════════════════════════════════════════

class RevenueShareEngine:
    """
    Stateless calculator for the three revenue-share views of a site.

    Every public method validates its input bundle first and raises
    InvalidInputError on a contract violation.
    """

    def calculate_revenue_share(self, params: RevenueShareInput) -> float:
        """
        Fraction of revenue the site keeps on the target date.

        Ownership is absolute: owned sites get exactly 1.0 with no override,
        loyalty or net-30 adjustment.
        """
        validate_revenue_share_input(params)

        branch = select_branch(params)
        revenue_share = BASE_SHARES[branch](params)
        logger.debug(
            "Revenue share branch selected",
            extra={"branch": branch.value, "base_share": revenue_share},
        )
        if branch is DecisionBranch.OWNED:
            return revenue_share

        revenue_share = _apply_override_floor(revenue_share, params.display_revenue_share_override)

        # The pro branch already added loyalty; adding it again double-counts
        if not branch.includes_loyalty:
            revenue_share += _calculation_loyalty(params)

        return _apply_net30(revenue_share, params.net30_revenue_share_payments)

    def get_display_revenue_share(
        self,
        params: RevenueShareInput,
        health_check_override: Optional[float] = None,
    ) -> DisplayRevenueShare:
        """
        Share split into base and loyalty for display.

        A health-check value is an audited share for this (site, date) and
        replaces the calculation verbatim. The loyalty part is always
        recomputed, without the owned check, so
        revenue_share == revenue_share_without_loyalty + loyalty_revenue_share.
        """
        validate_revenue_share_input(params)
        if health_check_override is not None and (
            isinstance(health_check_override, bool)
            or not isinstance(health_check_override, Real)
        ):
            raise InvalidInputError(
                "health_check_override", "Must be a number or None", health_check_override
            )

        used_health_check = health_check_override is not None
        if used_health_check:
            revenue_share = float(health_check_override)
        else:
            revenue_share = self.calculate_revenue_share(params)

        loyalty_revenue_share = get_loyalty_revenue_share(
            params.anniversary_on,
            params.target_date,
            params.loyalty_bonus_disabled,
            params.premiere_accepted,
        )
        return DisplayRevenueShare(
            revenue_share=revenue_share,
            loyalty_revenue_share=loyalty_revenue_share,
            revenue_share_without_loyalty=revenue_share - loyalty_revenue_share,
            used_health_check=used_health_check,
        )

    def get_pro_modal_revenue_share(self, params: RevenueShareInput) -> float:
        """What the site would get on the Pro tier, whatever its actual tier."""
        validate_revenue_share_input(params)

        pro_revenue_share = calculate_pro_revenue_share(params)
        pro_revenue_share = _apply_override_floor(
            pro_revenue_share, params.display_revenue_share_override
        )
        return _apply_net30(pro_revenue_share, params.net30_revenue_share_payments)


# Shared instance; the engine holds no state
engine = RevenueShareEngine()
