"""
Domain models for revenue-share calculations.

Provides the value types that flow into and out of the engine, and the
revenue-relevant slice of a site's settings. Nothing here is persisted by
the engine; every calculation is a pure function over these values.
"""
from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from enum import Enum, IntEnum
from typing import Optional, Dict, Any


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class ProAcceptance(str, Enum):
    """
    `pro_accepted` values the priority table matches on.

    The setting is free-form; any other string falls through to the
    default share.
    """
    ACCEPTED = "accepted"
    NA = "na"  # Grandfathered into the legacy 80% volume rule


class DecisionBranch(str, Enum):
    """Which row of the priority table set the base share."""
    OWNED = "owned"
    PREMIERE_ACCEPTED = "premiere_accepted"
    PRO_ACCEPTED = "pro_accepted"
    PRE_LEGACY_CUTOFF = "pre_legacy_cutoff"
    LEGACY_VOLUME_ELIGIBLE = "legacy_volume_eligible"
    DEFAULT = "default"

    @property
    def includes_loyalty(self) -> bool:
        """Whether the base share already has the loyalty bonus folded in."""
        return self is DecisionBranch.PRO_ACCEPTED


class VolumeTier(IntEnum):
    """Trailing 30-day paid-impression bands, valued by their inclusive lower bound."""
    BASE = 0
    TIER_80 = 5_000_000
    TIER_825 = 10_000_000
    TIER_85 = 15_000_000

    @property
    def min_impressions(self) -> int:
        return int(self.value)

    @property
    def pro_base_share(self) -> float:
        """Pro tier share before loyalty and the 0.85 floor."""
        return _PRO_BASE_SHARES[self]

    @classmethod
    def for_impressions(cls, impression_count: int) -> "VolumeTier":
        """Highest band whose lower bound the count reaches."""
        for tier in sorted(cls, reverse=True):
            if impression_count >= tier.min_impressions:
                return tier
        return cls.BASE


# Below 5M the Pro table still answers 0.80; the Pro floor lifts it to 0.85
_PRO_BASE_SHARES = {
    VolumeTier.BASE: 0.8,
    VolumeTier.TIER_80: 0.8,
    VolumeTier.TIER_825: 0.825,
    VolumeTier.TIER_85: 0.85,
}

# ═══════════════════════════════════════════════════════════════════════════════
# DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════════

def _as_date(value: Any) -> Any:
    """Drop time-of-day from datetimes; leave everything else for validation."""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class RevenueShareInput:
    """All facts needed for one calculation."""
    target_date: date
    impression_count: int = 0
    anniversary_on: Optional[date] = None
    display_revenue_share_override: Optional[float] = None
    owned: bool = False
    premiere_accepted: bool = False
    pro_accepted: Optional[str] = None
    loyalty_bonus_disabled: bool = False
    net30_revenue_share_payments: Optional[bool] = None

    def __post_init__(self):
        object.__setattr__(self, "target_date", _as_date(self.target_date))
        object.__setattr__(self, "anniversary_on", _as_date(self.anniversary_on))
        if isinstance(self.pro_accepted, ProAcceptance):
            object.__setattr__(self, "pro_accepted", self.pro_accepted.value)

    @classmethod
    def from_settings(
        cls,
        settings: "SiteSettings",
        target_date: date,
        impression_count: int,
    ) -> "RevenueShareInput":
        """Build an input bundle from stored site settings."""
        return cls(
            target_date=target_date,
            impression_count=impression_count,
            anniversary_on=settings.anniversary_on,
            display_revenue_share_override=settings.display_revenue_share_override,
            owned=bool(settings.owned),
            premiere_accepted=bool(settings.premiere_accepted),
            pro_accepted=settings.pro_accepted,
            loyalty_bonus_disabled=bool(settings.loyalty_bonus_disabled),
            net30_revenue_share_payments=bool(settings.net30_revenue_share_payments),
        )


@dataclass(frozen=True)
class DisplayRevenueShare:
    """Share split into base and loyalty parts for display."""
    revenue_share: float
    loyalty_revenue_share: float
    revenue_share_without_loyalty: float
    used_health_check: bool = False


# ─── Site settings (key/value store) ─────────────────────────────────────────

_TRUE_STRINGS = {"true", "t", "1", "yes"}
_FALSE_STRINGS = {"false", "f", "0", "no"}


def _parse_bool(raw: str) -> Optional[bool]:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    return None


def _parse_number(raw: str) -> Optional[float]:
    try:
        return float(raw)
    except ValueError:
        return None


def _parse_seconds_timestamp(raw: str) -> Optional[date]:
    """Settings store acceptance times as epoch seconds."""
    try:
        return datetime.fromtimestamp(int(float(raw)), tz=timezone.utc).date()
    except (ValueError, OverflowError, OSError):
        return None


def _parse_iso_date(raw: str) -> Optional[date]:
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        return None


_SETTING_PARSERS = {
    "owned": _parse_bool,
    "loyalty_bonus_disabled": _parse_bool,
    "display_revenue_share_override": _parse_number,
    "net30_revenue_share_payments": _parse_bool,
    "premiere_invited": _parse_bool,
    "premiere_accepted": _parse_bool,
    "premiere_accepted_on": _parse_seconds_timestamp,
    "pro_invited": _parse_bool,
    "pro_accepted": lambda raw: raw.strip(),
    "pro_accepted_on": _parse_seconds_timestamp,
    "pro_last_audit": _parse_iso_date,
}


@dataclass
class SiteSettings:
    """Revenue-relevant subset of a site's key/value settings."""
    site_id: int
    anniversary_on: Optional[date] = None
    live_on: Optional[date] = None
    owned: Optional[bool] = False
    loyalty_bonus_disabled: Optional[bool] = None
    display_revenue_share_override: Optional[float] = None
    net30_revenue_share_payments: Optional[bool] = None
    premiere_invited: Optional[bool] = None
    premiere_accepted: Optional[bool] = None
    premiere_accepted_on: Optional[date] = None
    pro_invited: Optional[bool] = None
    pro_accepted: Optional[str] = None
    pro_accepted_on: Optional[date] = None
    pro_last_audit: Optional[date] = None

    @classmethod
    def from_hstore(
        cls,
        site_id: int,
        raw: Optional[Dict[str, Optional[str]]],
        anniversary_on: Optional[date] = None,
        live_on: Optional[date] = None,
    ) -> "SiteSettings":
        """
        Parse raw string settings into typed values.

        Unknown keys are ignored; blank or unparseable values become None
        so a half-migrated settings row never blocks a calculation.
        """
        parsed: Dict[str, Any] = {}
        for key, value in (raw or {}).items():
            parser = _SETTING_PARSERS.get(key)
            if parser is None or value is None or not str(value).strip():
                continue
            parsed[key] = parser(str(value))

        return cls(
            site_id=site_id,
            anniversary_on=_as_date(anniversary_on),
            live_on=_as_date(live_on),
            **parsed,
        )

    def to_hstore(self) -> Dict[str, str]:
        """Serialize back to the string form the settings store keeps."""
        result: Dict[str, str] = {}
        for f in fields(self):
            if f.name not in _SETTING_PARSERS:
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, bool):
                result[f.name] = "true" if value else "false"
            elif isinstance(value, date) and f.name.endswith("_accepted_on"):
                midnight = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
                result[f.name] = str(int(midnight.timestamp()))
            elif isinstance(value, date):
                result[f.name] = value.isoformat()
            elif isinstance(value, float) and value.is_integer():
                result[f.name] = str(int(value))
            else:
                result[f.name] = str(value)
        return result
