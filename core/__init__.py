"""
Core library for the publisher revenue-share service.

This package contains:
- revenue_share: The pure calculation engine
- models: Input/output value types and site settings
- exceptions: Custom exception hierarchy
- validators: Engine contract and operator input validation
- config: Centralized configuration
- repositories: DuckDB-backed reporting and dashboard stores
- revenue_share_service: Input assembly and display rendering
"""

# Import in dependency order
from core.exceptions import (
    RevenueShareError,
    InvalidInputError,
    SiteNotFoundError,
    ReportingStoreError,
    QueryTimeoutError,
    ValidationError,
)

from core.models import (
    DecisionBranch,
    DisplayRevenueShare,
    ProAcceptance,
    RevenueShareInput,
    SiteSettings,
    VolumeTier,
)

from core.validators import (
    validate_revenue_share_input,
    validate_date_string,
    validate_site_id,
)

from core.revenue_share import (
    RevenueShareEngine,
    engine,
    select_branch,
)

from core.config import config

__all__ = [
    # Exceptions
    "RevenueShareError",
    "InvalidInputError",
    "SiteNotFoundError",
    "ReportingStoreError",
    "QueryTimeoutError",
    "ValidationError",
    # Models
    "DecisionBranch",
    "DisplayRevenueShare",
    "ProAcceptance",
    "RevenueShareInput",
    "SiteSettings",
    "VolumeTier",
    # Validators
    "validate_revenue_share_input",
    "validate_date_string",
    "validate_site_id",
    # Engine
    "RevenueShareEngine",
    "engine",
    "select_branch",
    # Config
    "config",
]
