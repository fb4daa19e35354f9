"""
Centralized configuration for the revenue-share service.

This module provides a single source of truth for all configuration values.
Configuration is loaded from environment variables with sensible defaults.

Tier thresholds and historical cutover dates are deliberately NOT here:
they are pinned to payout agreements and live in core.revenue_share.

Usage:
    from core.config import config

    db_path = config.reporting.db_path
    timeout = config.reporting.query_timeout
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
VALID_LOG_FORMATS = {"text", "json"}


@dataclass(frozen=True)
class ReportingConfig:
    """Reporting store (revenue reports, health checks) configuration."""

    db_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("REPORTING_DB_PATH", str(DATA_DIR / "reporting.duckdb"))
        )
    )
    query_timeout: float = field(
        default_factory=lambda: float(os.getenv("REPORTING_QUERY_TIMEOUT", "30"))
    )
    # Stored health_checks.revenue_share is in hundredths of a percent
    health_check_scale: int = 10_000


@dataclass(frozen=True)
class DashboardConfig:
    """Dashboard store (sites, site settings) configuration."""

    db_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("DASHBOARD_DB_PATH", str(DATA_DIR / "dashboard.duckdb"))
        )
    )
    query_timeout: float = field(
        default_factory=lambda: float(os.getenv("DASHBOARD_QUERY_TIMEOUT", "10"))
    )


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "text").lower())

    @property
    def json_format(self) -> bool:
        return self.format == "json"


@dataclass(frozen=True)
class DisplayConfig:
    """How shares are rendered for API consumers."""

    decimal_places: int = 3


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


# Global config instance
config = AppConfig()


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(app_config: AppConfig = None) -> None:
    """
    Validate that all required configuration is present.

    Call this on startup to fail fast with clear error messages
    instead of cryptic runtime failures.

    Args:
        app_config: Config to validate (defaults to the global instance)

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    cfg = app_config or config
    errors = []

    if cfg.reporting.query_timeout <= 0:
        errors.append("REPORTING_QUERY_TIMEOUT must be positive")

    if cfg.dashboard.query_timeout <= 0:
        errors.append("DASHBOARD_QUERY_TIMEOUT must be positive")

    if cfg.reporting.db_path == cfg.dashboard.db_path:
        errors.append("REPORTING_DB_PATH and DASHBOARD_DB_PATH must point to different files")

    if cfg.logging.level not in VALID_LOG_LEVELS:
        errors.append(f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}")

    if cfg.logging.format not in VALID_LOG_FORMATS:
        errors.append(f"LOG_FORMAT must be one of {sorted(VALID_LOG_FORMATS)}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
