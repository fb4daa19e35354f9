"""
Custom exception hierarchy for revenue-share calculations.

Exception Hierarchy:
    RevenueShareError (base)
    ├── InvalidInputError      - Caller broke the engine's input contract
    ├── SiteNotFoundError      - Dashboard store has no such site
    └── ReportingStoreError    - Reporting/dashboard store read failed
        └── QueryTimeoutError  - Store query exceeded its timeout

    ValidationError            - Raw operator input validation failed
"""
from typing import Any


class RevenueShareError(Exception):
    """Base exception for all revenue-share errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class InvalidInputError(RevenueShareError):
    """
    Input bundle violates the engine's contract.

    This is a programmer error, not a business outcome: every valid
    combination of inputs produces a share, so the calculation never
    has a branch for it.
    """

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"


class SiteNotFoundError(RevenueShareError):
    """Site does not exist in the dashboard store."""

    def __init__(self, site_id: int):
        self.site_id = site_id
        super().__init__("Site not found", f"site_id={site_id}")


class ReportingStoreError(RevenueShareError):
    """
    A store read failed.

    The service must not call the engine when this is raised.
    """

    def __init__(self, message: str, details: str = None, query: str = None):
        super().__init__(message, details)
        self.query = query


class QueryTimeoutError(ReportingStoreError):
    """
    Database query exceeded timeout.

    Usually means the revenue_reports window scan is missing its
    (site_id, date) index.
    """

    def __init__(self, query: str, timeout: float, details: str = None):
        self.timeout = timeout
        short_query = query[:200] + "..." if len(query) > 200 else query
        message = f"Query timed out after {timeout}s"
        super().__init__(message, details, query=short_query)

    def __str__(self) -> str:
        return f"QueryTimeoutError: Query timed out after {self.timeout}s - {self.query}"


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating operator input before anything is looked up.
    """

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"
