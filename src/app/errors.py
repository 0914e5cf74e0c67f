"""Reporting Error Taxonomy

Every error carries a machine readable code, a human readable message
and an optional reason, mirroring the error payloads returned by the API.
"""

from typing import Optional


class ReportingError(Exception):
    """Base class for reporting layer errors"""

    code = "REPORTING_ERROR"

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.reason:
            error["reason"] = self.reason
        return {"error": error}


class InvalidArgument(ReportingError):
    """Caller supplied an invalid owner id or month key (400)"""

    code = "INVALID_ARGUMENT"

    def __init__(self, field: str, message: str, reason: Optional[str] = None):
        super().__init__(message, reason)
        self.field = field

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["error"]["field"] = self.field
        return payload


class InvalidMonthFormat(InvalidArgument):
    """Month key does not match YYYY-MM"""

    code = "INVALID_MONTH_FORMAT"

    def __init__(self, value, field: str = "month_key"):
        super().__init__(
            field,
            f"Invalid month format {value!r}, expected YYYY-MM (e.g. 2025-09)",
        )
        self.value = value


class InvalidMonthRange(InvalidArgument):
    """Month key is well formed but out of range"""

    code = "INVALID_MONTH_RANGE"

    def __init__(self, year: int, month: int, field: str = "month_key"):
        if not 1900 <= year <= 2100:
            message = f"Invalid year {year}, must be between 1900 and 2100"
        else:
            message = f"Invalid month {month:02d}, must be between 01 and 12"
        super().__init__(field, message)
        self.year = year
        self.month = month


class RepositoryUnavailable(ReportingError):
    """Invoice repository failed or timed out; retryable (500)"""

    code = "REPOSITORY_UNAVAILABLE"


class InternalAggregationError(ReportingError):
    """A report invariant was violated while aggregating (500)"""

    code = "INTERNAL_AGGREGATION_ERROR"
