"""Data Transfer Objects for Reporting Use Cases

Immutable pydantic models returned by the report aggregator and the
consistency checker.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple
from pydantic import BaseModel, Field, field_serializer, field_validator

from src.domain.invoice import InvoiceStatus

CalendarDay = date


class StatusBucketDTO(BaseModel):
    """Invoices of one status within the reported month"""

    status: InvoiceStatus = Field(
        ...,
        description="Invoice status"
    )

    count: int = Field(
        ...,
        ge=0,
        description="Number of invoices with this status"
    )

    amount: Decimal = Field(
        ...,
        description="Summed invoice amount for this status"
    )

    percentage: Decimal = Field(
        ...,
        description="Share of the month's invoices, one decimal place"
    )

    class Config:
        frozen = True


class StatusDistributionReportDTO(BaseModel):
    """
    Status distribution of invoices issued in a month

    Keyed on issue date: an invoice belongs to the month it was billed in.
    """

    month_key: str = Field(
        ...,
        description="Reported month (YYYY-MM)"
    )

    total_invoices: int = Field(
        ...,
        ge=0,
        description="Invoices issued in the month"
    )

    total_amount: Decimal = Field(
        ...,
        description="Summed amount of all invoices issued in the month"
    )

    buckets: Tuple[StatusBucketDTO, ...] = Field(
        default_factory=tuple,
        description="One bucket per status present, largest first"
    )

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "month_key": "2025-09",
                "total_invoices": 3,
                "total_amount": "350.00",
                "buckets": [
                    {"status": "paid", "count": 2, "amount": "300.00", "percentage": "66.7"},
                    {"status": "sent", "count": 1, "amount": "50.00", "percentage": "33.3"},
                ]
            }
        }

    def count_for(self, status: InvoiceStatus) -> int:
        for bucket in self.buckets:
            if bucket.status == status:
                return bucket.count
        return 0


class DailyRevenueBucketDTO(BaseModel):
    """Revenue collected on one calendar day"""

    date: CalendarDay = Field(
        ...,
        description="UTC calendar day of payment"
    )

    revenue: Decimal = Field(
        ...,
        description="Summed amount of invoices paid that day"
    )

    count: int = Field(
        ...,
        ge=0,
        description="Number of invoices paid that day"
    )

    class Config:
        frozen = True


class RevenueTrendReportDTO(BaseModel):
    """
    Revenue collected in a month, bucketed per day

    Keyed on payment date; only invoices in paid status are counted.
    """

    month_key: str = Field(
        ...,
        description="Reported month (YYYY-MM)"
    )

    total_revenue: Decimal = Field(
        ...,
        description="Sum of all daily buckets"
    )

    total_paid_count: int = Field(
        ...,
        ge=0,
        description="Invoices paid in the month"
    )

    daily_buckets: Tuple[DailyRevenueBucketDTO, ...] = Field(
        default_factory=tuple,
        description="Days with at least one payment, ascending"
    )

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "month_key": "2025-09",
                "total_revenue": "300.00",
                "total_paid_count": 2,
                "daily_buckets": [
                    {"date": "2025-09-15", "revenue": "300.00", "count": 2}
                ]
            }
        }


class MonthlySummaryDTO(BaseModel):
    """Scalar view derived from the distribution and trend reports"""

    average_invoice_value: Decimal = Field(
        ...,
        description="Issued amount divided by issued count (0 without invoices)"
    )

    payment_rate: Decimal = Field(
        ...,
        description="Paid count over issued count, in percent (0 without invoices)"
    )

    total_invoices: int = Field(
        ...,
        description="Invoices issued in the month"
    )

    total_revenue: Decimal = Field(
        ...,
        description="Revenue collected in the month"
    )

    paid_invoices: int = Field(
        ...,
        description="Invoices paid in the month"
    )

    status_counts: Mapping[InvoiceStatus, int] = Field(
        default_factory=dict,
        description="Issued invoice count per status (read-only)"
    )

    class Config:
        frozen = True

    @field_validator("status_counts")
    @classmethod
    def freeze_status_counts(cls, value: Mapping[InvoiceStatus, int]) -> Mapping[InvoiceStatus, int]:
        return MappingProxyType(dict(value))

    @field_serializer("status_counts")
    def serialize_status_counts(self, value: Mapping[InvoiceStatus, int]) -> Dict[InvoiceStatus, int]:
        return dict(value)


class ReportMetadataDTO(BaseModel):
    generated_at: datetime = Field(
        ...,
        description="UTC timestamp the report was computed at"
    )

    owner_id: int = Field(
        ...,
        description="Owner the report is scoped to"
    )

    class Config:
        frozen = True


class UnifiedReportDTO(BaseModel):
    """
    Dashboard report for one owner and one month

    Returned by ReportAggregator.get_unified_report().
    """

    month_key: str = Field(
        ...,
        description="Reported month (YYYY-MM)"
    )

    status_distribution: StatusDistributionReportDTO
    revenue_trend: RevenueTrendReportDTO
    monthly_summary: MonthlySummaryDTO
    metadata: ReportMetadataDTO

    class Config:
        frozen = True


class IssueSeverity(str, Enum):
    """Consistency issue severity"""
    ERROR = "error"
    INFO = "info"


class ConsistencyIssueDTO(BaseModel):
    """One disagreement found between report figures"""

    kind: str = Field(
        ...,
        description="Issue kind (e.g., cross_period_payment)"
    )

    severity: IssueSeverity = Field(
        ...,
        description="error for broken invariants, info for expected differences"
    )

    message: str = Field(
        ...,
        description="Human readable description"
    )

    expected: str = Field(
        ...,
        description="Value the check expected"
    )

    actual: str = Field(
        ...,
        description="Value found in the report"
    )

    class Config:
        frozen = True


class ConsistencyResultDTO(BaseModel):
    """Outcome of checking a unified report"""

    month_key: str
    owner_id: int
    is_consistent: bool = Field(
        ...,
        description="True when no issue has error severity"
    )
    issues: List[ConsistencyIssueDTO] = Field(default_factory=list)
    checked_at: datetime

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "month_key": "2025-09",
                "owner_id": 1,
                "is_consistent": True,
                "issues": [
                    {
                        "kind": "cross_period_payment",
                        "severity": "info",
                        "message": "1 invoice(s) paid this month were issued in another month",
                        "expected": "0",
                        "actual": "1"
                    }
                ],
                "checked_at": "2025-09-30T12:00:00Z"
            }
        }
