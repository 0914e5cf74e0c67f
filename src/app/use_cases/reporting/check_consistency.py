"""ConsistencyChecker Use Case

Cross-checks the figures of a unified report against each other. Findings
are returned as data and never raised.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List

from src.domain.invoice import InvoiceStatus
from .dtos import (
    ConsistencyIssueDTO,
    ConsistencyResultDTO,
    IssueSeverity,
    UnifiedReportDTO,
)

logger = logging.getLogger(__name__)

REVENUE_TOLERANCE = Decimal("0.01")
PERCENTAGE_TOLERANCE = Decimal("0.1")

STATUS_COUNT_MISMATCH = "status_count_mismatch"
REVENUE_SUM_MISMATCH = "revenue_sum_mismatch"
PAID_COUNT_MISMATCH = "paid_count_mismatch"
PERCENTAGE_SUM_MISMATCH = "percentage_sum_mismatch"
SUMMARY_MISMATCH = "summary_mismatch"
CROSS_PERIOD_PAYMENT = "cross_period_payment"


class ConsistencyChecker:
    """
    Use Case: Check a unified report for internal consistency

    Checks:
    1. Status bucket counts add up to total_invoices
    2. Daily revenue adds up to total_revenue (within 0.01)
    3. Daily counts add up to total_paid_count
    4. Percentages add up to 100 (within 0.1) when there are invoices
    5. Monthly summary copies agree with the reports
    6. Paid invoices issued this month vs invoices paid this month; a
       difference is reported as informational cross_period_payment

    A report is consistent when no issue has error severity.
    """

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.clock = clock

    def check(self, report: UnifiedReportDTO) -> ConsistencyResultDTO:
        distribution = report.status_distribution
        trend = report.revenue_trend
        issues: List[ConsistencyIssueDTO] = []

        bucket_count = sum(b.count for b in distribution.buckets)
        if bucket_count != distribution.total_invoices:
            issues.append(self._error(
                STATUS_COUNT_MISMATCH,
                "Status bucket counts do not add up to the number of invoices",
                distribution.total_invoices,
                bucket_count,
            ))

        daily_revenue = sum((b.revenue for b in trend.daily_buckets), Decimal("0"))
        if abs(trend.total_revenue - daily_revenue) > REVENUE_TOLERANCE:
            issues.append(self._error(
                REVENUE_SUM_MISMATCH,
                "Daily revenue does not add up to the total revenue",
                trend.total_revenue,
                daily_revenue,
            ))

        daily_count = sum(b.count for b in trend.daily_buckets)
        if daily_count != trend.total_paid_count:
            issues.append(self._error(
                PAID_COUNT_MISMATCH,
                "Daily payment counts do not add up to the number of paid invoices",
                trend.total_paid_count,
                daily_count,
            ))

        if distribution.total_invoices > 0:
            percentage_sum = sum((b.percentage for b in distribution.buckets), Decimal("0"))
            if abs(percentage_sum - 100) > PERCENTAGE_TOLERANCE:
                issues.append(self._error(
                    PERCENTAGE_SUM_MISMATCH,
                    "Status percentages do not add up to 100",
                    Decimal("100.0"),
                    percentage_sum,
                ))

        issues.extend(self._check_summary(report))

        paid_issued = distribution.count_for(InvoiceStatus.PAID)
        if paid_issued != trend.total_paid_count:
            issues.append(ConsistencyIssueDTO(
                kind=CROSS_PERIOD_PAYMENT,
                severity=IssueSeverity.INFO,
                message=(
                    f"{paid_issued} paid invoice(s) were issued in {report.month_key} "
                    f"but {trend.total_paid_count} payment(s) were received in it; "
                    "some invoices were issued and paid in different months"
                ),
                expected=str(paid_issued),
                actual=str(trend.total_paid_count),
            ))

        errors = [issue for issue in issues if issue.severity == IssueSeverity.ERROR]
        if errors:
            logger.warning(
                f"Report for owner {report.metadata.owner_id} month {report.month_key} "
                f"has {len(errors)} consistency error(s): "
                + ", ".join(issue.kind for issue in errors)
            )

        return ConsistencyResultDTO(
            month_key=report.month_key,
            owner_id=report.metadata.owner_id,
            is_consistent=not errors,
            issues=issues,
            checked_at=self.clock(),
        )

    def _check_summary(self, report: UnifiedReportDTO) -> List[ConsistencyIssueDTO]:
        distribution = report.status_distribution
        trend = report.revenue_trend
        summary = report.monthly_summary
        pairs = [
            ("total_invoices", distribution.total_invoices, summary.total_invoices),
            ("total_revenue", trend.total_revenue, summary.total_revenue),
            ("paid_invoices", trend.total_paid_count, summary.paid_invoices),
        ]
        return [
            self._error(
                SUMMARY_MISMATCH,
                f"Monthly summary {name} disagrees with the reports",
                expected,
                actual,
            )
            for name, expected, actual in pairs
            if expected != actual
        ]

    @staticmethod
    def _error(kind: str, message: str, expected, actual) -> ConsistencyIssueDTO:
        return ConsistencyIssueDTO(
            kind=kind,
            severity=IssueSeverity.ERROR,
            message=message,
            expected=str(expected),
            actual=str(actual),
        )
