"""ReportAggregator Use Case

Builds the dashboard report for one owner and one month: status distribution
(keyed on issue date), revenue trend (keyed on payment date) and a monthly
summary derived from those two.
"""

import logging
import time
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional, Union

from src.app.errors import (
    InternalAggregationError,
    InvalidArgument,
    RepositoryUnavailable,
)
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services import invoice_filter
from src.app.services.aggregation_cache import MISS, AggregationCache, CacheKey
from src.app.services.invoice_filter import FilterCriteria
from src.domain.invoice import DateField, Invoice, InvoiceStatus
from src.domain.month_key import MonthKey, day_key
from .dtos import (
    DailyRevenueBucketDTO,
    MonthlySummaryDTO,
    ReportMetadataDTO,
    RevenueTrendReportDTO,
    StatusBucketDTO,
    StatusDistributionReportDTO,
    UnifiedReportDTO,
)

logger = logging.getLogger(__name__)

UNIFIED_REPORT = "unified"

ZERO = Decimal("0")
Q1 = Decimal("0.1")
Q2 = Decimal("0.01")
PERCENT_ROUNDING = Decimal("0.05")
STATUS_ORDER = {status: index for index, status in enumerate(InvoiceStatus)}


def validate_owner_id(owner_id) -> int:
    if isinstance(owner_id, bool) or not isinstance(owner_id, int) or owner_id <= 0:
        raise InvalidArgument(
            "owner_id", f"Invalid owner id {owner_id!r}, must be a positive integer"
        )
    return owner_id


def validate_month_key(month_key) -> MonthKey:
    if isinstance(month_key, MonthKey):
        return month_key
    return MonthKey.parse(month_key)


def _amount(invoice: Invoice) -> Decimal:
    amount = invoice.amount
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def _percentage(count: int, total: int) -> Decimal:
    """Share of count in total, in percent to one decimal place"""
    if total == 0:
        return ZERO.quantize(Q1)
    return (Decimal(count) * 100 / total).quantize(Q1, rounding=ROUND_HALF_UP)


class ReportAggregator:
    """
    Use Case: Unified dashboard report for an owner and a month

    Business Rules:
    1. owner_id and month_key are validated before touching cache or storage
    2. A cached report is returned verbatim while its TTL has not elapsed
    3. Status distribution counts invoices issued in the month, whatever
       their payment state
    4. Revenue trend counts invoices paid in the month that are in paid
       status; drifted records (paid without date, dated but not paid) are
       excluded
    5. Monthly summary is derived from the two reports, never re-queried
    6. Repository failures propagate as RepositoryUnavailable; no zeroed
       report is ever fabricated

    Flow:
    1. Validate arguments
    2. Check cache
    3. Fetch all invoices of the owner
    4. Build distribution, trend and summary
    5. Verify internal invariants
    6. Cache and return
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        cache: Optional[AggregationCache] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.invoice_repo = invoice_repo
        self.cache = cache if cache is not None else AggregationCache()
        self.clock = clock

    async def get_unified_report(
        self, owner_id: int, month_key: Union[str, MonthKey]
    ) -> UnifiedReportDTO:
        """
        Build (or return the cached) unified report

        Args:
            owner_id: Owning user ID (positive integer)
            month_key: Month as "YYYY-MM" or MonthKey

        Returns:
            UnifiedReportDTO

        Raises:
            InvalidArgument: owner_id or month_key is invalid
            RepositoryUnavailable: Invoices could not be fetched
            InternalAggregationError: A report invariant did not hold
        """
        owner_id = validate_owner_id(owner_id)
        month = validate_month_key(month_key)

        cache_key = CacheKey(owner_id=owner_id, report_kind=UNIFIED_REPORT, month_key=month)
        cached = self.cache.get(cache_key)
        if cached is not MISS:
            return cached

        start_time = time.time()
        invoices = await self._fetch_invoices(owner_id)

        distribution = self._build_status_distribution(invoices, owner_id, month)
        trend = self._build_revenue_trend(invoices, owner_id, month)
        summary = self._build_monthly_summary(distribution, trend)

        report = UnifiedReportDTO(
            month_key=str(month),
            status_distribution=distribution,
            revenue_trend=trend,
            monthly_summary=summary,
            metadata=ReportMetadataDTO(generated_at=self.clock(), owner_id=owner_id),
        )
        self._verify(report)

        self.cache.set(cache_key, report)

        execution_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Generated report for owner {owner_id} month {month}: "
            f"{distribution.total_invoices} issued, "
            f"{trend.total_paid_count} paid, revenue={trend.total_revenue} "
            f"in {execution_time_ms}ms"
        )
        return report

    async def get_status_distribution(
        self, owner_id: int, month_key: Union[str, MonthKey]
    ) -> StatusDistributionReportDTO:
        report = await self.get_unified_report(owner_id, month_key)
        return report.status_distribution

    async def get_revenue_trend(
        self, owner_id: int, month_key: Union[str, MonthKey]
    ) -> RevenueTrendReportDTO:
        report = await self.get_unified_report(owner_id, month_key)
        return report.revenue_trend

    async def get_monthly_summary(
        self, owner_id: int, month_key: Union[str, MonthKey]
    ) -> MonthlySummaryDTO:
        report = await self.get_unified_report(owner_id, month_key)
        return report.monthly_summary

    def invalidate(
        self, owner_id: int, month_key: Optional[Union[str, MonthKey]] = None
    ) -> int:
        """
        Evict cached reports after an invoice mutation

        Args:
            owner_id: Owner whose invoices changed
            month_key: Month to evict; every month of the owner when omitted

        Returns:
            Number of evicted cache entries
        """
        owner_id = validate_owner_id(owner_id)
        month = validate_month_key(month_key) if month_key is not None else None
        evicted = self.cache.invalidate_owner(owner_id, month)
        logger.info(
            f"Invalidated {evicted} cached report(s) for owner {owner_id}"
            + (f" month {month}" if month else "")
        )
        return evicted

    async def _fetch_invoices(self, owner_id: int) -> List[Invoice]:
        try:
            return list(await self.invoice_repo.find_by_owner(owner_id))
        except RepositoryUnavailable:
            logger.error(f"Invoice repository unavailable for owner {owner_id}")
            raise
        except Exception as e:
            logger.error(f"Failed to fetch invoices for owner {owner_id}: {e}")
            raise RepositoryUnavailable(
                "Failed to fetch invoices", reason=str(e)
            ) from e

    def _build_status_distribution(
        self, invoices: List[Invoice], owner_id: int, month: MonthKey
    ) -> StatusDistributionReportDTO:
        issued = invoice_filter.compose(
            invoices,
            FilterCriteria(owner_id=owner_id, month_key=month, date_field=DateField.ISSUE_DATE),
        )

        counts: Dict[InvoiceStatus, int] = defaultdict(int)
        amounts: Dict[InvoiceStatus, Decimal] = defaultdict(lambda: ZERO)
        for invoice in issued:
            status = InvoiceStatus(invoice.status)
            counts[status] += 1
            amounts[status] += _amount(invoice)

        statuses = sorted(counts, key=lambda s: (-counts[s], STATUS_ORDER[s]))

        buckets = [
            StatusBucketDTO(
                status=status,
                count=counts[status],
                amount=amounts[status],
                percentage=_percentage(counts[status], len(issued)),
            )
            for status in statuses
        ]
        return StatusDistributionReportDTO(
            month_key=str(month),
            total_invoices=len(issued),
            total_amount=sum((b.amount for b in buckets), ZERO),
            buckets=buckets,
        )

    def _build_revenue_trend(
        self, invoices: List[Invoice], owner_id: int, month: MonthKey
    ) -> RevenueTrendReportDTO:
        paid_in_month = invoice_filter.compose(
            invoices,
            FilterCriteria(owner_id=owner_id, month_key=month, date_field=DateField.PAID_DATE),
        )
        collected = invoice_filter.by_status(paid_in_month, InvoiceStatus.PAID)

        excluded = len(paid_in_month) - len(collected)
        if excluded:
            logger.warning(
                f"Excluded {excluded} invoice(s) of owner {owner_id} with a "
                f"payment date in {month} but not in paid status"
            )

        paid_issued = invoice_filter.compose(
            invoices,
            FilterCriteria(
                owner_id=owner_id,
                status=InvoiceStatus.PAID,
                month_key=month,
                date_field=DateField.ISSUE_DATE,
            ),
        )
        undated = sum(1 for invoice in paid_issued if invoice.paid_date is None)
        if undated:
            logger.warning(
                f"Excluded {undated} paid invoice(s) of owner {owner_id} issued "
                f"in {month} without a payment date"
            )

        revenue_by_day: Dict = defaultdict(lambda: ZERO)
        count_by_day: Dict = defaultdict(int)
        for invoice in collected:
            day = day_key(invoice.paid_date)
            revenue_by_day[day] += _amount(invoice)
            count_by_day[day] += 1

        daily_buckets = [
            DailyRevenueBucketDTO(date=day, revenue=revenue_by_day[day], count=count_by_day[day])
            for day in sorted(revenue_by_day)
        ]
        return RevenueTrendReportDTO(
            month_key=str(month),
            total_revenue=sum((b.revenue for b in daily_buckets), ZERO),
            total_paid_count=sum(b.count for b in daily_buckets),
            daily_buckets=daily_buckets,
        )

    @staticmethod
    def _build_monthly_summary(
        distribution: StatusDistributionReportDTO, trend: RevenueTrendReportDTO
    ) -> MonthlySummaryDTO:
        total = distribution.total_invoices
        if total:
            average = (distribution.total_amount / total).quantize(Q2, rounding=ROUND_HALF_UP)
            rate = (Decimal(trend.total_paid_count) * 100 / total).quantize(Q1, rounding=ROUND_HALF_UP)
        else:
            average = ZERO.quantize(Q2)
            rate = ZERO.quantize(Q1)

        return MonthlySummaryDTO(
            average_invoice_value=average,
            payment_rate=rate,
            total_invoices=total,
            total_revenue=trend.total_revenue,
            paid_invoices=trend.total_paid_count,
            status_counts={b.status: b.count for b in distribution.buckets},
        )

    @staticmethod
    def _verify(report: UnifiedReportDTO) -> None:
        distribution = report.status_distribution
        trend = report.revenue_trend

        if sum(b.count for b in distribution.buckets) != distribution.total_invoices:
            raise InternalAggregationError(
                "Status bucket counts do not add up to the invoice total",
                reason=f"month={report.month_key}",
            )
        # each bucket is off by at most half a tenth after rounding
        tolerance = PERCENT_ROUNDING * len(distribution.buckets)
        percentage_sum = sum((b.percentage for b in distribution.buckets), ZERO)
        if distribution.total_invoices and abs(percentage_sum - 100) > tolerance:
            raise InternalAggregationError(
                "Status percentages do not add up to 100",
                reason=f"month={report.month_key} sum={percentage_sum}",
            )
        if sum(b.revenue for b in trend.daily_buckets) != trend.total_revenue:
            raise InternalAggregationError(
                "Daily revenue does not add up to the revenue total",
                reason=f"month={report.month_key}",
            )
