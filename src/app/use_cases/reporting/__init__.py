"""Dashboard reporting use cases"""
from .report_aggregator import ReportAggregator
from .check_consistency import ConsistencyChecker
from .dtos import (
    StatusBucketDTO,
    StatusDistributionReportDTO,
    DailyRevenueBucketDTO,
    RevenueTrendReportDTO,
    MonthlySummaryDTO,
    ReportMetadataDTO,
    UnifiedReportDTO,
    IssueSeverity,
    ConsistencyIssueDTO,
    ConsistencyResultDTO,
)

__all__ = [
    "ReportAggregator",
    "ConsistencyChecker",
    "StatusBucketDTO",
    "StatusDistributionReportDTO",
    "DailyRevenueBucketDTO",
    "RevenueTrendReportDTO",
    "MonthlySummaryDTO",
    "ReportMetadataDTO",
    "UnifiedReportDTO",
    "IssueSeverity",
    "ConsistencyIssueDTO",
    "ConsistencyResultDTO",
]
