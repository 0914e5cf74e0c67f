"""Report Consistency Audit Background Worker

Recomputes dashboard reports from storage and checks them for internal
consistency. Can be run as a standalone script or integrated with a scheduler.
"""

import argparse
import asyncio
import logging
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.app.errors import InvalidArgument
from src.app.services.aggregation_cache import AggregationCache
from src.app.use_cases.reporting import (
    ConsistencyChecker,
    ConsistencyResultDTO,
    IssueSeverity,
    ReportAggregator,
)
from src.domain.month_key import MonthKey

logger = logging.getLogger(__name__)

AuditTarget = Tuple[int, MonthKey]


class ConsistencyAuditorWorker:
    """
    Background worker for dashboard report consistency audits

    Features:
    - Computes reports with a cold cache so storage is always read
    - Logs consistency errors and informational cross-period payments
    - Can run once or continuously
    - Configurable interval (default: hourly)

    Usage:
        # Run once
        worker = ConsistencyAuditorWorker()
        results = await worker.run_once([(1, MonthKey.parse("2025-09"))])

        # Run continuously
        worker = ConsistencyAuditorWorker()
        await worker.run_forever(targets, interval_seconds=3600)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
        self.checker = ConsistencyChecker()

        logger.info("ConsistencyAuditorWorker initialized")

    async def run_once(self, targets: Sequence[AuditTarget]) -> List[ConsistencyResultDTO]:
        """
        Audit every (owner_id, month) target once

        Args:
            targets: Owner and month pairs to audit

        Returns:
            One ConsistencyResultDTO per target
        """
        if not ApplicationConfig.CONSISTENCY_AUDIT_ENABLED:
            logger.info("Report consistency audit is disabled, skipping")
            return []

        results = []
        async with self.async_session_factory() as session:
            aggregator = ReportAggregator(
                SqlAlchemyInvoiceRepository(session), cache=AggregationCache()
            )
            for owner_id, month in targets:
                report = await aggregator.get_unified_report(owner_id, month)
                result = self.checker.check(report)
                self._log_result(result)
                results.append(result)
        return results

    async def run_forever(self, targets: Sequence[AuditTarget], interval_seconds: int = 3600):
        """
        Run the audit continuously at the specified interval

        Args:
            targets: Owner and month pairs to audit
            interval_seconds: Seconds between runs (default: 1 hour)
        """
        logger.info(
            f"Starting continuous report consistency audit with {interval_seconds}s interval"
        )

        while True:
            try:
                results = await self.run_once(targets)
                failed = sum(1 for r in results if not r.is_consistent)
                logger.info(
                    f"Audit cycle complete. Checked {len(results)} reports, "
                    f"{failed} inconsistent"
                )
            except Exception as e:
                logger.error(f"Audit cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("ConsistencyAuditorWorker shutdown complete")

    @staticmethod
    def _log_result(result: ConsistencyResultDTO) -> None:
        for issue in result.issues:
            if issue.severity == IssueSeverity.ERROR:
                logger.error(
                    f"  - Owner {result.owner_id} {result.month_key} {issue.kind}: "
                    f"expected={issue.expected}, actual={issue.actual}"
                )
            else:
                logger.info(
                    f"  - Owner {result.owner_id} {result.month_key} {issue.kind}: "
                    f"{issue.message}"
                )


def _month_arg(value: str) -> MonthKey:
    try:
        return MonthKey.parse(value)
    except InvalidArgument as e:
        raise argparse.ArgumentTypeError(e.message)


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Audit one owner for the current month
        python -m src.worker.consistency_auditor --owner 1 --once

        # Audit several owners for a given month every 10 minutes
        python -m src.worker.consistency_auditor --owner 1 --owner 2 --month 2025-09 --interval 600
    """
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Report Consistency Audit Worker")
    parser.add_argument(
        "--owner", type=int, action="append", required=True,
        help="Owner ID to audit (repeatable)"
    )
    parser.add_argument(
        "--month", type=_month_arg, default=None,
        help="Month to audit as YYYY-MM (default: current month)"
    )
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.CONSISTENCY_AUDIT_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: 3600 = 1 hour)"
    )
    args = parser.parse_args()

    month = args.month or MonthKey.current()
    targets = [(owner_id, month) for owner_id in args.owner]

    worker = ConsistencyAuditorWorker()

    try:
        if args.once:
            results = await worker.run_once(targets)
            for result in results:
                state = "consistent" if result.is_consistent else "INCONSISTENT"
                print(f"Owner {result.owner_id} {result.month_key}: {state}")
                for issue in result.issues:
                    print(f"  - [{issue.severity.value}] {issue.kind}: {issue.message}")
        else:
            await worker.run_forever(targets, interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
