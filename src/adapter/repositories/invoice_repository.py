"""SQLAlchemy Invoice Repository Implementation

Implements invoice reads using SQLAlchemy async session.
"""

import asyncio
import logging
from typing import List
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.errors import RepositoryUnavailable
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice

logger = logging.getLogger(__name__)


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations. The invoices table already
    stores the canonical amount column, so rows are returned as-is.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_owner(self, owner_id: int) -> List[Invoice]:
        """
        Retrieve every invoice belonging to an owner

        Args:
            owner_id: Owning user ID

        Returns:
            List of invoices ordered by issue date

        Raises:
            RepositoryUnavailable: Query failed or timed out
        """
        statement = (
            select(Invoice)
            .where(Invoice.owner_id == owner_id)
            .order_by(Invoice.issue_date, Invoice.id)
        )
        try:
            result = await self.session.execute(statement)
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error(f"Invoice query failed for owner {owner_id}: {e}")
            raise RepositoryUnavailable(
                "Invoice storage is unavailable", reason=str(e)
            ) from e
        return list(result.scalars().all())
