"""Invoice Repository Interface

Defines the contract the reporting layer consumes to read invoices.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.invoice import Invoice


class InvoiceRepository(ABC):
    """
    Repository interface for reading invoices

    Implementations own storage details and field normalization: every
    returned Invoice carries a single canonical amount and typed dates.
    """

    @abstractmethod
    async def find_by_owner(self, owner_id: int) -> List[Invoice]:
        """
        Retrieve every invoice belonging to an owner

        No date or status filtering is applied here; reports decide which
        invoices they need.

        Args:
            owner_id: Owning user ID

        Returns:
            List of invoices (possibly empty)

        Raises:
            RepositoryUnavailable: Storage failed or timed out
        """
        pass
