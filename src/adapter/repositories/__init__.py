from .invoice_repository import SqlAlchemyInvoiceRepository
from .memory_invoice_repository import InMemoryInvoiceRepository, normalize_invoice

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "InMemoryInvoiceRepository",
    "normalize_invoice",
]
