"""In-Memory Invoice Repository Implementation

Keeps invoices in a process-local list. Raw records may use any of the
historical field spellings (camelCase API payloads, legacy total/totalAmount
amounts); they are normalized into canonical Invoice entities on insert so
the reporting layer only ever sees one amount field and typed dates.
"""

import itertools
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Union
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice, InvoiceStatus

logger = logging.getLogger(__name__)

OWNER_ALIASES = ("owner_id", "ownerId", "user_id", "userId")
AMOUNT_ALIASES = ("amount", "total", "totalAmount", "total_amount")
ISSUE_DATE_ALIASES = ("issue_date", "issueDate", "invoice_date", "invoiceDate")
PAID_DATE_ALIASES = ("paid_date", "paidDate", "paid_at", "paidAt", "payment_date", "paymentDate")
DUE_DATE_ALIASES = ("due_date", "dueDate")
CREATED_AT_ALIASES = ("created_at", "createdAt")
UPDATED_AT_ALIASES = ("updated_at", "updatedAt")
NUMBER_ALIASES = ("invoice_number", "invoiceNumber")

ZERO = Decimal("0")


def _first(record: Dict[str, Any], aliases: Iterable[str]) -> Any:
    for alias in aliases:
        value = record.get(alias)
        if value is not None and value != "":
            return value
    return None


def _decimal(value: Any, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {field} value {value!r}") from e


def _datetime(value: Any, field: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Invalid {field} value {value!r}") from e
    raise ValueError(f"Invalid {field} value {value!r}")


def _date(value: Any, field: str) -> Optional[date]:
    parsed = _datetime(value, field)
    return parsed.date() if parsed is not None else None


def _amount(record: Dict[str, Any]) -> Decimal:
    value = _first(record, AMOUNT_ALIASES)
    if value is not None:
        return _decimal(value, "amount")

    subtotal = _first(record, ("subtotal",))
    tax = _first(record, ("tax_amount", "taxAmount"))
    if subtotal is not None or tax is not None:
        return _decimal(subtotal or 0, "subtotal") + _decimal(tax or 0, "tax_amount")

    logger.warning(f"Invoice {record.get('id')} carries no amount, using 0")
    return ZERO


def normalize_invoice(record: Union[Invoice, Dict[str, Any]]) -> Invoice:
    """
    Convert a raw invoice record into a canonical Invoice

    Amount resolution order: amount, total, totalAmount, then
    subtotal + taxAmount.

    Raises:
        ValueError: Record has no owner, an unknown status, a negative
            amount or an unparseable date
    """
    if isinstance(record, Invoice):
        return record

    owner_id = _first(record, OWNER_ALIASES)
    if owner_id is None:
        raise ValueError(f"Invoice {record.get('id')} has no owner")

    try:
        status = InvoiceStatus(record.get("status"))
    except ValueError as e:
        raise ValueError(f"Invoice {record.get('id')} has unknown status {record.get('status')!r}") from e

    amount = _amount(record)
    if amount < 0:
        raise ValueError(f"Invoice {record.get('id')} has negative amount {amount}")

    fields = dict(
        id=record.get("id"),
        owner_id=int(owner_id),
        invoice_number=_first(record, NUMBER_ALIASES),
        status=status,
        amount=amount,
        currency=record.get("currency") or "EUR",
        issue_date=_datetime(_first(record, ISSUE_DATE_ALIASES), "issue_date"),
        due_date=_date(_first(record, DUE_DATE_ALIASES), "due_date"),
        paid_date=_datetime(_first(record, PAID_DATE_ALIASES), "paid_date"),
    )
    created_at = _datetime(_first(record, CREATED_AT_ALIASES), "created_at")
    if created_at is not None:
        fields["created_at"] = created_at
    updated_at = _datetime(_first(record, UPDATED_AT_ALIASES), "updated_at")
    if updated_at is not None:
        fields["updated_at"] = updated_at

    invoice = Invoice(**fields)

    if invoice.status == InvoiceStatus.PAID and invoice.paid_date is None:
        logger.warning(f"Invoice {invoice.id} is paid but has no payment date")
    elif invoice.status != InvoiceStatus.PAID and invoice.paid_date is not None:
        logger.warning(
            f"Invoice {invoice.id} has a payment date but status {invoice.status.value}"
        )
    return invoice


class InMemoryInvoiceRepository(InvoiceRepository):
    """
    In-memory implementation of InvoiceRepository

    Usage:
        repo = InMemoryInvoiceRepository([
            {"id": 1, "userId": 1, "status": "paid", "total": "100.00",
             "invoiceDate": "2025-09-02", "paidDate": "2025-09-15"},
        ])
        invoices = await repo.find_by_owner(1)
    """

    def __init__(self, records: Optional[Iterable[Union[Invoice, Dict[str, Any]]]] = None):
        self._invoices: List[Invoice] = []
        self._ids = itertools.count(1)
        for record in records or []:
            self.add(record)

    def add(self, record: Union[Invoice, Dict[str, Any]]) -> Invoice:
        invoice = normalize_invoice(record)
        if invoice.id is None:
            invoice.id = self._next_id()
        self._invoices.append(invoice)
        return invoice

    def remove(self, invoice_id: int) -> bool:
        before = len(self._invoices)
        self._invoices = [i for i in self._invoices if i.id != invoice_id]
        return len(self._invoices) != before

    def all(self) -> List[Invoice]:
        return list(self._invoices)

    async def find_by_owner(self, owner_id: int) -> List[Invoice]:
        return [invoice for invoice in self._invoices if invoice.owner_id == owner_id]

    def _next_id(self) -> int:
        taken = {invoice.id for invoice in self._invoices}
        for candidate in self._ids:
            if candidate not in taken:
                return candidate
