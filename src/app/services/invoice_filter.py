"""Invoice Filter Service

Pure filtering functions over in-memory invoice lists. None of them mutate
their input, and none of them ever guess which date field to use: callers
name the field explicitly.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Union

from src.app.errors import InvalidArgument
from src.domain.invoice import DateField, Invoice, InvoiceStatus
from src.domain.month_key import MonthKey, range_for, to_utc


@dataclass(frozen=True)
class FilterCriteria:
    """Optional criteria applied by compose() in owner -> status -> month order"""

    owner_id: Optional[int] = None
    status: Optional[Union[InvoiceStatus, str]] = None
    month_key: Optional[MonthKey] = None
    date_field: Optional[Union[DateField, str]] = None


def _date_field(date_field) -> DateField:
    try:
        return DateField(date_field)
    except ValueError:
        allowed = ", ".join(f.value for f in DateField)
        raise InvalidArgument(
            "date_field",
            f"Invalid date field {date_field!r}, expected one of: {allowed}",
        ) from None


def _status(status) -> InvoiceStatus:
    try:
        return InvoiceStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in InvoiceStatus)
        raise InvalidArgument(
            "status", f"Invalid status {status!r}, expected one of: {allowed}"
        ) from None


def _as_datetime(value, end_of_day: bool = False) -> datetime:
    if isinstance(value, datetime):
        return to_utc(value)
    return datetime.combine(value, time.max if end_of_day else time.min)


def by_owner(invoices: Iterable[Invoice], owner_id: int) -> List[Invoice]:
    return [invoice for invoice in invoices if invoice.owner_id == owner_id]


def by_status(
    invoices: Iterable[Invoice], status: Union[InvoiceStatus, str]
) -> List[Invoice]:
    status = _status(status)
    return [invoice for invoice in invoices if invoice.status == status]


def by_month(
    invoices: Iterable[Invoice],
    month_key: MonthKey,
    date_field: Union[DateField, str],
) -> List[Invoice]:
    """
    Keep invoices whose date_field falls in month_key (UTC)

    Invoices without a value for date_field are excluded.
    """
    field = _date_field(date_field).value
    month_range = range_for(month_key)
    result = []
    for invoice in invoices:
        value = getattr(invoice, field, None)
        if value is not None and value in month_range:
            result.append(invoice)
    return result


def by_date_range(
    invoices: Iterable[Invoice],
    start: Optional[Union[date, datetime]],
    end: Optional[Union[date, datetime]],
    date_field: Union[DateField, str],
) -> List[Invoice]:
    """
    Keep invoices whose date_field lies within [start, end]

    A plain date as end bound covers that whole day. Either bound may be
    None; with both None every invoice carrying the field is kept.
    """
    field = _date_field(date_field).value
    lower = _as_datetime(start) if start is not None else None
    upper = _as_datetime(end, end_of_day=True) if end is not None else None
    if lower and upper and lower > upper:
        raise InvalidArgument("start", f"Range start {start} is after end {end}")

    result = []
    for invoice in invoices:
        value = getattr(invoice, field, None)
        if value is None:
            continue
        value = _as_datetime(value)
        if lower and value < lower:
            continue
        if upper and value > upper:
            continue
        result.append(invoice)
    return result


def compose(invoices: Iterable[Invoice], criteria: FilterCriteria) -> List[Invoice]:
    """
    Apply owner, status and month filters in that fixed order

    Stops as soon as a stage leaves nothing. A month filter requires an
    explicit date_field.
    """
    if criteria.month_key is not None and criteria.date_field is None:
        raise InvalidArgument(
            "date_field", "A month filter requires an explicit date_field"
        )

    result = list(invoices)
    if criteria.owner_id is not None:
        result = by_owner(result, criteria.owner_id)
        if not result:
            return []
    if criteria.status is not None:
        result = by_status(result, criteria.status)
        if not result:
            return []
    if criteria.month_key is not None:
        result = by_month(result, criteria.month_key, criteria.date_field)
    return result


def unique_statuses(invoices: Iterable[Invoice]) -> List[InvoiceStatus]:
    return sorted({InvoiceStatus(invoice.status) for invoice in invoices if invoice.status})


def unique_owners(invoices: Iterable[Invoice]) -> List[int]:
    return sorted({invoice.owner_id for invoice in invoices if invoice.owner_id is not None})
