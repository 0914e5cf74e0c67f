from .base import BaseModel
from .invoice import Invoice, InvoiceStatus, DateField
from .month_key import MonthKey, MonthRange

__all__ = [
    "BaseModel",
    "Invoice",
    "InvoiceStatus",
    "DateField",
    "MonthKey",
    "MonthRange",
]
