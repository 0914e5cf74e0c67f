"""Invoice Domain Entity

Read model of a billed invoice as consumed by the reporting layer.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, Integer, Numeric, String, DateTime
from src.domain.base import BaseModel


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class DateField(str, Enum):
    """Invoice date fields a report may be keyed on"""
    ISSUE_DATE = "issue_date"
    PAID_DATE = "paid_date"
    DUE_DATE = "due_date"
    CREATED_AT = "created_at"


class Invoice(BaseModel, table=True):
    """
    Invoice - Billed invoice owned by a single user

    Domain Rules:
    - owner_id scopes every report; invoices never cross owners
    - amount is the single canonical total (aliases are resolved by repositories)
    - paid_date is set if and only if status is paid
    - Timestamps without tzinfo are UTC
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_owner_id', 'owner_id'),
        Index('ix_invoices_status', 'status'),
    )

    id: int = Field(
        sa_column=Column(
            BigInteger().with_variant(Integer, "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        description="Unique invoice identifier (auto-increment)"
    )

    owner_id: int = Field(
        description="Owning user ID"
    )

    invoice_number: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Human readable invoice number (e.g., FAC-2025-0001)"
    )

    status: InvoiceStatus = Field(
        description="Invoice status (draft, sent, paid, overdue, cancelled)"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Invoice total, TTC"
    )

    currency: str = Field(
        default="EUR",
        sa_column=Column(String(3), nullable=False, default="EUR"),
        description="Currency code (ISO 4217)"
    )

    issue_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Date the invoice was billed"
    )

    due_date: Optional[date] = Field(
        default=None,
        description="Contractual payment due date"
    )

    paid_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Timestamp when payment was received"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Record creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "owner_id": 1,
                "invoice_number": "FAC-2025-0001",
                "status": "paid",
                "amount": "1200.00",
                "currency": "EUR",
                "issue_date": "2025-09-02T09:30:00Z",
                "due_date": "2025-10-02",
                "paid_date": "2025-09-15T14:00:00Z",
                "created_at": "2025-09-02T09:30:00Z",
                "updated_at": "2025-09-15T14:00:00Z"
            }
        }
