"""Shared fixtures for unit tests"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from src.domain.invoice import Invoice, InvoiceStatus


class FakeTimer:
    """Monotonic clock stand-in advanced manually"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed UTC instant"""
    instant = datetime(2025, 10, 1, 8, 0, 0, tzinfo=timezone.utc)
    return lambda: instant


@pytest.fixture
def make_invoice():
    """Factory for canonical Invoice entities"""
    counter = {"id": 0}

    def _make_invoice(
        status: InvoiceStatus = InvoiceStatus.SENT,
        amount: str = "100.00",
        issue_date=datetime(2025, 9, 2, 9, 0),
        paid_date=None,
        owner_id: int = 1,
        **extra,
    ) -> Invoice:
        counter["id"] += 1
        return Invoice(
            id=extra.pop("id", counter["id"]),
            owner_id=owner_id,
            status=status,
            amount=Decimal(amount),
            issue_date=issue_date,
            paid_date=paid_date,
            **extra,
        )

    return _make_invoice


@pytest.fixture
def scenario_a_invoices(make_invoice):
    """Three invoices issued in 2025-09: paid 100, paid 200, sent 50"""
    return [
        make_invoice(InvoiceStatus.PAID, "100", datetime(2025, 9, 2), datetime(2025, 9, 15, 10, 0)),
        make_invoice(InvoiceStatus.PAID, "200", datetime(2025, 9, 5), datetime(2025, 9, 15, 16, 30)),
        make_invoice(InvoiceStatus.SENT, "50", datetime(2025, 9, 10)),
    ]


@pytest.fixture
def scenario_b_invoices(make_invoice):
    """One invoice issued 2025-08-20 and paid 2025-09-05"""
    return [
        make_invoice(InvoiceStatus.PAID, "75", datetime(2025, 8, 20), datetime(2025, 9, 5, 12, 0)),
    ]
