import pytest
import pytest_asyncio
from datetime import datetime
from decimal import Decimal
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.invoice import Invoice, InvoiceStatus


@pytest.fixture
def db_uri(tmp_path):
    """SQLite database file private to the test"""
    return f"sqlite+aiosqlite:///{tmp_path / 'reports_test.db'}"


@pytest_asyncio.fixture(scope="function")
async def engine(db_uri):
    """Create test database engine with a fresh schema"""
    engine = create_async_engine(db_uri, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_invoices(db_session):
    """
    Owner 1: scenario A (issued and paid in 2025-09) plus one invoice issued
    in August and paid in September. Owner 2: one large paid invoice.
    """
    invoices = [
        Invoice(owner_id=1, invoice_number="FAC-2025-0001", status=InvoiceStatus.PAID,
                amount=Decimal("100.00"), issue_date=datetime(2025, 9, 2),
                paid_date=datetime(2025, 9, 15, 10, 0)),
        Invoice(owner_id=1, invoice_number="FAC-2025-0002", status=InvoiceStatus.PAID,
                amount=Decimal("200.00"), issue_date=datetime(2025, 9, 5),
                paid_date=datetime(2025, 9, 15, 16, 30)),
        Invoice(owner_id=1, invoice_number="FAC-2025-0003", status=InvoiceStatus.SENT,
                amount=Decimal("50.00"), issue_date=datetime(2025, 9, 10)),
        Invoice(owner_id=1, invoice_number="FAC-2025-0000", status=InvoiceStatus.PAID,
                amount=Decimal("75.00"), issue_date=datetime(2025, 8, 20),
                paid_date=datetime(2025, 9, 5, 12, 0)),
        Invoice(owner_id=2, invoice_number="FAC-2025-0100", status=InvoiceStatus.PAID,
                amount=Decimal("5000.00"), issue_date=datetime(2025, 9, 3),
                paid_date=datetime(2025, 9, 4)),
    ]
    db_session.add_all(invoices)
    await db_session.commit()
    return invoices
