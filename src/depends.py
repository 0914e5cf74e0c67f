from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.app.services.aggregation_cache import AggregationCache
from src.app.use_cases.reporting import ReportAggregator

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# One cache per process, shared by every request
report_cache = AggregationCache(
    default_ttl_ms=int(ApplicationConfig.REPORT_CACHE_TTL_SECONDS * 1000),
    maxsize=ApplicationConfig.REPORT_CACHE_MAXSIZE,
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_report_aggregator():
    async for session in get_session():
        yield ReportAggregator(SqlAlchemyInvoiceRepository(session), cache=report_cache)
