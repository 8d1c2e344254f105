from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from app.config.settings import settings
from app.infrastructure.database.models import Base


def make_session_factory(bind: AsyncEngine):
    return sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


# Create async engine
engine = create_async_engine(settings.DATABASE_URL, echo=False, future=True)

# Create session factory
AsyncSessionLocal = make_session_factory(engine)


# Initialize database (optionally create the catalog tables, then check connection)
async def init_db(bind: AsyncEngine = engine, create_tables: bool = False) -> None:
    async with bind.begin() as conn:
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("SELECT 1"))
