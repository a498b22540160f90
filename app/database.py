from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import get_settings
from app.utils.logger import logger

settings = get_settings()

_engine_kwargs = {"echo": False, "future": True}
if not settings.database_url.startswith("sqlite"):
    _engine_kwargs.update(
        pool_pre_ping=True,  # Detect and recycle stale/broken connections
        pool_recycle=300,  # Recycle connections every 5 minutes
    )

# Create async engine
engine = create_async_engine(settings.database_url, **_engine_kwargs)

# Create session factory
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()

# Dependency for FastAPI routes
async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

# Initialize database (create tables)
async def init_db():
    """Create all database tables and seed the job role catalogue"""
    # Import models to register them with Base
    from app.models import user, job_role

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created")

    if settings.seed_job_roles:
        from app.services.job_seed import seed_job_roles

        async with AsyncSessionLocal() as session:
            inserted = await seed_job_roles(session)
            if inserted:
                logger.info(f"Seeded {inserted} job roles")
