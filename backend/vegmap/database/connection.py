from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
import os
from dotenv import load_dotenv, find_dotenv

# plain load_dotenv() misses the root .env when started from backend/
load_dotenv(find_dotenv(usecwd=True), override=False)


def build_database_url() -> str:
    """Build the async SQLAlchemy URL from DATABASE_URL or DB_* variables."""
    raw = os.getenv("DATABASE_URL")

    if not raw:
        db_host = os.getenv("DB_HOST", "localhost")
        db_port = os.getenv("DB_PORT", "5432")
        db_user = os.getenv("DB_USER", "vegmap_user")
        db_password = os.getenv("DB_PASSWORD", "vegmap_password")
        db_name = os.getenv("DB_NAME", "vegmap_db")
        return f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    # Postgres URLs are always driven through psycopg3
    if raw.startswith("postgresql+asyncpg://"):
        raw = raw.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)
    elif raw.startswith("postgresql://"):
        raw = raw.replace("postgresql://", "postgresql+psycopg://", 1)
    elif raw.startswith("postgres://"):
        raw = raw.replace("postgres://", "postgresql+psycopg://", 1)
    return raw


DATABASE_URL = build_database_url()

engine_kwargs = {"echo": False, "pool_pre_ping": True}
if DATABASE_URL.startswith("postgresql"):
    engine_kwargs.update(pool_size=5, max_overflow=10)

engine = create_async_engine(DATABASE_URL, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)

Base = declarative_base()


async def get_db():
    """Dependency that yields an async DB session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
