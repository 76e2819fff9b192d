from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


# ── Base class for all models ─────────────────────────────────────────
class Base(DeclarativeBase):
    pass


# ── Async Engine ──────────────────────────────────────────────────────
# Built by the app lifespan, not at import time.
def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,             # Set DEBUG=false in .env to stop SQL logs
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,    # Drops stale connections before use
    )


# ── Session Factory ───────────────────────────────────────────────────
def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def attach_database(app: FastAPI, engine: AsyncEngine) -> None:
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)


def import_models() -> None:
    """Registers every table on Base.metadata (Alembic + tests)."""
    import app.models.admin  # noqa: F401
    import app.models.aspirant  # noqa: F401
    import app.models.audit_log  # noqa: F401
    import app.models.election_timeline  # noqa: F401
    import app.models.otp_code  # noqa: F401
    import app.models.rate_limit  # noqa: F401
    import app.models.voter  # noqa: F401
    import app.models.voting  # noqa: F401


# ── FastAPI Dependency ────────────────────────────────────────────────
# Inject this into any route with: db: AsyncSession = Depends(get_db)
async def get_db(request: Request):
    async with request.app.state.sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
