from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from attribution_service.settings import settings


class Base(DeclarativeBase):
    pass


def get_engine(url: str | None = None):
    effective_url = url or settings.DATABASE_URL
    if effective_url.startswith("sqlite"):
        # Local runs against a file database share the engine across request threads
        return create_engine(effective_url, connect_args={"check_same_thread": False})
    return create_engine(effective_url, pool_pre_ping=True)


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    """Yield a request-scoped session; callers own commit and rollback."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
