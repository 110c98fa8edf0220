from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from settings import get_settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the process-wide engine. The engine owns a connection pool,
    so it is built once and shared by every request.
    """
    if database_url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


_settings = get_settings()
engine = build_engine(_settings.database_url, echo=_settings.sql_echo)


def create_db_and_tables() -> None:
    """Create all tables in the database if they don't exist."""
    SQLModel.metadata.create_all(engine)


def dispose_engine() -> None:
    """Close every pooled connection (called on shutdown)."""
    engine.dispose()


def get_session() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]
