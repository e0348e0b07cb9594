# vetclinic/database.py
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from vetclinic.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Engine
#
# Postgres (Supabase pooler, session mode):
#   one pooled connection, no overflow, pre-ping, SSL required.
#   Session mode rejects extra clients with
#   "MaxClientsInSessionMode: max clients reached".
#
# SQLite (local runs, tests):
#   a single shared connection usable from any thread.
# ---------------------------------------------------------


def build_engine(db_url: str):
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if "sslmode=" not in db_url:
        separator = "&" if "?" in db_url else "?"
        db_url = f"{db_url}{separator}sslmode=require"

    return create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables() -> None:
    """Create missing clinic tables. Runs from the app lifespan."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    Request-scoped session dependency.

    Services commit; repositories only flush. Anything left uncommitted
    when the request ends is rolled back on close.
    """
    with Session(engine) as session:
        yield session
