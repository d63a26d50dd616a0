import logging
import time

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from inventory_api.database.base import Base
from inventory_api.database.engine import build_engine

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, database_url: str):
        self.url = database_url
        self.engine = build_engine(database_url)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    def create_all(self) -> None:
        # Registers the mappers on Base before creating tables.
        import inventory_api.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> float:
        """Round-trip a trivial query; return latency in milliseconds."""
        started = time.perf_counter()
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return (time.perf_counter() - started) * 1000

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    database: Database = request.app.state.database
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
