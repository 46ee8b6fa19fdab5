from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool


def make_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite"):
        # For in-memory SQLite (tests) we need a single shared connection across threads.
        # StaticPool makes the same connection reused for the whole process.
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            pool_pre_ping=True,
        )
    return create_engine(db_url, pool_pre_ping=True)


def check_database(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
