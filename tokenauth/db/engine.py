"""
SQLAlchemy engine and session factory for the auth stores.

Usage:
    from tokenauth.db.engine import create_session_factory

    SessionLocal = create_session_factory(config.DATABASE_URL)
    with SessionLocal() as db:
        user = db.get(User, user_id)
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for all models
Base = declarative_base()


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    """Build an engine for ``database_url``, create the auth tables and return a session factory."""
    if database_url.startswith("sqlite"):
        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs = {
            "pool_pre_ping": True,  # Verify connections before use
            "pool_size": 10,
            "max_overflow": 20,
        }

    engine = create_engine(database_url, echo=echo, **engine_kwargs)

    # Import models so they register on Base.metadata
    from tokenauth.db import models  # noqa: F401

    Base.metadata.create_all(engine)

    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )
