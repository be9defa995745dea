import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./itr_filing.db")

Base = declarative_base()


def build_engine(url: str = DATABASE_URL) -> Engine:
    """Engine for the document store; in-memory SQLite shares one connection across threads."""
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, future=True)
    kwargs = {"connect_args": {"check_same_thread": False}, "future": True}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind, future=True)


engine = build_engine()


def init_db(bind: Engine = None) -> None:
    from backend import db_models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
