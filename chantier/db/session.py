# chantier/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import os

from chantier.logger import get_logger

logger = get_logger(__name__)

_engine = None
_SessionLocal = None


def _engine_kwargs(db_url: str) -> dict:
    if not db_url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        # 内存库必须共用同一个连接，否则每个 session 看到的是空库
        kwargs["poolclass"] = StaticPool
    return kwargs


def make_engine(db_url: str):
    return create_engine(db_url, **_engine_kwargs(db_url))


def get_engine():
    global _engine
    if _engine is None:
        db_url = os.environ.get("DATABASE_URL")
        if not db_url:
            raise RuntimeError("DATABASE_URL not set")
        logger.info(f"Using database URL: {db_url}")
        _engine = make_engine(db_url)
    return _engine


def get_session():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine()
        )
    return _SessionLocal()


def reset_engine():
    """Drop the cached engine (used when DATABASE_URL changes at startup)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
