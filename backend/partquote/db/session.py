import os

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")
SQL_ECHO = os.getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes")

_engine = None


def get_engine():
    global _engine
    if _engine is None:
        kwargs = {}
        if DATABASE_URL.startswith("sqlite"):
            # one shared connection keeps an in-memory database alive across sessions
            kwargs["connect_args"] = {"check_same_thread": False}
            kwargs["poolclass"] = StaticPool
        _engine = create_engine(DATABASE_URL, echo=SQL_ECHO, **kwargs)
    return _engine


def init_db() -> None:
    from partquote.models import records  # noqa: F401  registers tables

    SQLModel.metadata.create_all(get_engine())


def get_session() -> Session:
    return Session(get_engine())
