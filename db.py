# db.py
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from typing import Callable, Iterator, Optional

from config import settings


def make_engine(url: str) -> Engine:
    """
    Build an engine for `url`. SQLite connections get foreign keys switched on,
    since SQLite leaves them off per connection.
    """
    eng = create_engine(url, future=True, echo=settings.sql_echo)
    if url.startswith("sqlite"):
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    return eng


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        future=True,
        expire_on_commit=False,  # rows are read after the scope closes
    )


engine = make_engine(settings.database_url)
SessionLocal = make_session_factory(engine)


@contextmanager
def get_session(factory: Optional[Callable[[], Session]] = None) -> Iterator[Session]:
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
