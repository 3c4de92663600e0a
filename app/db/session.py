# app/db/session.py
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings


def _normalize(url: str) -> str:
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url and url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _install_sqlite_locking(engine: Engine) -> None:
    # SQLite ignores SELECT ... FOR UPDATE. Starting every transaction with
    # BEGIN IMMEDIATE takes the write lock before the first read, so the
    # lock-then-check sequence in the services stays exclusive.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        _enable_foreign_keys(dbapi_connection, connection_record)

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(url: str, **kwargs: Any) -> Engine:
    url = _normalize(url)
    timeout = settings.TRANSACTION_TIMEOUT_SECONDS
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": timeout}
        if url in {"sqlite://", "sqlite:///:memory:"}:
            # one shared connection, so there is nothing to lock against
            kwargs.setdefault("poolclass", StaticPool)
            engine = create_engine(url, connect_args=connect_args, **kwargs)
            event.listen(engine, "connect", _enable_foreign_keys)
            return engine
        engine = create_engine(url, connect_args=connect_args, **kwargs)
        _install_sqlite_locking(engine)
        return engine

    connect_args = {"options": f"-c statement_timeout={timeout * 1000}"}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


SQLALCHEMY_DATABASE_URL = _normalize(settings.DATABASE_URL)

engine = make_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = make_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
