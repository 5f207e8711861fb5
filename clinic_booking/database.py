from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from .config import settings


def make_engine(db_url: str, echo: bool = False) -> Engine:
    """Create an engine whose transactions serialize writers on the same rows.

    SQLite has no row locks, so every transaction is started with
    ``BEGIN IMMEDIATE``; concurrent writers then queue on the database lock
    instead of failing on lock upgrade. Other backends rely on
    ``SELECT ... FOR UPDATE`` issued by the repositories.
    """
    engine_kwargs = {}

    if db_url.startswith("sqlite"):
        engine_kwargs.update({
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DB_BUSY_TIMEOUT_SECONDS,
            }
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })

    engine = create_engine(db_url, echo=echo, **engine_kwargs)

    if db_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(bind: Optional[Engine] = None) -> None:
    # Importing the models registers their tables on SQLModel.metadata
    from .db import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
