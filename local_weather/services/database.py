from __future__ import annotations

import threading
from typing import Optional

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from ..ingestion.models import create_tables

logger = structlog.get_logger()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the process-wide SQLAlchemy engine (and its connection pool).

    `open()` at startup, `close()` at shutdown. Readers and the ingestion job
    share the engine; each unit of work opens its own session.
    """

    def __init__(self, url: str):
        self.url = url
        self._engine: Optional[Engine] = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> Engine:
        with self._lock:
            if self._engine is None:
                engine = create_engine(self.url, future=True)
                if engine.dialect.name == "sqlite":
                    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
                create_tables(engine)
                self._engine = engine
                logger.info("database_opened", url=engine.url.render_as_string(hide_password=True))
            return self._engine

    def close(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
                logger.info("database_closed")

    def __enter__(self) -> "Database":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
