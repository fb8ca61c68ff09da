from __future__ import annotations

import logging
import re
from typing import Any, Sequence

import pymysql
from pymysql.cursors import DictCursor
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from promolink.core.config import Settings
from promolink.core.exceptions import ErrorKind, ServiceError

logger = logging.getLogger(__name__)

PROCEDURE_NAME_PATTERN = re.compile(r"^sp_[a-z0-9_]+$")

ResultSets = list[list[dict[str, Any]]]


def build_database_url(settings: Settings) -> URL:
    return URL.create(
        "mysql+pymysql",
        username=settings.database_user,
        password=settings.database_password,
        host=settings.database_host,
        port=settings.database_port,
        database=settings.database_name,
        query={"charset": "utf8mb4"},
    )


def build_engine(settings: Settings) -> Engine:
    return create_engine(
        build_database_url(settings),
        future=True,
        pool_pre_ping=True,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle_seconds,
        connect_args={
            "connect_timeout": settings.database_connect_timeout_seconds,
            "read_timeout": settings.database_read_timeout_seconds,
        },
    )


def build_call_statement(name: str, param_count: int) -> str:
    if not PROCEDURE_NAME_PATTERN.match(name):
        raise ValueError(f"Invalid stored procedure name: {name!r}")
    placeholders = ", ".join(["%s"] * param_count)
    return f"CALL {name}({placeholders})"


class Database:
    """Stored-procedure gateway over a pooled SQLAlchemy engine.

    The engine is created lazily so the application can start (and serve the
    routes that do not touch MySQL) before the first call is made.
    """

    def __init__(self, settings: Settings, engine: Engine | None = None) -> None:
        self._settings = settings
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(self._settings)
        return self._engine

    def call_procedure(self, name: str, params: Sequence[Any] = ()) -> ResultSets:
        statement = build_call_statement(name, len(params))
        try:
            connection = self.engine.raw_connection()
        except SQLAlchemyError as exc:
            logger.error("Could not acquire a database connection for %s: %s", name, type(exc).__name__)
            raise ServiceError(ErrorKind.DATABASE, "Could not connect to the database") from exc

        try:
            with connection.cursor(DictCursor) as cursor:
                cursor.execute(statement, tuple(params))
                result_sets = _read_result_sets(cursor)
            connection.commit()
        except pymysql.MySQLError as exc:
            try:
                connection.rollback()
            except pymysql.MySQLError as rollback_exc:
                logger.error("Rollback after %s failed: %s", name, type(rollback_exc).__name__)
            logger.error("Stored procedure %s failed: %s", name, exc)
            raise ServiceError(ErrorKind.DATABASE, f"Failed to execute {name}") from exc
        finally:
            connection.close()

        logger.debug("Stored procedure %s returned %s result sets", name, len(result_sets))
        return result_sets

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


def _read_result_sets(cursor: Any) -> ResultSets:
    result_sets: ResultSets = []
    while True:
        # The trailing status packet of a CALL has no description.
        if cursor.description is not None:
            result_sets.append([dict(row) for row in cursor.fetchall()])
        if not cursor.nextset():
            break
    return result_sets
