from __future__ import annotations

import pymysql
import pytest

from promolink.core.exceptions import ErrorKind, ServiceError
from promolink.db.database import Database, build_call_statement, build_database_url


class _FakeCursor:
    def __init__(self, result_sets: list[list[dict] | None], error: Exception | None = None) -> None:
        self._sets = result_sets
        self._index = 0
        self._error = error
        self.executed: tuple[str, tuple] | None = None

    def __enter__(self) -> "_FakeCursor":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def execute(self, statement: str, params: tuple) -> None:
        if self._error is not None:
            raise self._error
        self.executed = (statement, params)

    @property
    def description(self):
        return None if self._sets[self._index] is None else (("col",),)

    def fetchall(self) -> list[dict]:
        return self._sets[self._index]

    def nextset(self) -> bool | None:
        if self._index + 1 >= len(self._sets):
            return None
        self._index += 1
        return True


class _FakeConnection:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, *_args) -> _FakeCursor:
        return self._cursor

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def close(self) -> None:
        self.closed = True


class _FakeEngine:
    def __init__(self, connection: _FakeConnection) -> None:
        self._connection = connection
        self.disposed = False

    def raw_connection(self) -> _FakeConnection:
        return self._connection

    def dispose(self) -> None:
        self.disposed = True


def test_call_statement_uses_placeholders() -> None:
    assert build_call_statement("sp_log_login_create_v1", 3) == "CALL sp_log_login_create_v1(%s, %s, %s)"
    assert build_call_statement("sp_ping", 0) == "CALL sp_ping()"


@pytest.mark.parametrize("name", ["drop table x", "sp_x; DROP TABLE y", "SP_UPPER", "log_find"])
def test_call_statement_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(ValueError):
        build_call_statement(name, 1)


def test_call_procedure_reads_every_result_set(settings) -> None:
    rows = [{"ID": 1}]
    feedback = [{"sp_return_id": "", "sp_message": "", "sp_error_id": 0}]
    cursor = _FakeCursor([rows, feedback, None])
    connection = _FakeConnection(cursor)
    database = Database(settings, engine=_FakeEngine(connection))

    result_sets = database.call_procedure("sp_promo_link_find_all_v2", (1, None, 0, 10))

    assert result_sets == [rows, feedback]
    assert cursor.executed == ("CALL sp_promo_link_find_all_v2(%s, %s, %s, %s)", (1, None, 0, 10))
    assert connection.committed is True
    assert connection.closed is True


def test_call_procedure_wraps_driver_errors(settings) -> None:
    cursor = _FakeCursor([None], error=pymysql.err.OperationalError(1305, "PROCEDURE does not exist"))
    connection = _FakeConnection(cursor)
    database = Database(settings, engine=_FakeEngine(connection))

    with pytest.raises(ServiceError) as exc_info:
        database.call_procedure("sp_missing", ())

    assert exc_info.value.kind is ErrorKind.DATABASE
    assert "PROCEDURE" not in exc_info.value.message
    assert connection.rolled_back is True
    assert connection.closed is True


def test_dispose_releases_engine(settings) -> None:
    engine = _FakeEngine(_FakeConnection(_FakeCursor([None])))
    database = Database(settings, engine=engine)

    database.dispose()

    assert engine.disposed is True


def test_database_url_targets_pymysql(settings) -> None:
    url = build_database_url(settings)

    assert url.drivername == "mysql+pymysql"
    assert url.host == settings.database_host
    assert url.port == 3306
    assert url.database == settings.database_name
    assert url.query["charset"] == "utf8mb4"


def test_failed_rollback_still_raises_service_error(settings) -> None:
    class _DeadConnection(_FakeConnection):
        def rollback(self) -> None:
            raise pymysql.err.InterfaceError(0, "connection lost")

    cursor = _FakeCursor([None], error=pymysql.err.OperationalError(2013, "Lost connection"))
    connection = _DeadConnection(cursor)
    database = Database(settings, engine=_FakeEngine(connection))

    with pytest.raises(ServiceError) as exc_info:
        database.call_procedure("sp_promo_link_find_all_v2", (1, None, 0, 10))

    assert exc_info.value.kind is ErrorKind.DATABASE
    assert connection.closed is True
