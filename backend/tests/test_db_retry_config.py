import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from inventory_api.core.config import settings
from inventory_api.core.db_retry import is_retriable, with_db_retry


class DummyOrig(Exception):
    def __init__(self, code: int, message: str, sqlstate: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.args = (code, message)


class DummySession:
    def __init__(self):
        self.rollback_calls = 0

    async def rollback(self):
        self.rollback_calls += 1


@pytest.mark.anyio
async def test_db_retry_respects_config(monkeypatch):
    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 2)
    monkeypatch.setattr(settings, "DB_RETRY_BASE_DELAY", 0.0)
    monkeypatch.setattr(settings, "DB_RETRY_JITTER", 0.0)
    monkeypatch.setattr(settings, "DB_NOWAIT_LOCKS", True)

    session = DummySession()
    calls = {"count": 0}

    async def flaky_operation():
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("stmt", {}, DummyOrig(1213, "deadlock"))
        return "ok"

    result = await with_db_retry(session, flaky_operation)

    assert result == "ok"
    assert calls["count"] == 2
    assert session.rollback_calls == 1


@pytest.mark.anyio
async def test_nowait_lock_conflict_not_retried(monkeypatch):
    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 2)
    monkeypatch.setattr(settings, "DB_RETRY_BASE_DELAY", 0.0)
    monkeypatch.setattr(settings, "DB_RETRY_JITTER", 0.0)
    monkeypatch.setattr(settings, "DB_NOWAIT_LOCKS", True)

    session = DummySession()
    calls = {"count": 0}

    async def nowait_operation():
        calls["count"] += 1
        raise OperationalError("stmt", {}, DummyOrig(3572, "could not obtain lock"))

    with pytest.raises(OperationalError):
        await with_db_retry(session, nowait_operation)

    assert calls["count"] == 1
    assert session.rollback_calls == 0


@pytest.mark.anyio
async def test_exhausted_retries_reraise_last_error(fast_retries):
    session = DummySession()
    calls = {"count": 0}

    async def always_gone():
        calls["count"] += 1
        raise OperationalError("stmt", {}, DummyOrig(2013, "Lost connection to MySQL server"))

    with pytest.raises(OperationalError):
        await with_db_retry(session, always_gone)

    assert calls["count"] == 2
    assert session.rollback_calls == 2


def test_sqlite_busy_is_retriable():
    exc = OperationalError("stmt", {}, Exception("database is locked"))
    assert is_retriable(exc)


def test_serialization_failure_sqlstate_is_retriable():
    exc = OperationalError("stmt", {}, DummyOrig(0, "could not serialize access", "40001"))
    assert is_retriable(exc)


def test_integrity_error_is_never_retried():
    exc = IntegrityError("stmt", {}, DummyOrig(1062, "Duplicate entry 'Brand' for key 'PRIMARY'"))
    assert not is_retriable(exc)


def test_unrelated_operational_error_is_not_retried():
    exc = OperationalError("stmt", {}, Exception("unable to open database file"))
    assert not is_retriable(exc)


@pytest.mark.anyio
async def test_zero_attempts_still_runs_once(monkeypatch):
    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 0)
    session = DummySession()
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        return "ok"

    assert await with_db_retry(session, operation) == "ok"
    assert calls["count"] == 1


@pytest.mark.anyio
async def test_zero_attempts_surfaces_driver_error(monkeypatch):
    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 0)
    session = DummySession()

    async def deadlocked():
        raise OperationalError("stmt", {}, DummyOrig(1213, "deadlock"))

    with pytest.raises(OperationalError):
        await with_db_retry(session, deadlocked)
    assert session.rollback_calls == 1
