import pytest

from ridematch.models import base


@pytest.fixture
def captured(monkeypatch):
    calls = []

    def fake_create_engine(url, **kwargs):
        calls.append((url, kwargs))
        return object()

    monkeypatch.setattr(base, "create_engine", fake_create_engine)
    monkeypatch.setattr(base.settings, "persistence_timeout_seconds", 2.5)
    return calls


def test_postgres_engine_has_timeouts(captured):
    base.build_engine("postgresql://user:pw@db:5432/ridematch")

    url, kwargs = captured[0]
    assert url == "postgresql://user:pw@db:5432/ridematch"
    assert kwargs["connect_args"] == {"options": "-c statement_timeout=2500"}
    assert kwargs["pool_timeout"] == 2.5
    assert kwargs["pool_size"] == 10
    assert kwargs["max_overflow"] == 20


def test_explicit_kwargs_win(captured):
    base.build_engine("postgresql://db/ridematch", pool_size=2)
    assert captured[0][1]["pool_size"] == 2


def test_sqlite_engine_gets_no_pool_settings(captured):
    base.build_engine("sqlite://")
    _, kwargs = captured[0]
    assert "connect_args" not in kwargs
    assert "pool_timeout" not in kwargs
