"""
Name: Database Pool Tests

Responsibilities:
  - Test pool lifecycle (init, get, close, reset)
  - Test connection configuration (statement_timeout)
  - Test instrumentation wrapper (healthcheck, acquisition errors)

Notes:
  - Uses mocking for ConnectionPool (no real DB)
"""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from bhms.infrastructure.db.errors import (
    DatabaseConnectionError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from bhms.infrastructure.db.instrumentation import (
    InstrumentedConnectionPool,
    TimedConnection,
    statement_kind,
)
from bhms.infrastructure.db.pool import (
    _configure_connection,
    close_pool,
    get_pool,
    init_pool,
    reset_pool,
)


@pytest.fixture(autouse=True)
def clean_pool():
    reset_pool()
    yield
    reset_pool()


@pytest.mark.unit
class TestPoolLifecycle:
    """Test pool initialization and cleanup."""

    def test_init_pool_creates_instrumented_pool(self):
        with patch("bhms.infrastructure.db.pool.ConnectionPool") as MockPool:
            mock_pool = MagicMock()
            MockPool.return_value = mock_pool

            result = init_pool("postgresql://test", min_size=2, max_size=10)

            MockPool.assert_called_once()
            kwargs = MockPool.call_args.kwargs
            assert kwargs["min_size"] == 2
            assert kwargs["max_size"] == 10
            assert kwargs["configure"] is _configure_connection
            assert isinstance(result, InstrumentedConnectionPool)
            assert result.inner is mock_pool
            assert get_pool() is result

    def test_init_pool_twice_raises_error(self):
        with patch("bhms.infrastructure.db.pool.ConnectionPool"):
            init_pool("postgresql://test", min_size=2, max_size=10)

            with pytest.raises(PoolAlreadyInitializedError, match="already initialized"):
                init_pool("postgresql://test", min_size=2, max_size=10)

    def test_get_pool_without_init_raises_error(self):
        with pytest.raises(PoolNotInitializedError, match="not initialized"):
            get_pool()

    def test_close_pool_clears_singleton(self):
        with patch("bhms.infrastructure.db.pool.ConnectionPool") as MockPool:
            mock_pool = MagicMock()
            MockPool.return_value = mock_pool

            init_pool("postgresql://test", min_size=2, max_size=10)
            close_pool()

            mock_pool.close.assert_called_once()
            with pytest.raises(PoolNotInitializedError):
                get_pool()

    def test_close_pool_is_idempotent(self):
        close_pool()
        close_pool()

    def test_reset_pool_survives_close_failure(self):
        with patch("bhms.infrastructure.db.pool.ConnectionPool") as MockPool:
            mock_pool = MagicMock()
            mock_pool.close.side_effect = RuntimeError("boom")
            MockPool.return_value = mock_pool

            init_pool("postgresql://test", min_size=2, max_size=10)
            reset_pool()

            # Should not raise
            init_pool("postgresql://test", min_size=2, max_size=10)


@pytest.mark.unit
class TestConfigureConnection:
    def test_sets_statement_timeout(self):
        conn = MagicMock()

        _configure_connection(conn)

        conn.execute.assert_called_once_with("SET statement_timeout = 30000")
        conn.commit.assert_called_once()


@contextmanager
def _yielding(conn):
    yield conn


@pytest.mark.unit
class TestInstrumentation:
    def test_statement_kind(self):
        assert statement_kind("  select 1") == "SELECT"
        assert statement_kind("") == "UNKNOWN"

    def test_connection_is_timed_and_healthchecked(self):
        conn = MagicMock()
        inner = MagicMock()
        inner.connection.return_value = _yielding(conn)
        pool = InstrumentedConnectionPool(inner, slow_query_seconds=10, healthcheck=True)

        with pool.connection() as wrapped:
            assert isinstance(wrapped, TimedConnection)
            assert wrapped.inner is conn
            wrapped.execute("SELECT 2")

        assert [c.args[0] for c in conn.execute.call_args_list] == [
            "SELECT 1",
            "SELECT 2",
        ]

    def test_acquisition_failure_raises_connection_error(self):
        inner = MagicMock()
        inner.connection.return_value.__enter__.side_effect = TimeoutError("pool timeout")
        pool = InstrumentedConnectionPool(inner, slow_query_seconds=10, healthcheck=False)

        with pytest.raises(DatabaseConnectionError, match="Could not acquire"):
            with pool.connection():
                pass

    def test_failed_healthcheck_raises_connection_error(self):
        conn = MagicMock()
        conn.execute.side_effect = OSError("server closed the connection")
        inner = MagicMock()
        inner.connection.return_value = _yielding(conn)
        pool = InstrumentedConnectionPool(inner, slow_query_seconds=10, healthcheck=True)

        with pytest.raises(DatabaseConnectionError, match="healthcheck"):
            with pool.connection():
                pass

    def test_slow_query_is_logged(self, caplog):
        conn = MagicMock()
        timed = TimedConnection(conn, slow_query_seconds=0)

        with caplog.at_level("WARNING", logger="bhms"):
            timed.execute("UPDATE properties SET name = %(name)s", {"name": "x"})

        assert any(r.getMessage() == "DB query lenta" for r in caplog.records)
        assert any(getattr(r, "kind", None) == "UPDATE" for r in caplog.records)
