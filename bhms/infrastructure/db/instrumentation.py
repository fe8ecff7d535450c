"""
===============================================================================
CRC CARD — infrastructure/db/instrumentation.py
===============================================================================

Clases:
  - TimedConnection (Proxy)
  - InstrumentedConnectionPool (Facade/Proxy)

Responsabilidades:
  - Medir duración de conn.execute(...) sin tocar repositorios.
  - Loguear slow queries (baja cardinalidad: solo el tipo de statement).
  - Healthcheck opcional al adquirir conexión (SELECT 1).

Colaboradores:
  - crosscutting.logger
  - crosscutting.config (umbral de slow query, healthcheck)
  - psycopg_pool.ConnectionPool (pool real)
===============================================================================
"""

from __future__ import annotations

import time
from typing import Any, ContextManager

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger
from .errors import DatabaseConnectionError


def statement_kind(sql: Any) -> str:
    """
    Extrae un “tipo” de statement para logs (INSERT / SELECT / ...).
    """
    parts = str(sql).split(None, 1)
    return parts[0].upper() if parts else "UNKNOWN"


class TimedConnection:
    """
    Proxy de conexión: intercepta execute para medir tiempo.

    Delegamos TODO al conn real con __getattr__; solo envolvemos execute().
    """

    def __init__(self, inner_conn, *, slow_query_seconds: float) -> None:
        self._conn = inner_conn
        self._slow = slow_query_seconds

    @property
    def inner(self):
        return self._conn

    def execute(self, sql, *args, **kwargs):
        start = time.perf_counter()
        try:
            return self._conn.execute(sql, *args, **kwargs)
        finally:
            elapsed = time.perf_counter() - start
            if elapsed >= self._slow:
                logger.warning(
                    "DB query lenta",
                    extra={"kind": statement_kind(sql), "seconds": round(elapsed, 4)},
                )

    def __getattr__(self, item: str):
        return getattr(self._conn, item)


class _ConnectionContext(ContextManager[TimedConnection]):
    """
    Context manager que envuelve el context manager del pool.
    """

    def __init__(
        self, inner_ctx, *, slow_query_seconds: float, healthcheck: bool
    ) -> None:
        self._inner_ctx = inner_ctx
        self._slow = slow_query_seconds
        self._healthcheck = healthcheck

    def __enter__(self) -> TimedConnection:
        try:
            conn = self._inner_ctx.__enter__()
        except Exception as exc:
            raise DatabaseConnectionError(
                "Could not acquire a DB connection.", original_error=exc
            ) from exc

        if self._healthcheck:
            try:
                conn.execute("SELECT 1")
            except Exception as exc:
                self._inner_ctx.__exit__(type(exc), exc, exc.__traceback__)
                raise DatabaseConnectionError(
                    "DB connection failed healthcheck.", original_error=exc
                ) from exc

        return TimedConnection(conn, slow_query_seconds=self._slow)

    def __exit__(self, exc_type, exc, tb) -> bool:
        return self._inner_ctx.__exit__(exc_type, exc, tb)


class InstrumentedConnectionPool:
    """
    Facade del pool real.

    Objetivo:
      - Que repositorios sigan haciendo: `with pool.connection() as conn:`
      - Pero `conn` sea un TimedConnection (instrumentado).
    """

    def __init__(
        self,
        inner_pool,
        *,
        slow_query_seconds: float | None = None,
        healthcheck: bool | None = None,
    ) -> None:
        self._pool = inner_pool
        if slow_query_seconds is None or healthcheck is None:
            s = get_settings()
            if slow_query_seconds is None:
                slow_query_seconds = s.db_slow_query_seconds
            if healthcheck is None:
                healthcheck = s.db_healthcheck_on_acquire
        self._slow_seconds = float(slow_query_seconds)
        self._healthcheck = bool(healthcheck)

    @property
    def inner(self):
        return self._pool

    def connection(self, *args, **kwargs) -> ContextManager[TimedConnection]:
        inner_ctx = self._pool.connection(*args, **kwargs)
        return _ConnectionContext(
            inner_ctx,
            slow_query_seconds=self._slow_seconds,
            healthcheck=self._healthcheck,
        )

    # Delegación del resto del API del pool (close, stats, ...).
    def __getattr__(self, item: str):
        return getattr(self._pool, item)
