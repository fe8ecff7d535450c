"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL (singleton)

Responsabilidades:
  - Inicializar, exponer y cerrar el pool de conexiones.
  - Configurar conexiones: statement_timeout (cancelación de queries colgadas).
  - Devolver un pool instrumentado (observabilidad sin tocar repos).

Colaboradores:
  - psycopg_pool.ConnectionPool
  - infrastructure/db/instrumentation.InstrumentedConnectionPool
  - crosscutting/config (timeouts)

Principios:
  - Fail-fast (doble init, uso sin init)
  - Encapsulación (pool global único)
  - Seguro para llamadas concurrentes: la concurrencia la resuelve el pool
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Optional

from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError
from .instrumentation import InstrumentedConnectionPool

_pool: Optional[InstrumentedConnectionPool] = None
_pool_lock = threading.Lock()


def _configure_connection(conn) -> None:
    """
    Configura cada conexión nueva del pool.

    statement_timeout hace que Postgres cancele la query en curso; el error
    llega al repositorio como cualquier otra falla de DB.
    """
    timeout_ms = int(get_settings().db_statement_timeout_ms)
    if timeout_ms > 0:
        conn.execute(f"SET statement_timeout = {timeout_ms}")
        conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int):
    """
    Inicializa el pool (una vez por proceso).

    Devuelve un pool instrumentado.
    """
    global _pool

    with _pool_lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("Pool already initialized.")

        logger.info(
            "Inicializando pool DB",
            extra={"min_size": min_size, "max_size": max_size},
        )

        real_pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            timeout=get_settings().db_pool_timeout_seconds,
            configure=_configure_connection,
            open=True,
        )

        _pool = InstrumentedConnectionPool(real_pool)

        logger.info(
            "Pool DB inicializado",
            extra={"min_size": min_size, "max_size": max_size},
        )

        return _pool


def get_pool() -> InstrumentedConnectionPool:
    """
    Retorna el pool instrumentado singleton.
    """
    if _pool is None:
        raise PoolNotInitializedError("Pool not initialized. Call init_pool() first.")
    return _pool


def close_pool() -> None:
    """
    Cierra el pool (idempotente).
    """
    global _pool

    with _pool_lock:
        if _pool is not None:
            logger.info("Cerrando pool DB")
            try:
                _pool.close()
            finally:
                _pool = None
            logger.info("Pool DB cerrado")


def reset_pool() -> None:
    """
    Reset para tests: descarta el singleton aunque close() falle.
    """
    global _pool

    with _pool_lock:
        if _pool is not None:
            try:
                _pool.close()
            except Exception as exc:
                logger.warning("Fallo al cerrar pool en reset", extra={"error": str(exc)})
        _pool = None
