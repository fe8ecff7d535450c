"""
===============================================================================
CRC CARD — infrastructure/db/transaction.py
===============================================================================

Componentes:
  - PostgresTransaction (handle de transacción activa)
  - begin_transaction() (coordinador: commit / rollback)
  - ConnectionExecContext + get_exec_context() (adaptador tx -> contexto)

Responsabilidades:
  - Abrir UNA conexión dedicada del pool y compartirla entre varios stores
    para que sus escrituras sean atómicas.
  - Commit al salir normalmente, rollback si hay excepción.
  - Adaptar un handle de transacción a un "contexto de ejecución" con la
    misma forma que el pool: `with ctx.connection() as conn:`.

Colaboradores:
  - infrastructure/db/pool.get_pool
  - repositorios Postgres (execute_under_transaction)
  - crosscutting.exceptions.TransactionError

Notas:
  - Los stores NO hacen commit/rollback: eso es del coordinador.
  - Un contexto de ejecución es el pool (default) o una transacción; ambos
    son intercambiables para el repositorio.
===============================================================================
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Protocol

from ...crosscutting.exceptions import TransactionError
from ...crosscutting.logger import logger


class ExecContext(Protocol):
    """Algo que entrega una conexión: el pool o una transacción activa."""

    def connection(self) -> ContextManager[Any]: ...


class PostgresTransaction:
    """
    Handle de transacción sobre una conexión psycopg.

    La conexión NO es autocommit: el primer execute abre la transacción y
    commit()/rollback() la cierran.
    """

    def __init__(self, conn) -> None:
        self._conn = conn
        self._closed = False

    @property
    def connection(self):
        return self._conn

    @property
    def closed(self) -> bool:
        return self._closed

    def commit(self) -> None:
        if self._closed:
            raise TransactionError("commit: transaction already finished")
        self._conn.commit()
        self._closed = True

    def rollback(self) -> None:
        if self._closed:
            raise TransactionError("rollback: transaction already finished")
        self._conn.rollback()
        self._closed = True


@contextmanager
def begin_transaction(pool=None) -> Iterator[PostgresTransaction]:
    """
    Abre una transacción sobre una conexión dedicada del pool.

    Uso:
        with begin_transaction() as tx:
            store.execute_under_transaction(tx).create(prop)
            other.execute_under_transaction(tx).update(prop2)
    """
    if pool is None:
        from .pool import get_pool

        pool = get_pool()

    with pool.connection() as conn:
        tx = PostgresTransaction(conn)
        try:
            yield tx
        except BaseException:
            if not tx.closed:
                logger.warning("Transacción revertida")
                tx.rollback()
            raise
        else:
            if not tx.closed:
                tx.commit()


class ConnectionExecContext:
    """
    Contexto de ejecución ligado a la conexión de una transacción.

    connection() entrega SIEMPRE la misma conexión y no la devuelve al pool
    al salir (eso lo hace begin_transaction).
    """

    def __init__(self, conn) -> None:
        self._conn = conn

    @contextmanager
    def connection(self) -> Iterator[Any]:
        yield self._conn


def get_exec_context(tx: object) -> ConnectionExecContext:
    """
    Adapta un handle de transacción a un contexto de ejecución.

    Falla con TransactionError si el handle no es una PostgresTransaction
    activa.
    """
    if not isinstance(tx, PostgresTransaction):
        raise TransactionError(
            f"unsupported transaction handle: {type(tx).__name__}"
        )
    if tx.closed:
        raise TransactionError("transaction already finished")
    return ConnectionExecContext(tx.connection)
