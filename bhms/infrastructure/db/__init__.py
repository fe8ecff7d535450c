"""Infra DB: pool + transacciones + errores tipados."""

from .errors import (
    DatabaseConnectionError,
    DatabasePoolError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from .pool import close_pool, get_pool, init_pool
from .transaction import (
    ConnectionExecContext,
    ExecContext,
    PostgresTransaction,
    begin_transaction,
    get_exec_context,
)

__all__ = [
    "init_pool",
    "get_pool",
    "close_pool",
    "begin_transaction",
    "get_exec_context",
    "ExecContext",
    "ConnectionExecContext",
    "PostgresTransaction",
    "DatabasePoolError",
    "PoolAlreadyInitializedError",
    "PoolNotInitializedError",
    "DatabaseConnectionError",
]
