"""
===============================================================================
CRC CARD — infrastructure/db/errors.py
===============================================================================
Componente:
  Errores del ciclo de vida del pool y de adquisición de conexiones

Responsabilidades:
  - Distinguir "pool no inicializado", "pool ya inicializado" y "no se pudo
    obtener/validar una conexión".
  - Ser DatabaseError (kind PERSISTENCE): el caller de begin_transaction o de
    un repositorio recibe el mismo contrato (kind, error_id, to_response)
    que cualquier otra falla de DB.

Colaboradores:
  - crosscutting.exceptions.DatabaseError
  - infrastructure/db/pool.py, instrumentation.py
===============================================================================
"""

from ...crosscutting.exceptions import DatabaseError


class DatabasePoolError(DatabaseError):
    """Base de errores del pool de conexiones."""

    error_code: str = "DATABASE_POOL_ERROR"


class PoolAlreadyInitializedError(DatabasePoolError):
    """init_pool() llamado más de una vez en el proceso."""

    error_code: str = "DATABASE_POOL_ALREADY_INITIALIZED"


class PoolNotInitializedError(DatabasePoolError):
    """get_pool() sin init_pool() previo."""

    error_code: str = "DATABASE_POOL_NOT_INITIALIZED"


class DatabaseConnectionError(DatabasePoolError):
    """No se pudo adquirir (timeout) o validar (healthcheck) una conexión."""

    error_code: str = "DATABASE_CONNECTION_ERROR"
