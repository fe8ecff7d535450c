"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/property.py
============================================================
Class: PostgresPropertyRepository

Responsibilities:
- Implementar PropertyStorer sobre PostgreSQL (SQL crudo, parámetros nombrados).
- CRUD: create / update / delete / query_by_id / query_by_manager_id.
- Mapear filas <-> entidad de dominio `Property` (ida y vuelta centralizada).
- Participar de una transacción externa (execute_under_transaction) sin saber
  quién la abrió.

Collaborators:
- domain.entities.Property, PropertyStatus
- infrastructure.db.pool.get_pool (contexto de ejecución por defecto)
- infrastructure.db.transaction.get_exec_context (contexto transaccional)
- crosscutting.exceptions: DatabaseError, PropertyNotFoundError, TranslationError
- crosscutting.logger.logger
- Tabla: properties

Constraints / Notes:
- Sin lógica de negocio: el id y los timestamps los define el caller.
- Queries siempre parametrizadas (nunca interpolar input).
- update/delete sobre un id inexistente => PropertyNotFoundError
  (misma semántica que las lecturas).
- query_by_manager_id sin filas => [] (no es error).
- Sin retries: una falla se reporta inmediatamente al caller.
============================================================
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

from ....crosscutting.exceptions import (
    DatabaseError,
    PropertyNotFoundError,
    TranslationError,
)
from ....crosscutting.logger import logger
from ....domain.entities import Property, PropertyStatus
from ....domain.repositories import Transaction
from ...db.transaction import ExecContext, get_exec_context


def _to_db_property(prop: Property) -> dict[str, Any]:
    """R: Entidad -> parámetros nombrados (mismo nombre que las columnas)."""
    return {
        "id": str(prop.id),
        "manager_id": str(prop.manager_id),
        "name": prop.name,
        "address_level_1_id": prop.address_level_1_id,
        "address_level_2_id": prop.address_level_2_id,
        "address_level_3_id": prop.address_level_3_id,
        "street": prop.street,
        "status": prop.status.value,
        "created_at": prop.created_at,
        "updated_at": prop.updated_at,
    }


def _to_core_property(row: tuple) -> Property:
    """
    R: Fila -> entidad. Cualquier dato inválido (uuid mal formado, status
    desconocido) se reporta como TranslationError.
    """
    try:
        (
            property_id,
            manager_id,
            name,
            address_level_1_id,
            address_level_2_id,
            address_level_3_id,
            street,
            status,
            created_at,
            updated_at,
        ) = row
        return Property(
            id=UUID(str(property_id)),
            manager_id=UUID(str(manager_id)),
            name=name,
            address_level_1_id=address_level_1_id,
            address_level_2_id=address_level_2_id,
            address_level_3_id=address_level_3_id,
            street=street,
            status=PropertyStatus(status),
            created_at=created_at,
            updated_at=updated_at,
        )
    except (TypeError, ValueError) as exc:
        raise TranslationError(
            f"to_core_property: invalid row: {exc}", original_error=exc
        ) from exc


class PostgresPropertyRepository:
    """R: Implementación PostgreSQL de PropertyStorer."""

    # R: Mismo orden de columnas en SELECT y en el mapping.
    _COLUMNS = """
        id, manager_id, name, address_level_1_id, address_level_2_id,
        address_level_3_id, street, status, created_at, updated_at
    """

    # R: Orden determinístico para listados.
    _ORDER_BY = "ORDER BY created_at ASC, id ASC"

    def __init__(self, exec_context: Optional[ExecContext] = None):
        # R: None => pool global (lazy). Tests inyectan un pool/mock.
        self._exec_context = exec_context

    def _get_exec_context(self) -> ExecContext:
        if self._exec_context is not None:
            return self._exec_context

        from ...db.pool import get_pool

        return get_pool()

    # =========================================================
    # Helpers de ejecución (DRY + errores consistentes)
    # =========================================================
    def _execute(
        self, *, query: str, params: Mapping[str, object], context_msg: str, extra: dict
    ) -> int:
        """R: Ejecuta un write y devuelve rowcount."""
        try:
            ctx = self._get_exec_context()
            with ctx.connection() as conn:
                return conn.execute(query, dict(params)).rowcount
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchone(
        self, *, query: str, params: Mapping[str, object], context_msg: str, extra: dict
    ) -> tuple | None:
        try:
            ctx = self._get_exec_context()
            with ctx.connection() as conn:
                return conn.execute(query, dict(params)).fetchone()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchall(
        self, *, query: str, params: Mapping[str, object], context_msg: str, extra: dict
    ) -> list[tuple]:
        try:
            ctx = self._get_exec_context()
            with ctx.connection() as conn:
                return conn.execute(query, dict(params)).fetchall()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    # =========================================================
    # Public API
    # =========================================================
    def create(self, prop: Property) -> None:
        """R: Inserta la propiedad completa (id y timestamps del caller)."""
        self._execute(
            query="""
                INSERT INTO properties (
                    id, manager_id, name, address_level_1_id, address_level_2_id,
                    address_level_3_id, street, status, created_at, updated_at
                )
                VALUES (
                    %(id)s, %(manager_id)s, %(name)s, %(address_level_1_id)s,
                    %(address_level_2_id)s, %(address_level_3_id)s, %(street)s,
                    %(status)s, %(created_at)s, %(updated_at)s
                )
            """,
            params=_to_db_property(prop),
            context_msg="PostgresPropertyRepository: create failed",
            extra={"property_id": str(prop.id), "manager_id": str(prop.manager_id)},
        )

    def update(self, prop: Property) -> None:
        """
        R: Update de campos mutables. id, manager_id y created_at NO se tocan.
        """
        rowcount = self._execute(
            query="""
                UPDATE properties
                SET
                    name = %(name)s,
                    address_level_1_id = %(address_level_1_id)s,
                    address_level_2_id = %(address_level_2_id)s,
                    address_level_3_id = %(address_level_3_id)s,
                    street = %(street)s,
                    status = %(status)s,
                    updated_at = %(updated_at)s
                WHERE id = %(id)s
            """,
            params=_to_db_property(prop),
            context_msg="PostgresPropertyRepository: update failed",
            extra={"property_id": str(prop.id)},
        )
        if rowcount == 0:
            raise PropertyNotFoundError(f"update: property_id[{prop.id}]: not found")

    def delete(self, prop: Property) -> None:
        """R: Borra por id."""
        rowcount = self._execute(
            query="DELETE FROM properties WHERE id = %(id)s",
            params={"id": str(prop.id)},
            context_msg="PostgresPropertyRepository: delete failed",
            extra={"property_id": str(prop.id)},
        )
        if rowcount == 0:
            raise PropertyNotFoundError(f"delete: property_id[{prop.id}]: not found")

    def query_by_id(self, property_id: UUID) -> Property:
        """R: Obtiene una propiedad por id."""
        row = self._fetchone(
            query=f"""
                SELECT {self._COLUMNS}
                FROM properties
                WHERE id = %(id)s
            """,
            params={"id": str(property_id)},
            context_msg="PostgresPropertyRepository: query_by_id failed",
            extra={"property_id": str(property_id)},
        )
        if row is None:
            raise PropertyNotFoundError(
                f"query_by_id: property_id[{property_id}]: not found"
            )
        try:
            return _to_core_property(row)
        except TranslationError as exc:
            raise exc.with_context(f"query_by_id: property_id[{property_id}]") from exc

    def query_by_manager_id(self, manager_id: UUID) -> list[Property]:
        """R: Todas las propiedades de un manager ([] si no hay)."""
        rows = self._fetchall(
            query=f"""
                SELECT {self._COLUMNS}
                FROM properties
                WHERE manager_id = %(manager_id)s
                {self._ORDER_BY}
            """,
            params={"manager_id": str(manager_id)},
            context_msg="PostgresPropertyRepository: query_by_manager_id failed",
            extra={"manager_id": str(manager_id)},
        )
        try:
            return [_to_core_property(r) for r in rows]
        except TranslationError as exc:
            raise exc.with_context(
                f"query_by_manager_id: manager_id[{manager_id}]"
            ) from exc

    def execute_under_transaction(self, tx: Transaction) -> "PostgresPropertyRepository":
        """
        R: Devuelve un repositorio NUEVO ligado a la transacción.
        El repositorio original sigue usando su contexto por defecto.
        """
        return PostgresPropertyRepository(exec_context=get_exec_context(tx))
