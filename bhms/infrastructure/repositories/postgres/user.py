"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Implementar UserStorer sobre la tabla `users`.
  - Crear / actualizar / borrar usuarios; leer por id, ids o email.
  - Mapear filas crudas -> entidad de dominio `UserEntity` y validar `UserRole`.
  - Traducir la violación de unicidad de email a UniqueEmailError.
  - Exponer fallos consistentes vía `DatabaseError` con logging estructurado.

Collaborators:
  - infrastructure.db.pool.get_pool / infrastructure.db.transaction
  - domain.entities.UserEntity / UserRole
  - crosscutting.logger.logger
  - crosscutting.exceptions

Constraints / Notes:
  - Repositorio puro: NO hashea passwords ni valida emails (eso es del core).
  - El email llega ya normalizado (lower) desde el core.
  - Roles: si el valor persistido no corresponde a UserRole -> TranslationError.
  - SQL parametrizado siempre.
  - password_hash nunca va a logs.
============================================================
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from psycopg.errors import UniqueViolation

from ....crosscutting.exceptions import (
    DatabaseError,
    TranslationError,
    UniqueEmailError,
    UserNotFoundError,
)
from ....crosscutting.logger import logger
from ....domain.entities import UserEntity, UserRole
from ....domain.repositories import Transaction
from ...db.transaction import ExecContext, get_exec_context

# R: Lista explícita de columnas (contrato estable con migraciones).
_USER_COLUMNS = (
    "id, name, email, password_hash, roles, department, enabled, "
    "created_at, updated_at"
)

_USER_ORDER_BY = "ORDER BY created_at ASC, id ASC"

# R: El único unique “de negocio” es el email; el pk se reporta como DB error.
_USERS_PK_CONSTRAINT = "pk_users"


def _to_db_user(user: UserEntity) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "password_hash": user.password_hash,
        "roles": [role.value for role in user.roles],
        "department": user.department,
        "enabled": user.enabled,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def _to_core_user(row: tuple) -> UserEntity:
    """
    Convierte una fila de `users` a UserEntity.

    Role casting estricto: un valor fuera del enum es drift de datos.
    """
    try:
        (
            user_id,
            name,
            email,
            password_hash,
            roles,
            department,
            enabled,
            created_at,
            updated_at,
        ) = row
        return UserEntity(
            id=UUID(str(user_id)),
            name=name,
            email=email,
            password_hash=password_hash,
            roles=tuple(UserRole(r) for r in (roles or [])),
            department=department,
            enabled=bool(enabled),
            created_at=created_at,
            updated_at=updated_at,
        )
    except (TypeError, ValueError) as exc:
        raise TranslationError(
            f"to_core_user: invalid row: {exc}", original_error=exc
        ) from exc


class PostgresUserRepository:
    """R: Implementación PostgreSQL de UserStorer."""

    def __init__(self, exec_context: Optional[ExecContext] = None) -> None:
        self._exec_context = exec_context

    def _get_exec_context(self) -> ExecContext:
        if self._exec_context is not None:
            return self._exec_context

        from ...db.pool import get_pool

        return get_pool()

    # =========================================================
    # Helpers de ejecución
    # =========================================================
    def _write(
        self,
        *,
        query: str,
        params: Mapping[str, object],
        context_msg: str,
        extra: dict,
    ) -> int:
        """R: Write con traducción de unique violation -> UniqueEmailError."""
        try:
            ctx = self._get_exec_context()
            with ctx.connection() as conn:
                return conn.execute(query, dict(params)).rowcount
        except UniqueViolation as exc:
            constraint = getattr(exc.diag, "constraint_name", None)
            if constraint == _USERS_PK_CONSTRAINT:
                logger.exception(context_msg, extra={**extra, "error": str(exc)})
                raise DatabaseError(
                    f"{context_msg}: {exc}", original_error=exc
                ) from exc
            logger.warning(
                "PostgresUserRepository: email is not unique",
                extra={**extra, "constraint": constraint},
            )
            raise UniqueEmailError(
                f"email[{params.get('email')}]: email is not unique",
                original_error=exc,
            ) from exc
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchone(
        self,
        *,
        query: str,
        params: Mapping[str, object],
        context_msg: str,
        extra: dict,
    ) -> tuple | None:
        try:
            ctx = self._get_exec_context()
            with ctx.connection() as conn:
                return conn.execute(query, dict(params)).fetchone()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchall(
        self,
        *,
        query: str,
        params: Mapping[str, object],
        context_msg: str,
        extra: dict,
    ) -> list[tuple]:
        try:
            ctx = self._get_exec_context()
            with ctx.connection() as conn:
                return conn.execute(query, dict(params)).fetchall()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    # =========================================================
    # Escritura
    # =========================================================
    def create(self, user: UserEntity) -> None:
        self._write(
            query=f"""
                INSERT INTO users ({_USER_COLUMNS})
                VALUES (
                    %(id)s, %(name)s, %(email)s, %(password_hash)s, %(roles)s,
                    %(department)s, %(enabled)s, %(created_at)s, %(updated_at)s
                )
            """,
            params=_to_db_user(user),
            context_msg="PostgresUserRepository: create failed",
            extra={"user_id": str(user.id), "email": user.email},
        )

    def update(self, user: UserEntity) -> None:
        rowcount = self._write(
            query="""
                UPDATE users
                SET
                    name = %(name)s,
                    email = %(email)s,
                    password_hash = %(password_hash)s,
                    roles = %(roles)s,
                    department = %(department)s,
                    enabled = %(enabled)s,
                    updated_at = %(updated_at)s
                WHERE id = %(id)s
            """,
            params=_to_db_user(user),
            context_msg="PostgresUserRepository: update failed",
            extra={"user_id": str(user.id)},
        )
        if rowcount == 0:
            raise UserNotFoundError(f"update: user_id[{user.id}]: user not found")

    def delete(self, user: UserEntity) -> None:
        rowcount = self._write(
            query="DELETE FROM users WHERE id = %(id)s",
            params={"id": str(user.id)},
            context_msg="PostgresUserRepository: delete failed",
            extra={"user_id": str(user.id)},
        )
        if rowcount == 0:
            raise UserNotFoundError(f"delete: user_id[{user.id}]: user not found")

    # =========================================================
    # Lectura
    # =========================================================
    def query_by_id(self, user_id: UUID) -> UserEntity:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %(id)s",
            params={"id": str(user_id)},
            context_msg="PostgresUserRepository: query_by_id failed",
            extra={"user_id": str(user_id)},
        )
        if row is None:
            raise UserNotFoundError(f"query_by_id: user_id[{user_id}]: user not found")
        try:
            return _to_core_user(row)
        except TranslationError as exc:
            raise exc.with_context(f"query_by_id: user_id[{user_id}]") from exc

    def query_by_ids(self, user_ids: List[UUID]) -> List[UserEntity]:
        """
        Contrato:
        - [] si user_ids vacío (sin ir a la DB)
        - ids inexistentes se omiten (no error)
        """
        if not user_ids:
            return []

        rows = self._fetchall(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE id = ANY(%(ids)s)
                {_USER_ORDER_BY}
            """,
            params={"ids": [str(uid) for uid in user_ids]},
            context_msg="PostgresUserRepository: query_by_ids failed",
            extra={"count": len(user_ids)},
        )
        try:
            return [_to_core_user(r) for r in rows]
        except TranslationError as exc:
            raise exc.with_context(f"query_by_ids: user_ids[{len(user_ids)}]") from exc

    def query_by_email(self, email: str) -> UserEntity:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %(email)s",
            params={"email": email},
            context_msg="PostgresUserRepository: query_by_email failed",
            extra={"email": email},
        )
        if row is None:
            raise UserNotFoundError(f"query_by_email: email[{email}]: user not found")
        try:
            return _to_core_user(row)
        except TranslationError as exc:
            raise exc.with_context(f"query_by_email: email[{email}]") from exc

    def execute_under_transaction(self, tx: Transaction) -> "PostgresUserRepository":
        """R: Repositorio NUEVO ligado a la transacción."""
        return PostgresUserRepository(exec_context=get_exec_context(tx))
