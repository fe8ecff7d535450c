"""
===============================================================================
CORE: User (registro + autenticación)
===============================================================================

Name:
    UserCore

Business Goal:
    Orquestar la creación de identidades y la verificación de credenciales,
    delegando la persistencia a un UserStorer inyectado.

Why (Context / Intención):
    - Hoy las operaciones son casi “pass-through” al store, pero este es el
      lugar para auditoría u otras reglas que no son del store.
    - El password en claro vive solo dentro de register/update/authenticate.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    UserCore

Responsibilities:
    - register: validar email, hashear password, asignar id, timestamps,
      enabled=True y persistir.
    - query_by_id / query_by_ids / query_by_email: delegar y agregar contexto.
    - authenticate: buscar por email y verificar el hash.
    - update / delete: cambios administrables sobre un usuario existente.

Collaborators:
    - domain.repositories.UserStorer
    - identity.passwords (argon2)
    - crosscutting.exceptions (kinds estables)
    - crosscutting.logger

-------------------------------------------------------------------------------
Error Mapping:
    - INVALID_INPUT: email mal formado (register / update)
    - HASHING: falla de argon2
    - UNIQUE_EMAIL: email duplicado (lo informa el store)
    - NOT_FOUND: query_* sobre id/email inexistente
    - AUTHENTICATION_FAILURE: email desconocido, email inválido, password
      incorrecto o cuenta deshabilitada. Un solo kind: el
      caller no puede distinguir “no existe” de “password incorrecto”.
      No agregar un error más específico sin revisar esta propiedad.
    - PERSISTENCE: se propaga tal cual (incluso desde authenticate).
===============================================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, List
from uuid import UUID, uuid4

from ..crosscutting.exceptions import (
    AuthenticationError,
    BHMSError,
    InvalidInputError,
    NotFoundError,
)
from ..crosscutting.logger import logger
from ..domain.entities import RegisterEntity, UpdateUserEntity, UserEntity, utcnow
from ..domain.repositories import UserStorer
from ..domain.value_objects import parse_email
from ..identity.passwords import hash_password, verify_password

Clock = Callable[[], datetime]
IdFactory = Callable[[], UUID]

# R: Mismo mensaje para toda falla de credenciales; el motivo solo va al log.
_AUTH_FAILED = "authenticate: authentication failed"


class UserCore:
    """Set de APIs de negocio para usuarios."""

    def __init__(
        self,
        store: UserStorer,
        *,
        clock: Clock = utcnow,
        id_factory: IdFactory = uuid4,
    ) -> None:
        self._users = store
        self._clock = clock
        self._new_id = id_factory

    # =========================================================================
    # Registro
    # =========================================================================
    def register(self, new_user: RegisterEntity) -> UserEntity:
        """Registra un usuario nuevo (siempre habilitado)."""
        try:
            email = parse_email(new_user.email)
            password_hash = hash_password(new_user.password)
        except BHMSError as exc:
            raise exc.with_context("register") from exc

        now = self._clock()
        user = UserEntity(
            id=self._new_id(),
            name=new_user.name,
            email=email,
            password_hash=password_hash,
            roles=tuple(new_user.roles),
            department=new_user.department,
            enabled=True,
            created_at=now,
            updated_at=now,
        )

        try:
            self._users.create(user)
        except BHMSError as exc:
            raise exc.with_context("create") from exc

        logger.info("Usuario registrado", extra={"user_id": str(user.id)})
        return user

    # =========================================================================
    # Lecturas
    # =========================================================================
    def query_by_id(self, user_id: UUID) -> UserEntity:
        """Busca un usuario por id."""
        try:
            return self._users.query_by_id(user_id)
        except BHMSError as exc:
            raise exc.with_context(f"query: user_id[{user_id}]") from exc

    def query_by_ids(self, user_ids: List[UUID]) -> List[UserEntity]:
        try:
            return self._users.query_by_ids(list(user_ids))
        except BHMSError as exc:
            raise exc.with_context(f"query: user_ids[{len(user_ids)}]") from exc

    def query_by_email(self, email: str) -> UserEntity:
        """Busca un usuario por email (normalizado antes de consultar)."""
        try:
            return self._users.query_by_email(parse_email(email))
        except BHMSError as exc:
            raise exc.with_context(f"query: email[{email}]") from exc

    # =========================================================================
    # Autenticación
    # =========================================================================
    def authenticate(self, email: str, password: str) -> UserEntity:
        """
        Busca al usuario por email y verifica su password.

        Toda falla de credenciales termina en AuthenticationError; las fallas
        de infraestructura (DB caída) se propagan sin plegarse.
        """
        try:
            user = self.query_by_email(email)
        except (NotFoundError, InvalidInputError) as exc:
            logger.info("Autenticación fallida", extra={"reason": "lookup"})
            raise AuthenticationError(_AUTH_FAILED, original_error=exc) from exc

        if not verify_password(password, user.password_hash):
            logger.info(
                "Autenticación fallida",
                extra={"reason": "password", "user_id": str(user.id)},
            )
            raise AuthenticationError(_AUTH_FAILED)

        if not user.enabled:
            logger.info(
                "Autenticación fallida",
                extra={"reason": "disabled", "user_id": str(user.id)},
            )
            raise AuthenticationError(_AUTH_FAILED)

        return user

    # =========================================================================
    # Administración
    # =========================================================================
    def update(self, user: UserEntity, changes: UpdateUserEntity) -> UserEntity:
        """Aplica cambios parciales; un password nuevo se vuelve a hashear."""
        fields: dict[str, object] = {}
        try:
            if changes.name is not None:
                fields["name"] = changes.name
            if changes.email is not None:
                fields["email"] = parse_email(changes.email)
            if changes.roles is not None:
                fields["roles"] = tuple(changes.roles)
            if changes.department is not None:
                fields["department"] = changes.department
            if changes.enabled is not None:
                fields["enabled"] = changes.enabled
            if changes.password is not None:
                fields["password_hash"] = hash_password(changes.password)
        except BHMSError as exc:
            raise exc.with_context(f"update: user_id[{user.id}]") from exc

        updated = replace(user, updated_at=self._clock(), **fields)

        try:
            self._users.update(updated)
        except BHMSError as exc:
            raise exc.with_context(f"update: user_id[{user.id}]") from exc

        return updated

    def delete(self, user: UserEntity) -> None:
        try:
            self._users.delete(user)
        except BHMSError as exc:
            raise exc.with_context(f"delete: user_id[{user.id}]") from exc
