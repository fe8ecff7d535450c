"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Emular el unique constraint de email (UniqueEmailError).
  - Mismo contrato de not-found que PostgresUserRepository.

Collaborators:
  - domain.entities.UserEntity
  - domain.repositories.UserStorer

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - UserEntity es frozen: se puede guardar la referencia sin copia.
============================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List
from uuid import UUID

from ....crosscutting.exceptions import UniqueEmailError, UserNotFoundError
from ....domain.entities import UserEntity


class InMemoryUserRepository:
    """Repositorio in-memory, thread-safe, para UserEntity."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, UserEntity] = {}

    @staticmethod
    def _sort_key(u: UserEntity):
        created = u.created_at or datetime.min.replace(tzinfo=timezone.utc)
        return (created, str(u.id))

    def _email_taken(self, email: str, *, exclude_id: UUID | None = None) -> bool:
        return any(
            u.email == email and u.id != exclude_id for u in self._users.values()
        )

    def create(self, user: UserEntity) -> None:
        with self._lock:
            if self._email_taken(user.email):
                raise UniqueEmailError(f"email[{user.email}]: email is not unique")
            self._users[user.id] = user

    def update(self, user: UserEntity) -> None:
        with self._lock:
            if user.id not in self._users:
                raise UserNotFoundError(f"update: user_id[{user.id}]: user not found")
            if self._email_taken(user.email, exclude_id=user.id):
                raise UniqueEmailError(f"email[{user.email}]: email is not unique")
            self._users[user.id] = user

    def delete(self, user: UserEntity) -> None:
        with self._lock:
            if self._users.pop(user.id, None) is None:
                raise UserNotFoundError(f"delete: user_id[{user.id}]: user not found")

    def query_by_id(self, user_id: UUID) -> UserEntity:
        with self._lock:
            found = self._users.get(user_id)
        if found is None:
            raise UserNotFoundError(f"query_by_id: user_id[{user_id}]: user not found")
        return found

    def query_by_ids(self, user_ids: List[UUID]) -> List[UserEntity]:
        if not user_ids:
            return []
        wanted = set(user_ids)
        with self._lock:
            found = [u for uid, u in self._users.items() if uid in wanted]
        return sorted(found, key=self._sort_key)

    def query_by_email(self, email: str) -> UserEntity:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user
        raise UserNotFoundError(f"query_by_email: email[{email}]: user not found")
