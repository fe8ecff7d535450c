"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/property.py
============================================================
Class: InMemoryPropertyRepository

Responsibilities:
  - Almacenar propiedades en memoria (tests / local dev).
  - Implementar el mismo contrato que PostgresPropertyRepository:
      - update/delete sobre id inexistente => PropertyNotFoundError
      - query_by_manager_id sin resultados => []
  - Ordering determinístico alineado con Postgres (created_at ASC, id ASC).

Collaborators:
  - domain.entities.Property
  - domain.repositories.PropertyStorer (contrato a implementar)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - Copias: se guarda/devuelve una copia para que el caller no mute la "tabla".
  - execute_under_transaction comparte la tabla (no hay atomicidad real en
    memoria); solo valida el handle como lo haría Postgres.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List
from uuid import UUID

from ....crosscutting.exceptions import PropertyNotFoundError, TransactionError
from ....domain.entities import Property
from ....domain.repositories import Transaction


class InMemoryPropertyRepository:
    """Repositorio in-memory, thread-safe, para Property."""

    def __init__(
        self,
        *,
        _table: Dict[UUID, Property] | None = None,
        _lock: Lock | None = None,
    ) -> None:
        # R: tabla y lock se comparten con las instancias "transaccionales".
        self._properties: Dict[UUID, Property] = _table if _table is not None else {}
        self._lock = _lock or Lock()

    @staticmethod
    def _sort_key(p: Property):
        created = p.created_at or datetime.min.replace(tzinfo=timezone.utc)
        return (created, str(p.id))

    def create(self, prop: Property) -> None:
        with self._lock:
            self._properties[prop.id] = replace(prop)

    def update(self, prop: Property) -> None:
        with self._lock:
            current = self._properties.get(prop.id)
            if current is None:
                raise PropertyNotFoundError(f"update: property_id[{prop.id}]: not found")
            # R: Solo campos mutables; id/manager_id/created_at se preservan.
            self._properties[prop.id] = replace(
                current,
                name=prop.name,
                address_level_1_id=prop.address_level_1_id,
                address_level_2_id=prop.address_level_2_id,
                address_level_3_id=prop.address_level_3_id,
                street=prop.street,
                status=prop.status,
                updated_at=prop.updated_at,
            )

    def delete(self, prop: Property) -> None:
        with self._lock:
            if self._properties.pop(prop.id, None) is None:
                raise PropertyNotFoundError(f"delete: property_id[{prop.id}]: not found")

    def query_by_id(self, property_id: UUID) -> Property:
        with self._lock:
            found = self._properties.get(property_id)
        if found is None:
            raise PropertyNotFoundError(
                f"query_by_id: property_id[{property_id}]: not found"
            )
        return replace(found)

    def query_by_manager_id(self, manager_id: UUID) -> List[Property]:
        with self._lock:
            values = [p for p in self._properties.values() if p.manager_id == manager_id]
        return [replace(p) for p in sorted(values, key=self._sort_key)]

    def execute_under_transaction(self, tx: Transaction) -> "InMemoryPropertyRepository":
        if not (callable(getattr(tx, "commit", None)) and callable(getattr(tx, "rollback", None))):
            raise TransactionError(
                f"unsupported transaction handle: {type(tx).__name__}"
            )
        if getattr(tx, "closed", False):
            raise TransactionError("transaction already finished")
        return InMemoryPropertyRepository(_table=self._properties, _lock=self._lock)
