"""
===============================================================================
CORE: Property
===============================================================================

Name:
    PropertyCore

Business Goal:
    Crear y mantener propiedades de un manager, delegando persistencia a un
    PropertyStorer inyectado.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    PropertyCore

Responsibilities:
    - create: validar nombre, asignar id + timestamps, persistir.
    - update: aplicar cambios parciales a campos mutables + updated_at.
    - delete / query_by_id / query_by_manager_id: delegar con contexto.
    - execute_under_transaction: core NUEVO sobre el store transaccional.

Collaborators:
    - domain.repositories.PropertyStorer, Transaction
    - domain.entities.Property, NewProperty, UpdateProperty
    - crosscutting.exceptions
===============================================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, List
from uuid import UUID, uuid4

from ..crosscutting.exceptions import BHMSError, InvalidInputError
from ..domain.entities import NewProperty, Property, UpdateProperty, utcnow
from ..domain.repositories import PropertyStorer, Transaction

Clock = Callable[[], datetime]
IdFactory = Callable[[], UUID]


class PropertyCore:
    """Set de APIs de negocio para propiedades."""

    def __init__(
        self,
        store: PropertyStorer,
        *,
        clock: Clock = utcnow,
        id_factory: IdFactory = uuid4,
    ) -> None:
        self._properties = store
        self._clock = clock
        self._new_id = id_factory

    @staticmethod
    def _normalize_name(raw_name: str | None) -> str:
        name = (raw_name or "").strip()
        if not name:
            raise InvalidInputError("property name is required")
        return name

    def create(self, new_property: NewProperty) -> Property:
        try:
            name = self._normalize_name(new_property.name)
        except BHMSError as exc:
            raise exc.with_context("create") from exc

        now = self._clock()
        prop = Property(
            id=self._new_id(),
            manager_id=new_property.manager_id,
            name=name,
            address_level_1_id=new_property.address_level_1_id,
            address_level_2_id=new_property.address_level_2_id,
            address_level_3_id=new_property.address_level_3_id,
            street=new_property.street,
            status=new_property.status,
            created_at=now,
            updated_at=now,
        )

        try:
            self._properties.create(prop)
        except BHMSError as exc:
            raise exc.with_context("create") from exc

        return prop

    def update(self, prop: Property, changes: UpdateProperty) -> Property:
        """id, manager_id y created_at nunca cambian."""
        fields: dict[str, object] = {}
        try:
            if changes.name is not None:
                fields["name"] = self._normalize_name(changes.name)
        except BHMSError as exc:
            raise exc.with_context(f"update: property_id[{prop.id}]") from exc

        for attr in (
            "address_level_1_id",
            "address_level_2_id",
            "address_level_3_id",
            "street",
            "status",
        ):
            value = getattr(changes, attr)
            if value is not None:
                fields[attr] = value

        updated = replace(prop, updated_at=self._clock(), **fields)

        try:
            self._properties.update(updated)
        except BHMSError as exc:
            raise exc.with_context(f"update: property_id[{prop.id}]") from exc

        return updated

    def delete(self, prop: Property) -> None:
        try:
            self._properties.delete(prop)
        except BHMSError as exc:
            raise exc.with_context(f"delete: property_id[{prop.id}]") from exc

    def query_by_id(self, property_id: UUID) -> Property:
        try:
            return self._properties.query_by_id(property_id)
        except BHMSError as exc:
            raise exc.with_context(f"query: property_id[{property_id}]") from exc

    def query_by_manager_id(self, manager_id: UUID) -> List[Property]:
        try:
            return self._properties.query_by_manager_id(manager_id)
        except BHMSError as exc:
            raise exc.with_context(f"query: manager_id[{manager_id}]") from exc

    def execute_under_transaction(self, tx: Transaction) -> "PropertyCore":
        """Core nuevo sobre el store transaccional; este core no cambia."""
        try:
            store = self._properties.execute_under_transaction(tx)
        except BHMSError as exc:
            raise exc.with_context("execute under transaction") from exc
        return PropertyCore(store, clock=self._clock, id_factory=self._new_id)
