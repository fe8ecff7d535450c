"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (Property, UserEntity) + inputs de casos de uso

Responsabilidades:
    - Definir estructuras centrales del negocio (sin infraestructura).
    - Mantener tipos claros para cores y repositorios.
    - Inputs transitorios (RegisterEntity, NewProperty, Update*) que NO se
      persisten tal cual.

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - application/*: construyen/consumen estas entidades.
    - infrastructure/repositories/*: mapean filas <-> entidades.

Principios:
    - Sin dependencias a DB/psycopg.
    - El id de una entidad es inmutable una vez creada.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID


def utcnow() -> datetime:
    """Fecha/hora UTC. Es el reloj por defecto de los cores."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------------


class PropertyStatus(str, Enum):
    """Estado del ciclo de vida de una propiedad."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


@dataclass
class Property:
    """
    Propiedad administrada por un manager (usuario).

    La dirección es jerárquica en tres niveles (región / sub-región /
    localidad) más la calle en texto libre.
    """

    id: UUID
    manager_id: UUID
    name: str
    address_level_1_id: str
    address_level_2_id: str
    address_level_3_id: str
    street: str
    status: PropertyStatus = PropertyStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewProperty:
    """Input para crear una propiedad (el id y timestamps los asigna el core)."""

    manager_id: UUID
    name: str
    address_level_1_id: str
    address_level_2_id: str
    address_level_3_id: str
    street: str
    status: PropertyStatus = PropertyStatus.ACTIVE


@dataclass(frozen=True)
class UpdateProperty:
    """Cambios parciales: None significa “no tocar”."""

    name: str | None = None
    address_level_1_id: str | None = None
    address_level_2_id: str | None = None
    address_level_3_id: str | None = None
    street: str | None = None
    status: PropertyStatus | None = None


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


class UserRole(str, Enum):
    """Roles soportados."""

    ADMIN = "ADMIN"
    USER = "USER"


@dataclass(frozen=True)
class UserEntity:
    """
    Usuario registrado.

    password_hash es un string argon2 codificado; nunca se compara
    directamente, solo vía identity.passwords.verify_password.
    """

    id: UUID
    name: str
    email: str
    password_hash: str = field(repr=False)
    roles: Tuple[UserRole, ...] = ()
    department: str | None = None
    enabled: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_role(self, role: UserRole) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class RegisterEntity:
    """Input de registro. El password en claro se consume una vez y se descarta."""

    name: str
    email: str
    password: str = field(repr=False)
    roles: Tuple[UserRole, ...] = (UserRole.USER,)
    department: str | None = None


@dataclass(frozen=True)
class UpdateUserEntity:
    """Cambios parciales de usuario: None significa “no tocar”."""

    name: str | None = None
    email: str | None = None
    roles: Tuple[UserRole, ...] | None = None
    department: str | None = None
    password: str | None = field(default=None, repr=False)
    enabled: bool | None = None
