"""
Domain layer: entities, value objects and repository ports.

Sin dependencias a DB ni a transporte.
"""

from .entities import (
    NewProperty,
    Property,
    PropertyStatus,
    RegisterEntity,
    UpdateProperty,
    UpdateUserEntity,
    UserEntity,
    UserRole,
)
from .repositories import PropertyStorer, Transaction, UserStorer

__all__ = [
    "Property",
    "PropertyStatus",
    "NewProperty",
    "UpdateProperty",
    "UserEntity",
    "UserRole",
    "RegisterEntity",
    "UpdateUserEntity",
    "PropertyStorer",
    "UserStorer",
    "Transaction",
]
