"""Application layer: cores de negocio (User, Property)."""

from .properties import PropertyCore
from .users import UserCore

__all__ = ["PropertyCore", "UserCore"]
