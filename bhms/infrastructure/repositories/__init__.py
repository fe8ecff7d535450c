"""
============================================================
TARJETA CRC
============================================================
Class: bhms.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres e InMemory)
  en un único punto de importación.

Collaborators:
- Repositorios Postgres (SQL crudo)
- Repositorios InMemory (testing / fallback)
============================================================
"""

from .in_memory import InMemoryPropertyRepository, InMemoryUserRepository
from .postgres import PostgresPropertyRepository, PostgresUserRepository

__all__ = [
    # Postgres
    "PostgresPropertyRepository",
    "PostgresUserRepository",
    # In-memory
    "InMemoryPropertyRepository",
    "InMemoryUserRepository",
]
