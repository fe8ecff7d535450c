"""
PostgreSQL Repository Implementations.

Raw SQL over psycopg (named parameters), pooled via psycopg_pool.
"""

from .property import PostgresPropertyRepository
from .user import PostgresUserRepository

__all__ = [
    "PostgresPropertyRepository",
    "PostgresUserRepository",
]
