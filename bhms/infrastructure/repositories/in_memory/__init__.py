"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .property import InMemoryPropertyRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryPropertyRepository",
    "InMemoryUserRepository",
]
