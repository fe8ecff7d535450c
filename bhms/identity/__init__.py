"""Identity: hashing y verificación de credenciales."""

from .passwords import get_password_hasher, hash_password, verify_password

__all__ = ["get_password_hasher", "hash_password", "verify_password"]
