"""
===============================================================================
TARJETA CRC — identity/passwords.py
===============================================================================

Módulo:
    Hashing de passwords (Argon2id)

Responsabilidades:
    - Hashear passwords con una función lenta y con salt (argon2-cffi).
    - Verificar password vs hash en tiempo constante (lo resuelve argon2).
    - Construir el PasswordHasher una sola vez con los costos de Settings.

Colaboradores:
    - crosscutting.config.get_settings: time_cost / memory_cost / parallelism.
    - crosscutting.exceptions.HashingError: falla de la primitiva.
    - application.users.UserCore: register / authenticate / update.

Decisiones de diseño:
    - La lógica criptográfica vive acá (borde de identidad), NO en dominio.
    - verify_password nunca levanta por mismatch: devuelve False.
    - No loguear passwords ni hashes.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import (
    HashingError as Argon2HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from ..crosscutting.config import get_settings
from ..crosscutting.exceptions import HashingError


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """PasswordHasher singleton configurado desde Settings."""
    s = get_settings()
    return PasswordHasher(
        time_cost=s.password_time_cost,
        memory_cost=s.password_memory_cost,
        parallelism=s.password_parallelism,
    )


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2id."""
    try:
        return get_password_hasher().hash(password)
    except Argon2HashingError as exc:
        raise HashingError(
            f"generate password hash: {exc}", original_error=exc
        ) from exc


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado."""
    try:
        return get_password_hasher().verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
