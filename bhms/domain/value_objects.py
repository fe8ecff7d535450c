"""
===============================================================================
DOMAIN: Value Objects / validaciones puras
===============================================================================

Contenido:
    - parse_email: valida forma de mailbox y normaliza (trim + lower).

Principios:
    - Sin side effects
    - Errores de input como InvalidInputError (kind INVALID_INPUT)
===============================================================================
"""

from __future__ import annotations

from typing import Final

from pydantic import EmailStr, TypeAdapter, ValidationError

from ..crosscutting.exceptions import InvalidInputError

_EMAIL_ADAPTER: Final[TypeAdapter[EmailStr]] = TypeAdapter(EmailStr)


def parse_email(raw: str | None) -> str:
    """
    Valida un email y devuelve su forma normalizada.

    Política:
      - trim + lower antes de validar (mismo criterio al persistir y al
        autenticar, así el unique constraint es case-insensitive en la práctica).
      - Delegamos la gramática a email-validator (via pydantic EmailStr).
    """
    candidate = (raw or "").strip().lower()
    if not candidate:
        raise InvalidInputError("email is required")

    try:
        return _EMAIL_ADAPTER.validate_python(candidate)
    except ValidationError as exc:
        raise InvalidInputError(
            f"invalid email address: {candidate!r}", original_error=exc
        ) from exc
