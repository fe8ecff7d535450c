# bhms/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- kind estable (ErrorKind) para que el caller haga "match" por categoría
- error_id para correlación con logs
- message “humana” con contexto del call-site (operación + ids)
- cadena de causas intacta (original_error / __cause__)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  BHMSError + subclases

Responsabilidades:
  - Estandarizar errores internos que luego la capa de transporte mapea
    (404 / 409 / 401 / 500).
  - Envolver errores con contexto sin perder el kind (with_context).
  - Generar error_id para rastreo.

Colaboradores:
  - infrastructure/repositories/*: levantan DatabaseError / NotFound / etc.
  - application/*: agregan contexto y pliegan errores de autenticación.
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4


class ErrorKind(str, Enum):
    """
    Categorías estables de error.

    - NOT_FOUND: la entidad pedida no existe.
    - UNIQUE_EMAIL: email duplicado al registrar/actualizar.
    - AUTHENTICATION_FAILURE: credenciales inválidas (usuario o password).
    - TRANSLATION: fila leída pero no convertible a entidad de dominio.
    - PERSISTENCE: cualquier otro fallo de DB (conexión, constraint, timeout).
    - HASHING: falló la primitiva de hashing de passwords.
    - TRANSACTION: el handle de transacción no se pudo adaptar.
    - INVALID_INPUT: input de negocio inválido (email mal formado, etc.).
    """

    NOT_FOUND = "NOT_FOUND"
    UNIQUE_EMAIL = "UNIQUE_EMAIL"
    AUTHENTICATION_FAILURE = "AUTHENTICATION_FAILURE"
    TRANSLATION = "TRANSLATION"
    PERSISTENCE = "PERSISTENCE"
    HASHING = "HASHING"
    TRANSACTION = "TRANSACTION"
    INVALID_INPUT = "INVALID_INPUT"


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para responder errores de forma consistente."""

    error_code: str
    kind: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "kind": self.kind,
            "message": self.message,
            "error_id": self.error_id,
        }


class BHMSError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      BHMSError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + kind + error_id + message
      - Envolver con contexto preservando la clase (with_context)
    ----------------------------------------------------------------------------
    """

    error_code: str = "BHMS_ERROR"
    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def with_context(self, context: str) -> "BHMSError":
        """
        Devuelve un error NUEVO de la misma clase con el mensaje prefijado.

        - El error_id se conserva (misma falla, mismo id en logs).
        - original_error y __cause__ apuntan al error envuelto.
        """
        wrapped = type(self)(
            f"{context}: {self.message}",
            error_id=self.error_id,
            original_error=self,
        )
        wrapped.__cause__ = self
        return wrapped

    def root_cause(self) -> BaseException:
        """Recorre la cadena original_error hasta el primer error no envuelto."""
        current: BaseException = self
        while isinstance(current, BHMSError) and current.original_error is not None:
            current = current.original_error
        return current

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code,
            kind=self.kind.value,
            message=self.message,
            error_id=self.error_id,
        )


class DatabaseError(BHMSError):
    """Errores de DB (conexión, query, timeout, constraint)."""

    error_code: str = "DATABASE_ERROR"
    kind: ErrorKind = ErrorKind.PERSISTENCE


class NotFoundError(BHMSError):
    """La entidad pedida no existe."""

    error_code: str = "NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND


class PropertyNotFoundError(NotFoundError):
    error_code: str = "PROPERTY_NOT_FOUND"


class UserNotFoundError(NotFoundError):
    error_code: str = "USER_NOT_FOUND"


class UniqueEmailError(BHMSError):
    """El email ya está registrado por otro usuario."""

    error_code: str = "EMAIL_NOT_UNIQUE"
    kind: ErrorKind = ErrorKind.UNIQUE_EMAIL


class AuthenticationError(BHMSError):
    """
    Credenciales inválidas.

    Importante: NO distingue “email desconocido” de “password incorrecto”.
    """

    error_code: str = "AUTHENTICATION_FAILED"
    kind: ErrorKind = ErrorKind.AUTHENTICATION_FAILURE


class TranslationError(BHMSError):
    """Una fila de DB no se pudo mapear a entidad de dominio."""

    error_code: str = "TRANSLATION_ERROR"
    kind: ErrorKind = ErrorKind.TRANSLATION


class HashingError(BHMSError):
    """Falla de la primitiva de hashing (argon2)."""

    error_code: str = "HASHING_ERROR"
    kind: ErrorKind = ErrorKind.HASHING


class TransactionError(BHMSError):
    """El handle de transacción no es adaptable a un contexto de ejecución."""

    error_code: str = "TRANSACTION_ERROR"
    kind: ErrorKind = ErrorKind.TRANSACTION


class InvalidInputError(BHMSError):
    """Input de negocio inválido."""

    error_code: str = "INVALID_INPUT"
    kind: ErrorKind = ErrorKind.INVALID_INPUT
