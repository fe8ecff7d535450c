# bhms/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logger de BHMS (JSON, una línea por evento)
===============================================================================

Objetivo
--------
Que cada evento de usuarios / propiedades / DB salga como un objeto JSON
que se pueda filtrar por user_id, property_id o error_id sin filtrar
credenciales ni datos personales.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  BHMSJSONFormatter (alias JSONFormatter) + setup_logger()

Responsabilidades:
  - Encabezado fijo: timestamp, level, service, env, logger, message, origen.
  - Copiar los `extra` del call-site, redactando credenciales y
    enmascarando emails (ana@example.com -> a***@example.com).
  - Si el evento trae un BHMSError: publicar kind / error_code / error_id
    para correlacionar con la respuesta que recibió el caller.

Colaboradores:
  - crosscutting/config.py (log_level, log_json, app_env)
  - crosscutting/exceptions.py (BHMSError)
  - cores / repositorios / db (logger.info / logger.exception con extra)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import re
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from .exceptions import BHMSError

SERVICE_NAME = "bhms"

# Atributos que todo LogRecord trae de fábrica; lo demás vino por `extra`.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime"}

REDACTED = "***REDACTADO***"

_CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "new_password",
        "password_hash",
        "secret",
        "token",
        "authorization",
        "database_url",
    }
)
_EMAIL_RE = re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+)")

_MAX_STR = 4_000
_MAX_DEPTH = 3


def mask_email(value: str) -> str:
    """ana@example.com -> a***@example.com (el dominio queda para diagnóstico)."""
    return _EMAIL_RE.sub(r"\1***@\2", value)


def _scrub(value: Any, key: str | None = None, depth: int = 0) -> Any:
    if key is not None and key.lower() in _CREDENTIAL_KEYS:
        return REDACTED
    if depth > _MAX_DEPTH:
        return "***TRUNCADO***"
    if isinstance(value, str):
        value = mask_email(value)
        return value if len(value) <= _MAX_STR else value[:_MAX_STR] + "…(truncado)"
    if isinstance(value, dict):
        return {str(k): _scrub(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_scrub(v, key, depth + 1) for v in value]
    # UUID / datetime / enums: json.dumps(default=str)
    return value


def _exception_payload(exc_info) -> dict[str, Any]:
    exc_type, exc, _tb = exc_info
    payload: dict[str, Any] = {
        "type": exc_type.__name__ if exc_type else None,
        "message": mask_email(str(exc)) if exc is not None else None,
    }
    if isinstance(exc, BHMSError):
        root = exc.root_cause()
        payload.update(
            kind=exc.kind.value,
            error_code=exc.error_code,
            error_id=exc.error_id,
            root_cause=type(root).__name__,
        )
    payload["stacktrace"] = [mask_email(line) for line in traceback.format_exception(*exc_info)]
    return payload


class BHMSJSONFormatter(logging.Formatter):
    """LogRecord -> JSON compacto."""

    def __init__(self, *, env: str = "development") -> None:
        super().__init__()
        self._env = env

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "env": self._env,
            "logger": record.name,
            "message": mask_email(record.getMessage()),
            "origin": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                payload[key] = _scrub(value, key)

        if record.exc_info:
            payload["exception"] = _exception_payload(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str, separators=(",", ":"))


JSONFormatter = BHMSJSONFormatter


def setup_logger(name: str = SERVICE_NAME) -> logging.Logger:
    """
    Configura el logger `bhms` (idempotente: no duplica handlers).

    Sin DATABASE_URL (scripts, alembic offline) Settings no valida; el logger
    arranca igual con INFO + JSON.
    """
    log = logging.getLogger(name)

    level, use_json, env = "INFO", True, "development"
    try:
        from .config import get_settings

        settings = get_settings()
    except ValidationError:
        settings = None
    if settings is not None:
        level = (settings.log_level or "INFO").upper()
        use_json = settings.log_json
        env = settings.app_env

    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            BHMSJSONFormatter(env=env)
            if use_json
            else logging.Formatter("%(levelname)s %(name)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
