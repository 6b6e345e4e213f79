# app/shared/database/transaction.py
from typing import Callable, Optional, TypeVar
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError
import logging

from app.config.settings import settings
from app.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE de PostgreSQL: serialization_failure y deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}


def is_retryable(error: Exception) -> bool:
    """Indica si el error corresponde a un conflicto de concurrencia reintentable"""
    if isinstance(error, StaleDataError):
        return True
    if isinstance(error, OperationalError):
        sqlstate = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
        if sqlstate in RETRYABLE_SQLSTATES:
            return True
        text = str(error.orig).lower()
        return "deadlock" in text or "database is locked" in text
    return False


def run_atomic(
    db: Session,
    operation: Callable[[], T],
    description: str = "operación",
    max_retries: Optional[int] = None
) -> T:
    """
    Ejecutar una operación de lectura-modificación-escritura en UNA transacción.

    - Cualquier excepción hace rollback completo (nunca hay aplicación parcial).
    - Los errores de negocio se propagan de inmediato, sin reintento.
    - Los conflictos de concurrencia (versión obsoleta, deadlock, serialización)
      se reintentan hasta max_retries veces y luego se convierten en ConflictError.

    La operación debe volver a leer sus entidades en cada intento.
    """
    attempts = max_retries if max_retries is not None else settings.conflict_max_retries
    attempts = max(attempts, 1)

    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            db.commit()
            return result
        except Exception as e:
            db.rollback()
            if not is_retryable(e):
                raise
            logger.warning(
                f"Conflicto de concurrencia en {description} "
                f"(intento {attempt}/{attempts}): {e.__class__.__name__}"
            )

    logger.error(f"{description}: conflicto persistente tras {attempts} intentos")
    raise ConflictError(
        f"No se pudo completar {description} por un conflicto de concurrencia. Intente nuevamente.",
        details={"attempts": attempts}
    )
