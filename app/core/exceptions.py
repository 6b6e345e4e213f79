# app/core/exceptions.py
from typing import Any, Dict, Optional


class LedgerError(Exception):
    """
    Error de negocio con un código estable para el cliente.

    Cada subclase fija su error_code y su status_code HTTP; los handlers
    registrados en app.core.middleware los convierten en ErrorResponse.
    """
    error_code: str = "LEDGER_ERROR"
    status_code: int = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(LedgerError):
    """Entidad inexistente o perteneciente a otro dueño"""
    error_code = "NOT_FOUND"
    status_code = 404


class ValidationError(LedgerError):
    error_code = "VALIDATION_ERROR"
    status_code = 400


class InsufficientStockError(LedgerError):
    error_code = "INSUFFICIENT_STOCK"
    status_code = 409


class PaymentExceedsDebtError(LedgerError):
    error_code = "PAYMENT_EXCEEDS_DEBT"
    status_code = 409


class SaleFullyPaidError(PaymentExceedsDebtError):
    """La venta ya no tiene deuda pendiente"""
    error_code = "SALE_FULLY_PAID"


class ReturnExceedsSoldError(LedgerError):
    error_code = "RETURN_EXCEEDS_SOLD"
    status_code = 409


class SaleHasReturnsError(LedgerError):
    error_code = "SALE_HAS_RETURNS"
    status_code = 409


class CollaboratorHasSalesError(LedgerError):
    error_code = "COLLABORATOR_HAS_SALES"
    status_code = 409


class ProductHasSalesError(LedgerError):
    error_code = "PRODUCT_HAS_SALES"
    status_code = 409


class ConflictError(LedgerError):
    """Conflicto de concurrencia que persistió tras los reintentos"""
    error_code = "CONFLICT"
    status_code = 409
