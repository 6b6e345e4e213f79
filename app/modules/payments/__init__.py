"""
Módulo de Cobros

Funcionalidades:
- Registrar cobros contra la deuda de una venta (nunca por encima de lo pendiente)
- Revertir cobros (eliminar) restaurando la deuda
- Consultar la deuda pendiente de un colaborador
"""

from .router import router as payments_router
from .service import PaymentService

__all__ = ["payments_router", "PaymentService"]
