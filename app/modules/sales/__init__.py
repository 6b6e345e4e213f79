"""
Módulo de Ventas

Funcionalidades:
- Registrar ventas multi-producto con validación atómica de stock
- Cobro inicial opcional (registrado como cobro)
- Eliminación con reversión completa de stock y cobros
- Consulta y filtros por colaborador, estado de pago y fechas
"""

from .router import router as sales_router
from .service import SalesService

__all__ = ["sales_router", "SalesService"]
