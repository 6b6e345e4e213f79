"""
Módulo de Devoluciones

Funcionalidades:
- Registrar devoluciones (individuales o en lote) contra líneas de una venta
- Reingreso de stock y reducción del total de la venta
- Eliminación como inverso exacto
"""

from .router import router as returns_router
from .service import ReturnsService

__all__ = ["returns_router", "ReturnsService"]
