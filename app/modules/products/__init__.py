"""
Módulo de Productos

Funcionalidades:
- CRUD de productos del negocio
- Ingreso manual de stock (restock)
- Contadores de stock: total, vendido y restante (solo los modifica el libro de inventario)
"""

from .router import router as products_router
from .service import ProductService

__all__ = ["products_router", "ProductService"]
