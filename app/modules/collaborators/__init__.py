"""
Módulo de Colaboradores

Funcionalidades:
- CRUD de colaboradores (vendedores / personal)
- Búsqueda por nombre para el asistente conversacional
"""

from .router import router as collaborators_router
from .service import CollaboratorService

__all__ = ["collaborators_router", "CollaboratorService"]
