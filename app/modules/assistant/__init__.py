"""
Módulo Asistente Conversacional

Funcionalidades:
- Clasificación de mensajes en intenciones (regex, intercambiable)
- Flujos guiados paso a paso con estado explícito por dueño
- Ejecución de los comandos resultantes sobre los servicios del negocio
"""

from .router import router as assistant_router
from .service import AssistantService

__all__ = ["assistant_router", "AssistantService"]
