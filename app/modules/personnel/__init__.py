"""
Módulo de Gestión Personal

Funcionalidades:
- Registros diarios por colaborador (jornal, faltantes, adelantos, gastos ocasionales)
- Pagos realizados a colaboradores contra el saldo generado
- Resumen de saldo por colaborador (generado - pagado)
"""

from .router import router as personnel_router
from .service import PersonnelService

__all__ = ["personnel_router", "PersonnelService"]
