# app/shared/database/scoped_repository.py
from typing import Any, List, Tuple, Type
from sqlalchemy.orm import Session, Query

from app.core.exceptions import NotFoundError


class OwnerScopedRepository:
    """
    Repositorio base MULTI-TENANT.

    Toda consulta se filtra por owner_id; una entidad de otro dueño se
    comporta exactamente igual que una inexistente.
    """

    # Nombre legible usado en los mensajes de NotFound
    labels = {
        "Product": "Producto",
        "Collaborator": "Colaborador",
        "Sale": "Venta",
        "SaleItem": "Item de venta",
        "Payment": "Cobro",
        "SaleReturn": "Devolución",
        "PersonnelRecord": "Registro de gestión personal",
        "PayrollPayment": "Pago realizado",
    }

    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id

    def query(self, model: Type[Any]) -> Query:
        return self.db.query(model).filter(model.owner_id == self.owner_id)

    def get_owned(self, model: Type[Any], entity_id: int, lock: bool = False) -> Any:
        """Obtener entidad por id + owner; NotFoundError si no existe o no pertenece al dueño"""
        query = self.query(model).filter(model.id == entity_id)
        if lock:
            query = query.with_for_update()
        entity = query.first()

        if entity is None:
            label = self.labels.get(model.__name__, model.__name__)
            raise NotFoundError(
                f"{label} {entity_id} no encontrado",
                details={"entity": model.__name__, "id": entity_id}
            )
        return entity

    def add(self, entity: Any) -> Any:
        entity.owner_id = self.owner_id
        self.db.add(entity)
        return entity

    def paginate(self, query: Query, page: int, limit: int) -> Tuple[List[Any], int]:
        total = query.count()
        items = query.offset((page - 1) * limit).limit(limit).all()
        return items, total
