from sqlalchemy import exists, func
from typing import List, Optional, Tuple

from app.shared.database.models import (
    Collaborator, Sale, Payment, PersonnelRecord, PayrollPayment
)
from app.shared.database.scoped_repository import OwnerScopedRepository

class CollaboratorRepository(OwnerScopedRepository):

    def create(self, collaborator_data: dict) -> Collaborator:
        return self.add(Collaborator(**collaborator_data))

    def get(self, collaborator_id: int, lock: bool = False) -> Collaborator:
        return self.get_owned(Collaborator, collaborator_id, lock=lock)

    def list(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        department: Optional[str] = None
    ) -> Tuple[List[Collaborator], int]:
        query = self.query(Collaborator)
        if search:
            query = query.filter(Collaborator.name.ilike(f"%{search}%"))
        if department:
            query = query.filter(Collaborator.department == department)
        return self.paginate(query.order_by(Collaborator.name, Collaborator.id), page, limit)

    def find_by_name(self, name: str) -> Optional[Collaborator]:
        """Búsqueda exacta sin distinguir mayúsculas"""
        return self.query(Collaborator).filter(
            func.lower(Collaborator.name) == name.strip().lower()
        ).first()

    def has_references(self, collaborator_id: int) -> bool:
        """Ventas, cobros, registros de gestión o pagos que lo referencian"""
        for model in (Sale, Payment, PersonnelRecord, PayrollPayment):
            referenced = self.db.query(
                exists().where(
                    model.collaborator_id == collaborator_id,
                    model.owner_id == self.owner_id
                )
            ).scalar()
            if referenced:
                return True
        return False

    def delete(self, collaborator: Collaborator) -> None:
        self.db.delete(collaborator)
