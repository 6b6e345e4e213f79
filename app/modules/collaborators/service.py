from typing import Optional
from sqlalchemy.orm import Session
import logging

from .repository import CollaboratorRepository
from .schemas import CollaboratorCreate, CollaboratorUpdate, CollaboratorInfo, CollaboratorResponse
from app.core.exceptions import CollaboratorHasSalesError, NotFoundError
from app.shared.database.transaction import run_atomic
from app.shared.schemas.common import PaginatedResponse, DeleteResponse

logger = logging.getLogger(__name__)

class CollaboratorService:
    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id
        self.repository = CollaboratorRepository(db, owner_id)

    async def create_collaborator(self, collaborator_data: CollaboratorCreate) -> CollaboratorResponse:
        data = collaborator_data.dict()
        if data.get('department') is not None:
            data['department'] = collaborator_data.department.value

        collaborator = run_atomic(
            self.db,
            lambda: self.repository.create(data),
            "creación de colaborador"
        )
        logger.info(f"Colaborador creado: {collaborator.name} (id={collaborator.id})")

        return CollaboratorResponse(
            success=True,
            message="Colaborador creado exitosamente",
            collaborator=CollaboratorInfo.model_validate(collaborator)
        )

    async def get_collaborator(self, collaborator_id: int) -> CollaboratorInfo:
        return CollaboratorInfo.model_validate(self.repository.get(collaborator_id))

    async def find_by_name(self, name: str) -> CollaboratorInfo:
        collaborator = self.repository.find_by_name(name)
        if collaborator is None:
            raise NotFoundError(
                f"No se encontró un colaborador llamado '{name}'",
                details={"entity": "Collaborator", "name": name}
            )
        return CollaboratorInfo.model_validate(collaborator)

    async def list_collaborators(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        department: Optional[str] = None
    ) -> PaginatedResponse:
        collaborators, total = self.repository.list(page, limit, search, department)
        return PaginatedResponse.build(
            [CollaboratorInfo.model_validate(c) for c in collaborators], total, page, limit
        )

    async def update_collaborator(self, collaborator_id: int, update_data: CollaboratorUpdate) -> CollaboratorResponse:
        changes = update_data.dict(exclude_unset=True)
        if changes.get('department') is not None:
            changes['department'] = update_data.department.value

        def operation():
            collaborator = self.repository.get(collaborator_id, lock=True)
            for field, value in changes.items():
                if value is None and field in ('name', 'salary'):
                    continue
                setattr(collaborator, field, value)
            return collaborator

        collaborator = run_atomic(self.db, operation, "actualización de colaborador")
        logger.info(f"Colaborador actualizado: {collaborator.id}")

        return CollaboratorResponse(
            success=True,
            message="Colaborador actualizado exitosamente",
            collaborator=CollaboratorInfo.model_validate(collaborator)
        )

    async def delete_collaborator(self, collaborator_id: int) -> DeleteResponse:
        """Eliminar colaborador sin ventas, cobros ni registros de gestión asociados"""
        def operation():
            collaborator = self.repository.get(collaborator_id, lock=True)
            if self.repository.has_references(collaborator.id):
                raise CollaboratorHasSalesError(
                    f"El colaborador '{collaborator.name}' tiene ventas, cobros o registros asociados "
                    f"y no puede eliminarse",
                    details={"collaborator_id": collaborator.id}
                )
            name = collaborator.name
            self.repository.delete(collaborator)
            return name

        name = run_atomic(self.db, operation, "eliminación de colaborador")
        logger.info(f"Colaborador eliminado: {name} (id={collaborator_id})")

        return DeleteResponse(
            success=True,
            message=f"Colaborador '{name}' eliminado exitosamente",
            id=collaborator_id
        )
