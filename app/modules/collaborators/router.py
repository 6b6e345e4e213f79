# app/modules/collaborators/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import get_current_owner_id
from app.shared.schemas.common import PaginatedResponse, DeleteResponse
from .service import CollaboratorService
from .schemas import (
    CollaboratorCreate, CollaboratorUpdate, CollaboratorInfo, CollaboratorResponse, Department
)

router = APIRouter()

@router.post("/", response_model=CollaboratorResponse, status_code=201)
async def create_collaborator(
    collaborator_data: CollaboratorCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Registrar un colaborador

    **Departamentos válidos:** Producción, Ventas, Administración, Financiero
    """
    service = CollaboratorService(db, owner_id)
    return await service.create_collaborator(collaborator_data)

@router.get("/", response_model=PaginatedResponse)
async def list_collaborators(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None, description="Buscar por nombre"),
    department: Optional[Department] = Query(None),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Listar colaboradores (paginado)"""
    service = CollaboratorService(db, owner_id)
    return await service.list_collaborators(
        page, limit, search, department.value if department else None
    )

@router.get("/by-name/{name}", response_model=CollaboratorInfo)
async def get_collaborator_by_name(
    name: str,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Buscar colaborador por nombre exacto (sin distinguir mayúsculas)"""
    service = CollaboratorService(db, owner_id)
    return await service.find_by_name(name)

@router.get("/{collaborator_id}", response_model=CollaboratorInfo)
async def get_collaborator(
    collaborator_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = CollaboratorService(db, owner_id)
    return await service.get_collaborator(collaborator_id)

@router.put("/{collaborator_id}", response_model=CollaboratorResponse)
async def update_collaborator(
    collaborator_id: int,
    update_data: CollaboratorUpdate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = CollaboratorService(db, owner_id)
    return await service.update_collaborator(collaborator_id, update_data)

@router.delete("/{collaborator_id}", response_model=DeleteResponse)
async def delete_collaborator(
    collaborator_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Eliminar colaborador (rechazado si tiene ventas, cobros o registros)"""
    service = CollaboratorService(db, owner_id)
    return await service.delete_collaborator(collaborator_id)
