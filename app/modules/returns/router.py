# app/modules/returns/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import get_current_owner_id
from app.shared.schemas.common import PaginatedResponse
from .service import ReturnsService
from .schemas import (
    ReturnCreate, ReturnBatchCreate, ReturnDetail, ReturnResponse, ReturnDeleteResponse
)

router = APIRouter()

@router.post("/", response_model=ReturnResponse, status_code=201)
async def create_return(
    return_data: ReturnCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Registrar una devolución

    **Efectos:**
    - Las unidades vuelven de vendido a restante
    - El total de la venta se reduce en el monto devuelto
    - Si lo pagado supera el nuevo total, el excedente queda como reembolso

    **Errores:** NOT_FOUND, RETURN_EXCEEDS_SOLD, VALIDATION_ERROR
    """
    service = ReturnsService(db, owner_id)
    return await service.create_return(return_data)

@router.post("/batch", response_model=ReturnResponse, status_code=201)
async def create_returns(
    batch: ReturnBatchCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Registrar varias devoluciones de una misma venta (todas o ninguna)"""
    service = ReturnsService(db, owner_id)
    return await service.create_returns(batch)

@router.get("/", response_model=PaginatedResponse)
async def list_returns(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sale_id: Optional[int] = Query(None),
    product_id: Optional[int] = Query(None),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Listar devoluciones (paginado)"""
    service = ReturnsService(db, owner_id)
    return await service.list_returns(page, limit, sale_id, product_id)

@router.get("/{return_id}", response_model=ReturnDetail)
async def get_return(
    return_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = ReturnsService(db, owner_id)
    return await service.get_return(return_id)

@router.delete("/{return_id}", response_model=ReturnDeleteResponse)
async def delete_return(
    return_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Eliminar una devolución restaurando stock y total de la venta"""
    service = ReturnsService(db, owner_id)
    return await service.delete_return(return_id)
