# app/modules/sales/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import get_current_owner_id
from app.shared.schemas.common import PaginatedResponse, DeleteResponse
from .service import SalesService
from .schemas import SaleCreate, SaleUpdate, SaleInfo, SaleResponse

router = APIRouter()

@router.post("/", response_model=SaleResponse, status_code=201)
async def create_sale(
    sale_data: SaleCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Registrar una venta

    **Proceso:**
    1. Se valida el colaborador
    2. Se valida el stock de TODAS las líneas (si una falla, no se registra nada)
    3. Se registra la venta y se descuenta el stock
    4. Si hay cobro inicial, se registra como cobro

    **Errores:** NOT_FOUND, INSUFFICIENT_STOCK, PAYMENT_EXCEEDS_DEBT
    """
    service = SalesService(db, owner_id)
    return await service.create_sale(sale_data)

@router.get("/", response_model=PaginatedResponse)
async def list_sales(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    collaborator_id: Optional[int] = Query(None),
    payment_status: Optional[str] = Query(None, pattern="^(pending|partial|paid)$"),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Listar ventas (paginado, más recientes primero)"""
    service = SalesService(db, owner_id)
    return await service.list_sales(page, limit, collaborator_id, payment_status, date_from, date_to)

@router.get("/{sale_id}", response_model=SaleInfo)
async def get_sale(
    sale_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = SalesService(db, owner_id)
    return await service.get_sale(sale_id)

@router.put("/{sale_id}", response_model=SaleResponse)
async def update_sale(
    sale_id: int,
    update_data: SaleUpdate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Actualizar notas o fecha (los montos solo cambian vía cobros y devoluciones)"""
    service = SalesService(db, owner_id)
    return await service.update_sale(sale_id, update_data)

@router.delete("/{sale_id}", response_model=DeleteResponse)
async def delete_sale(
    sale_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Eliminar una venta sin devoluciones, revirtiendo stock y cobros"""
    service = SalesService(db, owner_id)
    return await service.delete_sale(sale_id)
