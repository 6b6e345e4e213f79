# app/modules/payments/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import get_current_owner_id
from app.shared.schemas.common import PaginatedResponse
from .service import PaymentService
from .schemas import (
    PaymentCreate, PaymentUpdate, PaymentDetail, PaymentResponse,
    PaymentDeleteResponse, CollaboratorDebtResponse
)

router = APIRouter()

@router.post("/", response_model=PaymentResponse, status_code=201)
async def create_payment(
    payment_data: PaymentCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Registrar un cobro contra una venta

    **Validaciones:**
    - La venta debe tener deuda pendiente (SALE_FULLY_PAID en caso contrario)
    - El monto no puede superar la deuda pendiente (PAYMENT_EXCEEDS_DEBT)

    **Estado del cobro:** `total` si salda la deuda pendiente, `partial` si no.
    """
    service = PaymentService(db, owner_id)
    return await service.create_payment(payment_data)

@router.get("/", response_model=PaginatedResponse)
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    collaborator_id: Optional[int] = Query(None),
    sale_id: Optional[int] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Listar cobros (paginado, más recientes primero)"""
    service = PaymentService(db, owner_id)
    return await service.list_payments(page, limit, collaborator_id, sale_id, date_from, date_to)

@router.get("/collaborators/{collaborator_id}/debt", response_model=CollaboratorDebtResponse)
async def get_collaborator_debt(
    collaborator_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Deuda pendiente de un colaborador sobre todas sus ventas"""
    service = PaymentService(db, owner_id)
    return await service.get_collaborator_debt(collaborator_id)

@router.get("/{payment_id}", response_model=PaymentDetail)
async def get_payment(
    payment_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = PaymentService(db, owner_id)
    return await service.get_payment(payment_id)

@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: int,
    update_data: PaymentUpdate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Actualizar desglose, fecha o notas de un cobro"""
    service = PaymentService(db, owner_id)
    return await service.update_payment(payment_id, update_data)

@router.delete("/{payment_id}", response_model=PaymentDeleteResponse)
async def delete_payment(
    payment_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Eliminar un cobro y restaurar la deuda de la venta"""
    service = PaymentService(db, owner_id)
    return await service.delete_payment(payment_id)
