# app/modules/personnel/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import get_current_owner_id
from app.shared.schemas.common import PaginatedResponse, DeleteResponse
from .service import PersonnelService
from .schemas import (
    PersonnelRecordCreate, AdjustmentCreate, PersonnelRecordInfo, PersonnelRecordResponse,
    PayrollPaymentCreate, PayrollPaymentUpdate, PayrollPaymentInfo, PayrollPaymentResponse,
    PersonnelSummary
)

router = APIRouter()

# ===== REGISTROS DE GESTIÓN PERSONAL =====

@router.post("/records", response_model=PersonnelRecordResponse, status_code=201)
async def create_record(
    record_data: PersonnelRecordCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Crear un registro de gestión personal

    Los días laborados se calculan solos: último registro + 1 (o 1 si es el primero).
    Neto generado = pago diario - faltante - adelanto.
    """
    service = PersonnelService(db, owner_id)
    return await service.create_record(record_data)

@router.get("/records", response_model=PaginatedResponse)
async def list_records(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    collaborator_id: Optional[int] = Query(None),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = PersonnelService(db, owner_id)
    return await service.list_records(page, limit, collaborator_id)

@router.get("/records/{record_id}", response_model=PersonnelRecordInfo)
async def get_record(
    record_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = PersonnelService(db, owner_id)
    return await service.get_record(record_id)

@router.delete("/records/{record_id}", response_model=DeleteResponse)
async def delete_record(
    record_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Eliminar registro (rechazado si el saldo quedaría negativo)"""
    service = PersonnelService(db, owner_id)
    return await service.delete_record(record_id)

@router.post("/collaborators/{collaborator_id}/adjustments", response_model=PersonnelRecordResponse)
async def add_adjustment(
    collaborator_id: int,
    adjustment: AdjustmentCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Agregar gasto ocasional (`expense`), faltante (`shortage`) o adelanto (`advance`)
    al último registro del colaborador
    """
    service = PersonnelService(db, owner_id)
    return await service.add_adjustment(collaborator_id, adjustment)

@router.get("/collaborators/{collaborator_id}/summary", response_model=PersonnelSummary)
async def get_summary(
    collaborator_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """Saldo del colaborador: generado, pagado y pendiente"""
    service = PersonnelService(db, owner_id)
    return await service.get_summary(collaborator_id)

# ===== PAGOS REALIZADOS =====

@router.post("/payments", response_model=PayrollPaymentResponse, status_code=201)
async def create_payroll_payment(
    payment_data: PayrollPaymentCreate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    """
    Registrar un pago realizado a un colaborador

    **Métodos:** efectivo, transferencia, deposito, cheque.
    Periodo por defecto: mes calendario de la fecha de pago.
    """
    service = PersonnelService(db, owner_id)
    return await service.create_payroll_payment(payment_data)

@router.get("/payments", response_model=PaginatedResponse)
async def list_payroll_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    collaborator_id: Optional[int] = Query(None),
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = PersonnelService(db, owner_id)
    return await service.list_payroll_payments(page, limit, collaborator_id)

@router.get("/payments/{payment_id}", response_model=PayrollPaymentInfo)
async def get_payroll_payment(
    payment_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = PersonnelService(db, owner_id)
    return await service.get_payroll_payment(payment_id)

@router.put("/payments/{payment_id}", response_model=PayrollPaymentResponse)
async def update_payroll_payment(
    payment_id: int,
    update_data: PayrollPaymentUpdate,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = PersonnelService(db, owner_id)
    return await service.update_payroll_payment(payment_id, update_data)

@router.delete("/payments/{payment_id}", response_model=DeleteResponse)
async def delete_payroll_payment(
    payment_id: int,
    owner_id: int = Depends(get_current_owner_id),
    db: Session = Depends(get_db)
):
    service = PersonnelService(db, owner_id)
    return await service.delete_payroll_payment(payment_id)
