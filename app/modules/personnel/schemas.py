from pydantic import BaseModel, Field, validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date
from enum import Enum
from app.shared.schemas.common import BaseResponse
from app.shared.schemas.ledger import CollaboratorRef

class AdjustmentKind(str, Enum):
    EXPENSE = "expense"
    SHORTAGE = "shortage"
    ADVANCE = "advance"

class PayrollMethod(str, Enum):
    CASH = "efectivo"
    TRANSFER = "transferencia"
    DEPOSIT = "deposito"
    CHECK = "cheque"

# ===== REGISTROS DE GESTIÓN PERSONAL =====

class PersonnelRecordCreate(BaseModel):
    """Schema para crear un registro de gestión personal"""
    collaborator_id: int = Field(..., gt=0)
    record_date: Optional[datetime] = None
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Gasto ocasional (informativo)")
    shortage: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Faltante")
    advance: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Adelanto")
    daily_pay: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Pago diario")

    @validator('description')
    def validate_description(cls, v):
        if not v.strip():
            raise ValueError('La descripción no puede estar vacía')
        return v.strip()

class AdjustmentCreate(BaseModel):
    """Gasto ocasional, faltante o adelanto aplicado al último registro"""
    kind: AdjustmentKind
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: Optional[str] = None

class PersonnelRecordInfo(BaseModel):
    id: int
    collaborator_id: int
    record_date: datetime
    description: str
    amount: Decimal
    shortage: Decimal
    advance: Decimal
    daily_pay: Decimal
    days_worked: int
    net_earned: Decimal

    class Config:
        from_attributes = True

class PersonnelRecordResponse(BaseResponse):
    record: PersonnelRecordInfo
    pending_balance: Decimal

# ===== PAGOS REALIZADOS =====

class PayrollPaymentCreate(BaseModel):
    """Schema para registrar un pago realizado a un colaborador"""
    collaborator_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    method: PayrollMethod = PayrollMethod.CASH
    payment_date: Optional[datetime] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    included_record_ids: List[int] = Field(default_factory=list)
    notes: str = ""

    @validator('period_end')
    def validate_period(cls, v, values):
        start = values.get('period_start')
        if v is not None and start is not None and v < start:
            raise ValueError('El fin del periodo no puede ser anterior al inicio')
        return v

class PayrollPaymentUpdate(BaseModel):
    """Solo campos informativos: el monto no se modifica"""
    method: Optional[PayrollMethod] = None
    payment_date: Optional[datetime] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    notes: Optional[str] = None

class PayrollPaymentInfo(BaseModel):
    id: int
    collaborator: CollaboratorRef
    payment_date: datetime
    amount: Decimal
    method: str
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    included_record_ids: List[int] = []
    notes: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PayrollPaymentResponse(BaseResponse):
    payment: PayrollPaymentInfo
    pending_balance: Decimal

class PersonnelSummary(BaseModel):
    """Saldo de un colaborador: generado (jornal - faltante - adelanto) menos pagado"""
    collaborator: CollaboratorRef
    records_count: int
    payments_count: int
    days_worked: int
    total_generated: Decimal
    total_paid: Decimal
    pending_balance: Decimal
    last_payment: Optional[PayrollPaymentInfo] = None
