from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from app.shared.schemas.common import BaseResponse
from app.shared.schemas.ledger import SaleSnapshot, CollaboratorRef

class PaymentCreate(BaseModel):
    """Schema para registrar un cobro"""
    sale_id: int = Field(..., gt=0, description="Venta a la que se aplica el cobro")
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Monto cobrado")
    cash: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Parte en efectivo")
    digital_wallet: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Parte por billetera digital")
    contingency: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Gastos imprevistos descontados")
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "sale_id": 1,
                "amount": 60.00,
                "cash": 40.00,
                "digital_wallet": 20.00,
                "contingency": 0
            }
        }

class PaymentUpdate(BaseModel):
    """Solo campos informativos: el monto y su estado no se modifican"""
    cash: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    digital_wallet: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    contingency: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None

class PaymentInfo(BaseModel):
    id: int
    sale_id: int
    collaborator_id: int
    amount_paid: Decimal
    payment_status: str
    cash: Decimal
    digital_wallet: Decimal
    contingency: Decimal
    payment_date: datetime
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PaymentDetail(PaymentInfo):
    sale: SaleSnapshot
    collaborator: CollaboratorRef

class PaymentResponse(BaseResponse):
    payment: PaymentDetail

class PaymentDeleteResponse(BaseResponse):
    id: int
    sale: SaleSnapshot

class CollaboratorDebtResponse(BaseModel):
    """Deuda acumulada de un colaborador sobre todas sus ventas"""
    collaborator: CollaboratorRef
    sales_count: int
    total_sold: Decimal
    total_paid: Decimal
    pending_debt: Decimal
    pending_sales: List[SaleSnapshot]
