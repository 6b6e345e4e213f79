from pydantic import BaseModel, Field, validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from app.shared.schemas.common import BaseResponse
from app.shared.schemas.ledger import CollaboratorRef

class SaleItemCreate(BaseModel):
    """Línea de venta"""
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0, description="Unidades vendidas")
    unit_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2, description="Precio unitario (por defecto el del producto)")

class SaleCreate(BaseModel):
    """Schema para registrar una venta"""
    collaborator_id: int = Field(..., gt=0)
    items: List[SaleItemCreate] = Field(..., min_length=1, description="Productos vendidos")
    initial_payment: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Cobro al momento de la venta")
    cash: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Parte del cobro inicial en efectivo")
    digital_wallet: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Parte del cobro inicial por billetera digital")
    sale_date: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "collaborator_id": 1,
                "items": [
                    {"product_id": 1, "quantity": 4, "unit_price": 25.00}
                ],
                "initial_payment": 0,
                "notes": "Venta del día"
            }
        }

class SaleUpdate(BaseModel):
    """Solo notas y fecha: los montos cambian únicamente vía cobros y devoluciones"""
    notes: Optional[str] = None
    sale_date: Optional[datetime] = None

    @validator('sale_date')
    def validate_sale_date(cls, v):
        if v is None:
            raise ValueError('La fecha de venta no puede ser nula')
        return v

class SaleItemInfo(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    returned_quantity: int = 0

class SaleInfo(BaseModel):
    id: int
    collaborator: CollaboratorRef
    total_amount: Decimal
    amount_paid: Decimal
    amount_returned: Decimal
    quantity_returned: int
    payment_status: str
    pending_debt: Decimal
    sale_date: datetime
    notes: Optional[str] = None
    items: List[SaleItemInfo]
    payments_count: int = 0
    returns_count: int = 0
    created_at: Optional[datetime] = None

class SaleResponse(BaseResponse):
    sale: SaleInfo
