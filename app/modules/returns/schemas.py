from pydantic import BaseModel, Field, validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from app.shared.schemas.common import BaseResponse
from app.shared.schemas.ledger import SaleSnapshot

class ReturnItem(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0, description="Unidades devueltas")
    reason: str = Field(..., min_length=1, description="Motivo de la devolución")
    return_amount: Optional[Decimal] = Field(
        None, ge=0, decimal_places=2, description="Monto a descontar (por defecto cantidad x precio unitario)"
    )

    @validator('reason')
    def validate_reason(cls, v):
        if not v.strip():
            raise ValueError('El motivo no puede estar vacío')
        return v.strip()

class ReturnCreate(ReturnItem):
    """Schema para registrar una devolución"""
    sale_id: int = Field(..., gt=0)
    return_date: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "sale_id": 1,
                "product_id": 1,
                "quantity": 1,
                "reason": "Producto defectuoso"
            }
        }

class ReturnBatchCreate(BaseModel):
    """Varias devoluciones de una misma venta en una sola operación"""
    sale_id: int = Field(..., gt=0)
    items: List[ReturnItem] = Field(..., min_length=1)
    return_date: Optional[datetime] = None

class ReturnInfo(BaseModel):
    id: int
    sale_id: int
    product_id: int
    product_name: Optional[str] = None
    quantity_returned: int
    return_amount: Decimal
    refunded_amount: Decimal
    reason: str
    return_date: datetime
    created_at: Optional[datetime] = None

class ReturnDetail(ReturnInfo):
    sale: SaleSnapshot

class ReturnResponse(BaseResponse):
    returns: List[ReturnInfo]
    sale: SaleSnapshot

class ReturnDeleteResponse(BaseResponse):
    id: int
    sale: SaleSnapshot
