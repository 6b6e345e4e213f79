from pydantic import BaseModel, Field, validator
from typing import Optional
from decimal import Decimal
from datetime import datetime
from app.shared.schemas.common import BaseResponse

class ProductCreate(BaseModel):
    """Schema para crear un producto"""
    name: str = Field(..., min_length=1, max_length=255, description="Nombre del producto")
    unit_price: Decimal = Field(..., gt=0, decimal_places=2, description="Precio de venta unitario")
    purchase_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2, description="Precio de compra unitario")
    total_quantity: int = Field(0, ge=0, description="Cantidad inicial en stock")

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('El nombre no puede estar vacío')
        return v.strip()

    @validator('purchase_price')
    def validate_purchase_price(cls, v, values):
        unit_price = values.get('unit_price')
        if v is not None and unit_price is not None and v > unit_price:
            raise ValueError('El precio de compra no puede ser mayor al precio de venta')
        return v

class ProductUpdate(BaseModel):
    """Schema para actualizar un producto (los contadores de venta no se editan)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    unit_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    purchase_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    total_quantity: Optional[int] = Field(None, ge=0)

    @validator('name')
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('El nombre no puede estar vacío')
        return v.strip() if v else v

class RestockRequest(BaseModel):
    """Schema para ingreso manual de stock"""
    quantity: int = Field(..., gt=0, description="Unidades a ingresar")
    notes: Optional[str] = Field(None, max_length=255)

class ProductInfo(BaseModel):
    id: int
    name: str
    unit_price: Decimal
    purchase_price: Optional[Decimal] = None
    total_quantity: int
    sold_quantity: int
    remaining_quantity: int
    stocked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ProductResponse(BaseResponse):
    """Respuesta de operaciones de escritura sobre productos"""
    product: ProductInfo
