from pydantic import BaseModel, Field, validator
from typing import Optional
from decimal import Decimal
from datetime import datetime
from enum import Enum
from app.shared.schemas.common import BaseResponse

class Department(str, Enum):
    PRODUCTION = "Producción"
    SALES = "Ventas"
    ADMINISTRATION = "Administración"
    FINANCE = "Financiero"

class CollaboratorCreate(BaseModel):
    """Schema para crear un colaborador"""
    name: str = Field(..., min_length=1, max_length=255, description="Nombre del colaborador")
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    department: Optional[Department] = None
    salary: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Sueldo de referencia")

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('El nombre no puede estar vacío')
        return v.strip()

class CollaboratorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    department: Optional[Department] = None
    salary: Optional[Decimal] = Field(None, ge=0, decimal_places=2)

    @validator('name')
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('El nombre no puede estar vacío')
        return v.strip() if v else v

class CollaboratorInfo(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    salary: Decimal
    registered_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CollaboratorResponse(BaseResponse):
    collaborator: CollaboratorInfo
