from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

class UserLogin(BaseModel):
    """Schema para login de usuario"""
    email: str = Field(..., description="Email del usuario")
    password: str = Field(..., min_length=6, description="Contraseña del usuario")
    
    class Config:
        json_schema_extra = {
            "example": {
                "email": "dueno@minegocio.com",
                "password": "secreto123"
            }
        }

class UserRegister(BaseModel):
    """Schema para registrar una cuenta de negocio"""
    email: str = Field(..., min_length=3, max_length=255, description="Email del usuario")
    password: str = Field(..., min_length=6)
    business_name: str = Field(..., min_length=2, max_length=255, description="Nombre del negocio")

    @validator('email')
    def validate_email(cls, v):
        v = v.strip().lower()
        if '@' not in v:
            raise ValueError('Email inválido')
        return v

    @validator('business_name')
    def validate_business_name(cls, v):
        if not v.strip():
            raise ValueError('El nombre del negocio no puede estar vacío')
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "email": "dueno@minegocio.com",
                "password": "secreto123",
                "business_name": "Mi Negocio"
            }
        }

class UserResponse(BaseModel):
    """Schema para respuesta de usuario"""
    id: int
    email: str
    business_name: str
    is_active: bool
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    """Schema para respuesta de token"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
