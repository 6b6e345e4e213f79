from pydantic import BaseModel, Field
from typing import Optional

class AssistantRequest(BaseModel):
    """Mensaje libre del usuario"""
    message: str = Field(..., min_length=1, max_length=1000)

    class Config:
        json_schema_extra = {
            "example": {"message": "quiero registrar una venta"}
        }

class AssistantReply(BaseModel):
    reply: str
    flow: Optional[str] = None
    step: Optional[str] = None
