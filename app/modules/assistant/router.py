# app/modules/assistant/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_owner_id
from .schemas import AssistantRequest, AssistantReply
from .service import AssistantService
from .store import FlowStore, get_flow_store

router = APIRouter()

@router.post("/interact", response_model=AssistantReply)
async def interact(
    request: AssistantRequest,
    owner_id: int = Depends(get_current_owner_id),
    store: FlowStore = Depends(get_flow_store),
    db: Session = Depends(get_db)
):
    """
    Enviar un mensaje al asistente

    **Ejemplos:** "agregar colaborador", "registrar venta", "registrar cobro",
    "ver inventario", "ver cobros". Escribe "cancelar" para abandonar la operación en curso.
    """
    service = AssistantService(db, owner_id, store)
    return await service.interact(request.message)
