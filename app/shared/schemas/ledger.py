# app/shared/schemas/ledger.py
from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.shared.database.models import Sale
from app.shared.services.debt_ledger import DebtLedger

class CollaboratorRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class SaleSnapshot(BaseModel):
    """Estado de deuda de una venta, incluido en respuestas de cobros y devoluciones"""
    id: int
    collaborator_id: int
    total_amount: Decimal
    amount_paid: Decimal
    amount_returned: Decimal
    quantity_returned: int
    payment_status: str
    pending_debt: Decimal
    sale_date: Optional[datetime] = None

    @classmethod
    def from_sale(cls, sale: Sale) -> "SaleSnapshot":
        return cls(
            id=sale.id,
            collaborator_id=sale.collaborator_id,
            total_amount=sale.total_amount,
            amount_paid=sale.amount_paid,
            amount_returned=sale.amount_returned,
            quantity_returned=sale.quantity_returned,
            payment_status=sale.payment_status,
            pending_debt=DebtLedger.pending_debt(sale),
            sale_date=sale.sale_date
        )
