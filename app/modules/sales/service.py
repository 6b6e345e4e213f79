from typing import Dict, Optional
from datetime import datetime
from sqlalchemy.orm import Session
import logging

from .repository import SalesRepository
from .schemas import SaleCreate, SaleUpdate, SaleInfo, SaleItemInfo, SaleResponse
from app.core.exceptions import SaleHasReturnsError
from app.modules.payments.service import PaymentService
from app.shared.database.models import Sale, SaleItem, utcnow
from app.shared.database.transaction import run_atomic
from app.shared.schemas.common import PaginatedResponse, DeleteResponse
from app.shared.schemas.ledger import CollaboratorRef
from app.shared.services.debt_ledger import DebtLedger, to_money, ZERO
from app.shared.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

class SalesService:
    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id
        self.repository = SalesRepository(db, owner_id)

    @staticmethod
    def build_sale_info(sale: Sale) -> SaleInfo:
        returned: Dict[int, int] = {}
        for sale_return in sale.returns:
            returned[sale_return.product_id] = returned.get(sale_return.product_id, 0) + sale_return.quantity_returned

        return SaleInfo(
            id=sale.id,
            collaborator=CollaboratorRef.model_validate(sale.collaborator),
            total_amount=sale.total_amount,
            amount_paid=sale.amount_paid,
            amount_returned=sale.amount_returned,
            quantity_returned=sale.quantity_returned,
            payment_status=sale.payment_status,
            pending_debt=DebtLedger.pending_debt(sale),
            sale_date=sale.sale_date,
            notes=sale.notes,
            items=[
                SaleItemInfo(
                    id=item.id,
                    product_id=item.product_id,
                    product_name=item.product.name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                    returned_quantity=returned.get(item.product_id, 0)
                )
                for item in sale.items
            ],
            payments_count=len(sale.payments),
            returns_count=len(sale.returns),
            created_at=sale.created_at
        )

    async def create_sale(self, sale_data: SaleCreate) -> SaleResponse:
        """
        Registrar una venta en UNA transacción:

        1. Colaborador del mismo dueño
        2. Stock validado y bloqueado para TODAS las líneas (rechazo total si una falla)
        3. Venta + líneas (precio por defecto = precio del producto)
        4. Stock movido de restante a vendido
        5. Cobro inicial opcional registrado como cobro
        """
        def operation():
            collaborator = self.repository.get_collaborator(sale_data.collaborator_id)

            products = InventoryService.validate_and_reserve_stock(
                self.db,
                [{'product_id': i.product_id, 'quantity': i.quantity} for i in sale_data.items],
                self.owner_id
            )

            sale = self.repository.add(Sale(
                collaborator_id=collaborator.id,
                collaborator=collaborator,
                total_amount=ZERO,
                amount_paid=ZERO,
                amount_returned=ZERO,
                quantity_returned=0,
                sale_date=sale_data.sale_date or utcnow(),
                notes=sale_data.notes
            ))

            total = ZERO
            for item in sale_data.items:
                product = products[item.product_id]
                unit_price = to_money(item.unit_price if item.unit_price is not None else product.unit_price)
                subtotal = unit_price * item.quantity
                sale.items.append(SaleItem(
                    owner_id=self.owner_id,
                    product=product,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    subtotal=subtotal
                ))
                total += subtotal

            sale.total_amount = total
            DebtLedger.refresh_status(sale)
            self.db.flush()

            for line in sale.items:
                InventoryService.increase_sold(
                    self.db, line.product, line.quantity, 'sale', sale.id, f"Venta #{sale.id}"
                )

            if sale_data.initial_payment > 0:
                PaymentService.record_payment(
                    self.db,
                    sale,
                    sale_data.initial_payment,
                    cash=sale_data.cash,
                    digital_wallet=sale_data.digital_wallet,
                    payment_date=sale.sale_date,
                    notes="Cobro inicial"
                )

            return sale

        sale = run_atomic(self.db, operation, "registro de venta")
        logger.info(
            f"Venta registrada: #{sale.id} colaborador={sale.collaborator_id} "
            f"total={sale.total_amount} estado={sale.payment_status}"
        )

        return SaleResponse(
            success=True,
            message="Venta registrada exitosamente",
            sale=self.build_sale_info(sale)
        )

    async def get_sale(self, sale_id: int) -> SaleInfo:
        return self.build_sale_info(self.repository.get(sale_id))

    async def list_sales(
        self,
        page: int,
        limit: int,
        collaborator_id: Optional[int] = None,
        payment_status: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> PaginatedResponse:
        sales, total = self.repository.list(page, limit, collaborator_id, payment_status, date_from, date_to)
        return PaginatedResponse.build([self.build_sale_info(s) for s in sales], total, page, limit)

    async def update_sale(self, sale_id: int, update_data: SaleUpdate) -> SaleResponse:
        """Actualizar notas o fecha de una venta sin devoluciones"""
        changes = update_data.dict(exclude_unset=True)

        def operation():
            sale = self.repository.get(sale_id, lock=True)
            if self.repository.has_returns(sale.id):
                raise SaleHasReturnsError(
                    f"La venta {sale.id} tiene devoluciones y no puede modificarse",
                    details={"sale_id": sale.id}
                )
            for field, value in changes.items():
                setattr(sale, field, value)
            return sale

        sale = run_atomic(self.db, operation, "actualización de venta")
        logger.info(f"Venta actualizada: #{sale.id}")

        return SaleResponse(
            success=True,
            message="Venta actualizada exitosamente",
            sale=self.build_sale_info(sale)
        )

    async def delete_sale(self, sale_id: int) -> DeleteResponse:
        """
        Eliminar una venta sin devoluciones.

        Revierte el stock de cada línea y elimina sus cobros y líneas.
        """
        def operation():
            sale = self.repository.get(sale_id, lock=True)
            if self.repository.has_returns(sale.id):
                raise SaleHasReturnsError(
                    f"La venta {sale.id} tiene devoluciones y no puede eliminarse",
                    details={"sale_id": sale.id}
                )

            for line in sorted(sale.items, key=lambda i: i.product_id):
                product = self.repository.get_product(line.product_id, lock=True)
                InventoryService.decrease_sold(
                    self.db, product, line.quantity, 'sale_deletion', sale.id,
                    f"Eliminación de venta #{sale.id}"
                )

            self.repository.delete(sale)

        run_atomic(self.db, operation, "eliminación de venta")
        logger.info(f"Venta eliminada: #{sale_id}")

        return DeleteResponse(
            success=True,
            message=f"Venta #{sale_id} eliminada exitosamente",
            id=sale_id
        )
