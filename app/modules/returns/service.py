from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
import logging

from .repository import ReturnsRepository
from .schemas import (
    ReturnItem, ReturnCreate, ReturnBatchCreate, ReturnInfo, ReturnDetail,
    ReturnResponse, ReturnDeleteResponse
)
from app.core.exceptions import NotFoundError, ReturnExceedsSoldError, ValidationError
from app.shared.database.models import Sale, SaleReturn, utcnow
from app.shared.database.transaction import run_atomic
from app.shared.schemas.common import PaginatedResponse
from app.shared.schemas.ledger import SaleSnapshot
from app.shared.services.debt_ledger import DebtLedger, to_money, ZERO
from app.shared.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

class ReturnsService:
    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id
        self.repository = ReturnsRepository(db, owner_id)

    @staticmethod
    def _info(sale_return: SaleReturn) -> ReturnInfo:
        return ReturnInfo(
            id=sale_return.id,
            sale_id=sale_return.sale_id,
            product_id=sale_return.product_id,
            product_name=sale_return.product.name if sale_return.product else None,
            quantity_returned=sale_return.quantity_returned,
            return_amount=sale_return.return_amount,
            refunded_amount=sale_return.refunded_amount,
            reason=sale_return.reason,
            return_date=sale_return.return_date,
            created_at=sale_return.created_at
        )

    def _apply_return(self, sale: Sale, item: ReturnItem, return_date: Optional[datetime]) -> SaleReturn:
        """
        Registrar una devolución sobre una venta YA BLOQUEADA.

        - Cantidad tope = vendido en la venta para ese producto - devuelto antes
        - Monto por defecto = cantidad x precio unitario promedio de las líneas,
          acotado por el valor aún no devuelto; las últimas unidades descuentan
          exactamente ese resto. Un monto explícito no puede superar el tope
        """
        lines = [line for line in sale.items if line.product_id == item.product_id]
        if not lines:
            raise NotFoundError(
                f"El producto {item.product_id} no forma parte de la venta {sale.id}",
                details={"sale_id": sale.id, "product_id": item.product_id}
            )

        sold = sum(line.quantity for line in lines)
        already_returned = sum(
            r.quantity_returned for r in sale.returns if r.product_id == item.product_id
        )
        returnable = sold - already_returned
        if item.quantity > returnable:
            raise ReturnExceedsSoldError(
                f"No se pueden devolver {item.quantity} unidades: vendidas {sold}, "
                f"ya devueltas {already_returned}",
                details={
                    "sale_id": sale.id,
                    "product_id": item.product_id,
                    "sold": sold,
                    "already_returned": already_returned,
                    "requested": item.quantity
                }
            )

        line_value = sum((to_money(line.subtotal) for line in lines), ZERO)
        returned_value = sum(
            (to_money(r.return_amount) for r in sale.returns if r.product_id == item.product_id),
            ZERO
        )
        remaining_value = line_value - returned_value
        if item.quantity == returnable:
            # Últimas unidades: se descuenta exactamente lo que queda del valor de las líneas
            max_amount = remaining_value
        else:
            max_amount = min(to_money(line_value / sold * item.quantity), remaining_value)

        if item.return_amount is None:
            amount = max_amount
        else:
            amount = to_money(item.return_amount)
            if amount > max_amount:
                raise ValidationError(
                    f"El monto de devolución ({amount}) no puede superar {max_amount}",
                    details={"return_amount": str(amount), "max_amount": str(max_amount)}
                )

        product = self.repository.get_product(item.product_id, lock=True)

        sale_return = self.repository.add(SaleReturn(
            sale=sale,
            product=product,
            quantity_returned=item.quantity,
            return_amount=amount,
            refunded_amount=ZERO,
            reason=item.reason,
            return_date=return_date or utcnow()
        ))
        self.db.flush()

        InventoryService.decrease_sold(
            self.db, product, item.quantity, 'return', sale_return.id,
            f"Devolución #{sale_return.id} de venta #{sale.id}"
        )
        sale_return.refunded_amount = DebtLedger.apply_return(sale, amount, item.quantity)

        return sale_return

    async def create_return(self, return_data: ReturnCreate) -> ReturnResponse:
        """Registrar una devolución: stock, total de la venta y estado en una transacción"""
        def operation():
            sale = self.repository.get_sale(return_data.sale_id, lock=True)
            sale_return = self._apply_return(sale, return_data, return_data.return_date)
            return sale, [sale_return]

        sale, created = run_atomic(self.db, operation, "registro de devolución")
        return self._created_response(sale, created)

    async def create_returns(self, batch: ReturnBatchCreate) -> ReturnResponse:
        """Registrar varias devoluciones de una venta; si una falla no se registra ninguna"""
        def operation():
            sale = self.repository.get_sale(batch.sale_id, lock=True)
            created = [self._apply_return(sale, item, batch.return_date) for item in batch.items]
            return sale, created

        sale, created = run_atomic(self.db, operation, "registro de devoluciones")
        return self._created_response(sale, created)

    def _created_response(self, sale: Sale, created: List[SaleReturn]) -> ReturnResponse:
        for sale_return in created:
            logger.info(
                f"Devolución registrada: #{sale_return.id} venta={sale.id} "
                f"producto={sale_return.product_id} cantidad={sale_return.quantity_returned} "
                f"monto={sale_return.return_amount} reembolso={sale_return.refunded_amount}"
            )

        return ReturnResponse(
            success=True,
            message=f"{len(created)} devolución(es) registrada(s) exitosamente",
            returns=[self._info(r) for r in created],
            sale=SaleSnapshot.from_sale(sale)
        )

    async def get_return(self, return_id: int) -> ReturnDetail:
        sale_return = self.repository.get(return_id)
        return ReturnDetail(
            **self._info(sale_return).dict(),
            sale=SaleSnapshot.from_sale(sale_return.sale)
        )

    async def list_returns(
        self,
        page: int,
        limit: int,
        sale_id: Optional[int] = None,
        product_id: Optional[int] = None
    ) -> PaginatedResponse:
        returns, total = self.repository.list(page, limit, sale_id, product_id)
        return PaginatedResponse.build([self._info(r) for r in returns], total, page, limit)

    async def delete_return(self, return_id: int) -> ReturnDeleteResponse:
        """Inverso exacto: unidades vuelven a vendido y el total de la venta se restaura"""
        def operation():
            sale_return = self.repository.get(return_id, lock=True)
            sale = self.repository.get_sale(sale_return.sale_id, lock=True)
            product = self.repository.get_product(sale_return.product_id, lock=True)

            InventoryService.increase_sold(
                self.db, product, sale_return.quantity_returned, 'return_deletion', sale_return.id,
                f"Eliminación de devolución #{sale_return.id}"
            )
            DebtLedger.reverse_return(
                sale,
                sale_return.return_amount,
                sale_return.quantity_returned,
                sale_return.refunded_amount
            )
            self.repository.delete(sale_return)
            return sale

        sale = run_atomic(self.db, operation, "eliminación de devolución")
        logger.info(f"Devolución eliminada: #{return_id}; venta {sale.id} queda en {sale.payment_status}")

        return ReturnDeleteResponse(
            success=True,
            message="Devolución eliminada exitosamente",
            id=return_id,
            sale=SaleSnapshot.from_sale(sale)
        )
