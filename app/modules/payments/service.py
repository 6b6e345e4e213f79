from typing import Any, Optional
from decimal import Decimal
from datetime import datetime
from sqlalchemy.orm import Session
import logging

from .repository import PaymentRepository
from .schemas import (
    PaymentCreate, PaymentUpdate, PaymentDetail, PaymentResponse,
    PaymentDeleteResponse, CollaboratorDebtResponse
)
from app.core.exceptions import SaleFullyPaidError, PaymentExceedsDebtError, SaleHasReturnsError, ValidationError
from app.shared.database.models import Payment, Sale, Collaborator, utcnow
from app.shared.database.transaction import run_atomic
from app.shared.schemas.common import PaginatedResponse
from app.shared.schemas.ledger import SaleSnapshot, CollaboratorRef
from app.shared.services.debt_ledger import DebtLedger, to_money, ZERO

logger = logging.getLogger(__name__)

PAYMENT_PARTIAL = 'partial'
PAYMENT_TOTAL = 'total'

class PaymentService:
    def __init__(self, db: Session, owner_id: int):
        self.db = db
        self.owner_id = owner_id
        self.repository = PaymentRepository(db, owner_id)

    @staticmethod
    def record_payment(
        db: Session,
        sale: Sale,
        amount: Any,
        cash: Any = ZERO,
        digital_wallet: Any = ZERO,
        contingency: Any = ZERO,
        payment_date: Optional[datetime] = None,
        notes: Optional[str] = None
    ) -> Payment:
        """
        Registrar un cobro sobre una venta YA BLOQUEADA.

        Raises:
            ValidationError: El monto redondeado a centavos no es positivo
            SaleFullyPaidError: La venta no tiene deuda pendiente
            PaymentExceedsDebtError: El monto supera la deuda pendiente
        """
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationError(
                "El monto del cobro debe ser mayor a 0",
                details={"sale_id": sale.id, "amount": str(amount)}
            )
        pending = DebtLedger.pending_debt(sale)

        if pending <= ZERO:
            raise SaleFullyPaidError(
                f"La venta {sale.id} ya está pagada en su totalidad",
                details={"sale_id": sale.id}
            )
        if amount > pending:
            raise PaymentExceedsDebtError(
                f"El monto ({amount}) excede la deuda pendiente ({pending})",
                details={"sale_id": sale.id, "pending": str(pending), "amount": str(amount)}
            )

        payment = Payment(
            owner_id=sale.owner_id,
            collaborator_id=sale.collaborator_id,
            sale=sale,
            amount_paid=amount,
            payment_status=PAYMENT_TOTAL if amount >= pending else PAYMENT_PARTIAL,
            cash=to_money(cash),
            digital_wallet=to_money(digital_wallet),
            contingency=to_money(contingency),
            payment_date=payment_date or utcnow(),
            notes=notes
        )
        db.add(payment)
        DebtLedger.apply_payment(sale, amount)

        return payment

    def _detail(self, payment: Payment) -> PaymentDetail:
        return PaymentDetail(
            id=payment.id,
            sale_id=payment.sale_id,
            collaborator_id=payment.collaborator_id,
            amount_paid=payment.amount_paid,
            payment_status=payment.payment_status,
            cash=payment.cash,
            digital_wallet=payment.digital_wallet,
            contingency=payment.contingency,
            payment_date=payment.payment_date,
            notes=payment.notes,
            created_at=payment.created_at,
            sale=SaleSnapshot.from_sale(payment.sale),
            collaborator=CollaboratorRef.model_validate(payment.collaborator)
        )

    async def create_payment(self, payment_data: PaymentCreate) -> PaymentResponse:
        """Registrar un cobro: venta bloqueada, validación de deuda y actualización en una transacción"""
        def operation():
            sale = self.repository.get_sale(payment_data.sale_id, lock=True)
            return PaymentService.record_payment(
                self.db,
                sale,
                payment_data.amount,
                cash=payment_data.cash,
                digital_wallet=payment_data.digital_wallet,
                contingency=payment_data.contingency,
                payment_date=payment_data.payment_date,
                notes=payment_data.notes
            )

        payment = run_atomic(self.db, operation, "registro de cobro")
        logger.info(
            f"Cobro registrado: {payment.amount_paid} en venta {payment.sale_id} "
            f"({payment.payment_status}); estado de venta: {payment.sale.payment_status}"
        )

        return PaymentResponse(
            success=True,
            message="Cobro registrado exitosamente",
            payment=self._detail(payment)
        )

    async def get_payment(self, payment_id: int) -> PaymentDetail:
        return self._detail(self.repository.get(payment_id))

    async def list_payments(
        self,
        page: int,
        limit: int,
        collaborator_id: Optional[int] = None,
        sale_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> PaginatedResponse:
        payments, total = self.repository.list(page, limit, collaborator_id, sale_id, date_from, date_to)
        return PaginatedResponse.build([self._detail(p) for p in payments], total, page, limit)

    async def update_payment(self, payment_id: int, update_data: PaymentUpdate) -> PaymentResponse:
        """Actualizar desglose, fecha o notas; el monto es inmutable"""
        changes = update_data.dict(exclude_unset=True)

        def operation():
            payment = self.repository.get(payment_id, lock=True)
            for field, value in changes.items():
                if field in ('cash', 'digital_wallet', 'contingency'):
                    value = to_money(value)
                elif field == 'payment_date' and value is None:
                    continue
                setattr(payment, field, value)
            return payment

        payment = run_atomic(self.db, operation, "actualización de cobro")
        logger.info(f"Cobro actualizado: {payment.id}")

        return PaymentResponse(
            success=True,
            message="Cobro actualizado exitosamente",
            payment=self._detail(payment)
        )

    async def delete_payment(self, payment_id: int) -> PaymentDeleteResponse:
        """Eliminar un cobro revirtiendo su efecto sobre la deuda de la venta"""
        def operation():
            payment = self.repository.get(payment_id, lock=True)
            sale = self.repository.get_sale(payment.sale_id, lock=True)

            if self.repository.sale_has_refunded_returns(sale.id):
                raise SaleHasReturnsError(
                    f"La venta {sale.id} tiene devoluciones con reembolso; "
                    f"elimine primero esas devoluciones para revertir el cobro",
                    details={"sale_id": sale.id, "payment_id": payment.id}
                )

            DebtLedger.reverse_payment(sale, payment.amount_paid)
            self.repository.delete(payment)
            return sale

        sale = run_atomic(self.db, operation, "eliminación de cobro")
        logger.info(f"Cobro eliminado: {payment_id}; venta {sale.id} queda en {sale.payment_status}")

        return PaymentDeleteResponse(
            success=True,
            message="Cobro eliminado exitosamente",
            id=payment_id,
            sale=SaleSnapshot.from_sale(sale)
        )

    async def get_collaborator_debt(self, collaborator_id: int) -> CollaboratorDebtResponse:
        """Total vendido, cobrado y pendiente de un colaborador"""
        collaborator = self.repository.get_owned(Collaborator, collaborator_id)
        sales = self.repository.sales_of_collaborator(collaborator.id)

        total_sold = sum((to_money(s.total_amount) for s in sales), Decimal("0.00"))
        total_paid = sum((to_money(s.amount_paid) for s in sales), Decimal("0.00"))

        return CollaboratorDebtResponse(
            collaborator=CollaboratorRef.model_validate(collaborator),
            sales_count=len(sales),
            total_sold=total_sold,
            total_paid=total_paid,
            pending_debt=sum((DebtLedger.pending_debt(s) for s in sales), Decimal("0.00")),
            pending_sales=[SaleSnapshot.from_sale(s) for s in sales if DebtLedger.pending_debt(s) > ZERO]
        )
